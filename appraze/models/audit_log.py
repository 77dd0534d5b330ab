from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func
from appraze.database import Base
from appraze.models._common import new_id


class AuditLog(Base):
    """Append-only record of user-visible actions."""
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), nullable=True, index=True)
    organization_id = Column(String(36), nullable=True, index=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String(36), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
