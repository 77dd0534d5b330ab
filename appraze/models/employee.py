from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.sql import func
import enum
from appraze.database import Base
from appraze.models._common import new_id


class EmployeeStatus(str, enum.Enum):
    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    INACTIVE = "Inactive"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), index=True, nullable=False)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=True)  # creator
    name = Column(String, nullable=False, index=True)
    position = Column(String, nullable=True)
    department = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    status = Column(String, default=EmployeeStatus.ACTIVE.value, nullable=False)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
