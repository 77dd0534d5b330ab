"""Shared service base: session, tenant scope, record store and logging helpers."""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from appraze.services.record_store import RecordStore


class BaseService:
    def __init__(self, db: Session, org_id: Optional[str] = None):
        self.db = db
        self.org_id = org_id
        self.store = RecordStore(db)
        self._logger = logging.getLogger(self.__class__.__module__)

    def log_info(self, message: str):
        self._logger.info(message)

    def log_warning(self, message: str):
        self._logger.warning(message)

    def log_error(self, message: str, exc_info: bool = False):
        self._logger.error(message, exc_info=exc_info)
