from typing import Any, Optional

from appraze.services.base import BaseService


class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[str],
        user_id: Optional[str],
        details: Optional[dict] = None,
        organization_id: Optional[str] = None,
    ):
        """
        Create a centralized audit log entry.
        Strictly append-only. Runs as its own store call, after the audited
        action has already been written.
        """
        try:
            # Ensure serialization of nested Pydantic models in details
            def sanitize(obj: Any):
                if hasattr(obj, "model_dump"):
                    return obj.model_dump(mode="json")
                if isinstance(obj, dict):
                    return {k: sanitize(v) for k, v in obj.items()}
                if isinstance(obj, list):
                    return [sanitize(i) for i in obj]
                return obj

            rows = self.store.insert("audit_logs", [{
                "action": action,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "user_id": user_id,
                "details": sanitize(details or {}),
                "organization_id": organization_id or self.org_id,
            }])
            return rows[0]
        except Exception as e:
            self._logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None  # Never break the main app flow because of a logging failure

    # Static wrapper for call sites that only hold a session
    @staticmethod
    def log(db, *args, **kwargs):
        service = AuditService(db)
        return service.log_action(*args, **kwargs)
