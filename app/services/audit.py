from typing import Any, Optional

from app.models.audit_log import AuditLog
from app.services.base import BaseService


def _sanitize(obj: Any) -> Any:
    """Make nested pydantic models, dates and dataclass-like values JSON-safe."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return obj


class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        user_role: Optional[str] = None,
        details: Optional[dict] = None,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None,
    ) -> Optional[AuditLog]:
        """
        Append an audit entry and commit it.
        Best-effort: call after the primary operation has committed; a failure
        here is logged and never reaches the caller.
        """
        try:
            db_log = AuditLog(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=self.actor_id,
                user_role=user_role,
                details=_sanitize(details or {}),
                before_state=_sanitize(before_state),
                after_state=_sanitize(after_state),
            )
            self.db.add(db_log)
            self.db.commit()
            return db_log
        except Exception as e:
            self.db.rollback()
            self._logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None
