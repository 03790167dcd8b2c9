import logging
from typing import Optional
from sqlalchemy.orm import Session


class BaseService:
    """
    Common plumbing for the service layer: the request-scoped session,
    the acting user (when known) and a per-service logger.
    """

    def __init__(self, db: Session, actor_id: Optional[int] = None):
        self.db = db
        self.actor_id = actor_id
        self._logger = logging.getLogger(self.__class__.__module__)

    def commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def log_info(self, message: str, **extra):
        self._logger.info(message, extra=extra or None)

    def log_warning(self, message: str, **extra):
        self._logger.warning(message, extra=extra or None)
