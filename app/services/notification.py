import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Writes notification rows for the delivery service to pick up.
    Fire-and-forget: failures are logged and swallowed.
    """

    @staticmethod
    def notify_users(
        db: Session,
        user_ids: Iterable[int],
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> int:
        recipients = sorted({uid for uid in user_ids if uid is not None})
        if not recipients:
            return 0
        try:
            db.add_all([
                Notification(user_id=uid, title=title, message=message, type=type, link=link)
                for uid in recipients
            ])
            db.commit()
            return len(recipients)
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to queue notifications '{title}': {e}", exc_info=True)
            return 0

    @staticmethod
    def notify_user(
        db: Session,
        user_id: int,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> int:
        return NotificationService.notify_users(db, [user_id], title, message, type, link)
