import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from database import Notification, SessionLocal

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def send_budget_alert(
        self, user_id: int, budget_name: str, percentage_used: float
    ) -> bool:
        ...


def budget_alert_message(budget_name: str, percentage_used: float) -> str:
    if percentage_used >= 100:
        return f"You have exceeded your '{budget_name}' budget ({percentage_used:.1f}% used)."
    return f"You have used {percentage_used:.1f}% of your '{budget_name}' budget."


class DatabaseNotificationSink:
    """Stores budget alerts as in-app notifications for the owning user."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def send_budget_alert(self, user_id, budget_name, percentage_used):
        with self.session_factory() as db:
            try:
                db.add(
                    Notification(
                        user_id=user_id,
                        budget_name=budget_name,
                        percentage_used=percentage_used,
                        message=budget_alert_message(budget_name, percentage_used),
                    )
                )
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception(
                    "Could not store budget alert for user %s (%s)", user_id, budget_name
                )
                return False

        logger.info(
            "Budget alert for user %s: %s at %.1f%%", user_id, budget_name, percentage_used
        )
        return True


def list_notifications(db, user_id: int, unread_only: bool = False):
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def mark_read(db, notification_id: int, user_id: int):
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if notification is None:
        return None
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification
