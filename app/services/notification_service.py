"""
Notification service: activity notices delivered to a single user.

Notifications are written as a side effect of comments, likes, shares and
friendships, inside the same transaction as the action that caused them.
Only the receiving user may read or acknowledge them.
"""
import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    NOT_AUTHORIZED_TO_READ_NOTIFICATION,
    NOTIFICATION_NOT_FOUND,
    NotFoundError,
)
from app.models import Notification, NotificationType
from app.permissions import require_owner

logger = logging.getLogger(__name__)


def _notification_to_dict(notification: Notification) -> dict:
    return {
        "id": str(notification.id),
        "notification_type": notification.notification_type.value,
        "content": notification.content,
        "redirect_path": notification.redirect_path,
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
        "creating_user_id": str(notification.creating_user_id),
        "receiving_user_id": str(notification.receiving_user_id),
    }


async def notify(
    db: AsyncSession,
    receiving_user_id: uuid.UUID,
    creating_user_id: uuid.UUID,
    notification_type: NotificationType,
    content: str,
    redirect_path: str | None = None,
) -> Notification | None:
    """
    Queue a notification for *receiving_user_id*.

    Users are never notified about their own actions; returns None then.
    """
    if receiving_user_id == creating_user_id:
        return None

    notification = Notification(
        receiving_user_id=receiving_user_id,
        creating_user_id=creating_user_id,
        notification_type=notification_type,
        content=content,
        redirect_path=redirect_path,
    )
    db.add(notification)
    await db.flush()
    logger.debug("Notification %s (%s) for %s", notification.id, notification_type.value, receiving_user_id)
    return notification


async def list_notifications(db: AsyncSession, caller_id: uuid.UUID) -> list[dict]:
    """Return the caller's notifications, newest first."""
    q = (
        select(Notification)
        .where(Notification.receiving_user_id == caller_id)
        .order_by(Notification.created_at.desc())
    )
    result = await db.execute(q)
    return [_notification_to_dict(n) for n in result.scalars().all()]


async def mark_notification_read(
    db: AsyncSession, caller_id: uuid.UUID, notification_id: uuid.UUID
) -> dict:
    result = await db.execute(select(Notification).where(Notification.id == notification_id))
    notification = result.scalar_one_or_none()
    if notification is None:
        raise NotFoundError(NOTIFICATION_NOT_FOUND)
    require_owner(caller_id, notification.receiving_user_id, NOT_AUTHORIZED_TO_READ_NOTIFICATION)

    notification.is_read = True
    await db.flush()
    return _notification_to_dict(notification)


async def mark_all_read(db: AsyncSession, caller_id: uuid.UUID) -> int:
    """Mark every unread notification of the caller as read; return how many."""
    result = await db.execute(
        update(Notification)
        .where(Notification.receiving_user_id == caller_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount
