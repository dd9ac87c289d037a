"""
Comment service: ownership-checked CRUD for comments on a publication.

A comment can only be created on a publication that exists; no row is
written otherwise.  Editing and deleting follow the same gate as
publications: existence first, then ownership.  Every write invalidates
the parent publication's cache entries because the DTO carries
``comments_count``.
"""
import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from app.config import settings
from app.exceptions import (
    COMMENT_NOT_FOUND,
    NOT_AUTHORIZED_TO_DELETE_COMMENT,
    NOT_AUTHORIZED_TO_EDIT_COMMENT,
    NotFoundError,
)
from app.models import Comment, NotificationType, utcnow
from app.permissions import require_owner
from app.services import notification_service
from app.services.publication_service import get_publication_or_raise, validate_content

logger = logging.getLogger(__name__)


def _comment_to_dict(comment: Comment) -> dict:
    return {
        "id": str(comment.id),
        "content": comment.content,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
        "modified_at": comment.modified_at.isoformat() if comment.modified_at else None,
        "publication_id": str(comment.publication_id),
        "user_id": str(comment.user_id),
    }


async def _get_comment_or_raise(db: AsyncSession, comment_id: uuid.UUID) -> Comment:
    result = await db.execute(select(Comment).where(Comment.id == comment_id))
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFoundError(COMMENT_NOT_FOUND)
    return comment


async def list_comments_for_publication(db: AsyncSession, publication_id: uuid.UUID) -> list[dict]:
    """Return the comments of *publication_id*, oldest first."""
    await get_publication_or_raise(db, publication_id)
    q = (
        select(Comment)
        .where(Comment.publication_id == publication_id)
        .order_by(Comment.created_at.asc())
    )
    result = await db.execute(q)
    return [_comment_to_dict(c) for c in result.scalars().all()]


async def create_comment(
    db: AsyncSession,
    caller_id: uuid.UUID,
    publication_id: uuid.UUID,
    content: str,
) -> dict:
    """
    Add a comment owned by *caller_id* to *publication_id*.

    Raises ``NotFoundError`` before anything is written when the
    publication does not exist.  The publication author is notified
    unless they commented on their own post.
    """
    publication = await get_publication_or_raise(db, publication_id)
    validate_content(content, settings.COMMENT_MAX_LENGTH, "Comment")

    now = utcnow()
    comment = Comment(
        content=content,
        publication_id=publication_id,
        user_id=caller_id,
        created_at=now,
    )
    db.add(comment)
    publication.last_commented_at = now
    publication.latest_activity = now
    await db.flush()

    await notification_service.notify(
        db,
        receiving_user_id=publication.author_id,
        creating_user_id=caller_id,
        notification_type=NotificationType.COMMENT,
        content="commented on your publication.",
        redirect_path=f"/publications/{publication_id}",
    )
    await cache.invalidate_publication(publication_id)
    logger.info("Comment %s on publication %s created by %s", comment.id, publication_id, caller_id)
    return _comment_to_dict(comment)


async def update_comment(
    db: AsyncSession,
    caller_id: uuid.UUID,
    comment_id: uuid.UUID,
    content: str,
) -> dict:
    comment = await _get_comment_or_raise(db, comment_id)
    require_owner(caller_id, comment.user_id, NOT_AUTHORIZED_TO_EDIT_COMMENT)
    validate_content(content, settings.COMMENT_MAX_LENGTH, "Comment")

    comment.content = content
    comment.modified_at = utcnow()
    await db.flush()

    await cache.invalidate_publication(comment.publication_id)
    logger.info("Comment %s updated by %s", comment_id, caller_id)
    return _comment_to_dict(comment)


async def delete_comment(db: AsyncSession, caller_id: uuid.UUID, comment_id: uuid.UUID) -> None:
    """Delete a single comment the caller owns; the publication is untouched."""
    comment = await _get_comment_or_raise(db, comment_id)
    require_owner(caller_id, comment.user_id, NOT_AUTHORIZED_TO_DELETE_COMMENT)

    publication_id = comment.publication_id
    await db.execute(delete(Comment).where(Comment.id == comment_id))
    await db.flush()

    await cache.invalidate_publication(publication_id)
    logger.info("Comment %s deleted by %s", comment_id, caller_id)
