"""
Reaction service: likes and shares on a publication.

Both are join records: the row existing is the fact.  A user holds at most
one like and one share per publication; adding a second is a conflict and
removing a missing one is not-found.  Removal is inherently scoped to the
caller's own row.
"""
import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from app.exceptions import (
    ALREADY_LIKED,
    ALREADY_SHARED,
    LIKE_NOT_FOUND,
    SHARE_NOT_FOUND,
    ConflictError,
    NotFoundError,
)
from app.models import Like, NotificationType, Share, utcnow
from app.services import notification_service
from app.services.publication_service import get_publication_or_raise

logger = logging.getLogger(__name__)

# model, conflict message, missing message, notification type, notice text
_KINDS = {
    Like: (ALREADY_LIKED, LIKE_NOT_FOUND, NotificationType.LIKE, "liked your publication."),
    Share: (ALREADY_SHARED, SHARE_NOT_FOUND, NotificationType.SHARE, "shared your publication."),
}


def _reaction_to_dict(reaction: Like | Share) -> dict:
    return {
        "id": str(reaction.id),
        "created_at": reaction.created_at.isoformat() if reaction.created_at else None,
        "publication_id": str(reaction.publication_id),
        "user_id": str(reaction.user_id),
    }


async def _find(db: AsyncSession, model, caller_id: uuid.UUID, publication_id: uuid.UUID):
    result = await db.execute(
        select(model).where(model.publication_id == publication_id, model.user_id == caller_id)
    )
    return result.scalar_one_or_none()


async def _add(db: AsyncSession, model, caller_id: uuid.UUID, publication_id: uuid.UUID) -> dict:
    conflict_message, _, notification_type, notice = _KINDS[model]
    publication = await get_publication_or_raise(db, publication_id)
    if await _find(db, model, caller_id, publication_id) is not None:
        raise ConflictError(conflict_message)

    now = utcnow()
    reaction = model(publication_id=publication_id, user_id=caller_id, created_at=now)
    db.add(reaction)
    publication.latest_activity = now
    await db.flush()

    await notification_service.notify(
        db,
        receiving_user_id=publication.author_id,
        creating_user_id=caller_id,
        notification_type=notification_type,
        content=notice,
        redirect_path=f"/publications/{publication_id}",
    )
    await cache.invalidate_publication(publication_id)
    logger.info("%s on publication %s by %s", model.__name__, publication_id, caller_id)
    return _reaction_to_dict(reaction)


async def _remove(db: AsyncSession, model, caller_id: uuid.UUID, publication_id: uuid.UUID) -> None:
    _, missing_message, _, _ = _KINDS[model]
    await get_publication_or_raise(db, publication_id)
    reaction = await _find(db, model, caller_id, publication_id)
    if reaction is None:
        raise NotFoundError(missing_message)

    await db.execute(delete(model).where(model.id == reaction.id))
    await db.flush()
    await cache.invalidate_publication(publication_id)
    logger.info("%s on publication %s removed by %s", model.__name__, publication_id, caller_id)


async def _list(db: AsyncSession, model, publication_id: uuid.UUID) -> list[dict]:
    await get_publication_or_raise(db, publication_id)
    result = await db.execute(
        select(model).where(model.publication_id == publication_id).order_by(model.created_at.asc())
    )
    return [_reaction_to_dict(r) for r in result.scalars().all()]


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def like_publication(db: AsyncSession, caller_id: uuid.UUID, publication_id: uuid.UUID) -> dict:
    return await _add(db, Like, caller_id, publication_id)


async def unlike_publication(db: AsyncSession, caller_id: uuid.UUID, publication_id: uuid.UUID) -> None:
    await _remove(db, Like, caller_id, publication_id)


async def list_likes(db: AsyncSession, publication_id: uuid.UUID) -> list[dict]:
    return await _list(db, Like, publication_id)


async def share_publication(db: AsyncSession, caller_id: uuid.UUID, publication_id: uuid.UUID) -> dict:
    return await _add(db, Share, caller_id, publication_id)


async def unshare_publication(db: AsyncSession, caller_id: uuid.UUID, publication_id: uuid.UUID) -> None:
    await _remove(db, Share, caller_id, publication_id)


async def list_shares(db: AsyncSession, publication_id: uuid.UUID) -> list[dict]:
    return await _list(db, Share, publication_id)
