"""
Publication service: ownership-checked CRUD for the Publication aggregate.

Design notes
------------
- Every mutation runs the same gate: load the record (``NotFoundError``
  when absent), then compare its author with the caller through
  ``app.permissions.require_owner`` (``ForbiddenError`` otherwise).  The
  existence check always comes first.
- Deleting a publication is an explicit batch delete of its comments,
  likes, shares and media followed by the publication row.  The whole
  batch succeeds or the session is rolled back; the request transaction
  owned by ``get_db`` commits it.
- Relationships are ``lazy="raise"``; reads use ``joinedload`` for the
  author and ``selectinload`` for collections, with ``populate_existing``
  so counts are never served from a stale identity map.
- List and detail reads go through the cache-aside layer; every write
  invalidates the affected keys.
"""
import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from app.cache import PUBLICATION_LIST_KEY, cache, publication_detail_key
from app.config import settings
from app.exceptions import (
    NOT_AUTHORIZED_TO_ATTACH_MEDIA,
    NOT_AUTHORIZED_TO_DELETE_PUBLICATION,
    NOT_AUTHORIZED_TO_EDIT_PUBLICATION,
    PUBLICATION_NOT_FOUND,
    TOPIC_NOT_FOUND,
    USER_NOT_FOUND,
    NotFoundError,
    ValidationError,
)
from app.models import Comment, Like, MediaFile, Publication, Share, Topic, User, utcnow
from app.permissions import require_owner

logger = logging.getLogger(__name__)

# Children removed together with their publication, in deletion order.
DEPENDENT_MODELS = (Comment, Like, Share, MediaFile)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def validate_content(content: str | None, max_length: int, label: str) -> str:
    """Return *content* unchanged, or raise ``ValidationError``."""
    if content is None or not content.strip():
        raise ValidationError(f"{label} content is required!")
    if len(content) > max_length:
        raise ValidationError(f"{label} content must be at most {max_length} characters!")
    return content


def _with_relations(stmt):
    return stmt.options(
        joinedload(Publication.author),
        selectinload(Publication.comments),
        selectinload(Publication.likes),
        selectinload(Publication.shares),
        selectinload(Publication.media),
    ).execution_options(populate_existing=True)


def _iso(value):
    return value.isoformat() if value else None


def media_to_dict(media: MediaFile) -> dict:
    return {
        "id": str(media.id),
        "title": media.title,
        "url": media.url,
        "created_at": _iso(media.created_at),
        "publication_id": str(media.publication_id),
    }


def _publication_to_dict(publication: Publication) -> dict:
    author = publication.author
    return {
        "id": str(publication.id),
        "content": publication.content,
        "created_at": _iso(publication.created_at),
        "modified_at": _iso(publication.modified_at),
        "latest_activity": _iso(publication.latest_activity),
        "last_commented_at": _iso(publication.last_commented_at),
        "author_id": str(publication.author_id),
        "topic_id": str(publication.topic_id) if publication.topic_id else None,
        "author": {
            "id": str(author.id),
            "first_name": author.first_name,
            "last_name": author.last_name,
        } if author is not None else None,
        "likes_count": len(publication.likes),
        "comments_count": len(publication.comments),
        "shares_count": len(publication.shares),
        "media": [media_to_dict(m) for m in publication.media],
    }


async def get_publication_or_raise(db: AsyncSession, publication_id: uuid.UUID) -> Publication:
    """Return the bare Publication row or raise ``NotFoundError``."""
    result = await db.execute(select(Publication).where(Publication.id == publication_id))
    publication = result.scalar_one_or_none()
    if publication is None:
        raise NotFoundError(PUBLICATION_NOT_FOUND)
    return publication


async def _load_publication_dict(db: AsyncSession, publication_id: uuid.UUID) -> dict:
    result = await db.execute(
        _with_relations(select(Publication).where(Publication.id == publication_id))
    )
    publication = result.unique().scalar_one_or_none()
    if publication is None:
        raise NotFoundError(PUBLICATION_NOT_FOUND)
    return _publication_to_dict(publication)


async def _list_where(db: AsyncSession, *criteria) -> list[dict]:
    q = _with_relations(select(Publication).where(*criteria)).order_by(
        Publication.created_at.desc()
    )
    result = await db.execute(q)
    return [_publication_to_dict(p) for p in result.unique().scalars().all()]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def list_publications(db: AsyncSession) -> list[dict]:
    """Return every publication, newest first."""
    cached = await cache.get(PUBLICATION_LIST_KEY)
    if cached is not None:
        return cached

    items = await _list_where(db)
    await cache.set(PUBLICATION_LIST_KEY, items, ttl=settings.CACHE_TTL_LIST)
    return items


async def get_publication(db: AsyncSession, publication_id: uuid.UUID) -> dict:
    """Return the publication DTO for *publication_id* or raise ``NotFoundError``."""
    cache_key = publication_detail_key(publication_id)
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    data = await _load_publication_dict(db, publication_id)
    await cache.set(cache_key, data, ttl=settings.CACHE_TTL_DETAIL)
    return data


async def list_publications_by_user(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    exists = await db.execute(select(User.id).where(User.id == user_id))
    if exists.scalar_one_or_none() is None:
        raise NotFoundError(USER_NOT_FOUND)
    return await _list_where(db, Publication.author_id == user_id)


async def list_publications_by_topic(db: AsyncSession, topic_id: uuid.UUID) -> list[dict]:
    exists = await db.execute(select(Topic.id).where(Topic.id == topic_id))
    if exists.scalar_one_or_none() is None:
        raise NotFoundError(TOPIC_NOT_FOUND)
    return await _list_where(db, Publication.topic_id == topic_id)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def create_publication(
    db: AsyncSession,
    caller_id: uuid.UUID,
    content: str,
    topic_id: uuid.UUID | None = None,
) -> dict:
    """Persist a publication owned by *caller_id*, timestamped now."""
    validate_content(content, settings.PUBLICATION_MAX_LENGTH, "Publication")

    if topic_id is not None:
        topic = await db.execute(select(Topic.id).where(Topic.id == topic_id))
        if topic.scalar_one_or_none() is None:
            raise NotFoundError(TOPIC_NOT_FOUND)

    now = utcnow()
    publication = Publication(
        content=content,
        author_id=caller_id,
        topic_id=topic_id,
        created_at=now,
        latest_activity=now,
    )
    db.add(publication)
    await db.flush()

    await cache.invalidate_publication()
    logger.info("Publication %s created by %s", publication.id, caller_id)
    return await _load_publication_dict(db, publication.id)


async def update_publication(
    db: AsyncSession,
    caller_id: uuid.UUID,
    publication_id: uuid.UUID,
    content: str,
) -> dict:
    """Overwrite the content of a publication the caller owns."""
    publication = await get_publication_or_raise(db, publication_id)
    require_owner(caller_id, publication.author_id, NOT_AUTHORIZED_TO_EDIT_PUBLICATION)
    validate_content(content, settings.PUBLICATION_MAX_LENGTH, "Publication")

    now = utcnow()
    publication.content = content
    publication.modified_at = now
    publication.latest_activity = now
    await db.flush()

    await cache.invalidate_publication(publication_id)
    logger.info("Publication %s updated by %s", publication_id, caller_id)
    return await _load_publication_dict(db, publication_id)


async def delete_publication(
    db: AsyncSession,
    caller_id: uuid.UUID,
    publication_id: uuid.UUID,
) -> None:
    """Delete a publication the caller owns together with all its dependents."""
    publication = await get_publication_or_raise(db, publication_id)
    require_owner(caller_id, publication.author_id, NOT_AUTHORIZED_TO_DELETE_PUBLICATION)

    await delete_publication_tree(db, publication_id)
    await cache.invalidate_publication(publication_id)
    logger.info("Publication %s deleted by %s", publication_id, caller_id)


async def delete_publication_tree(db: AsyncSession, publication_id: uuid.UUID) -> None:
    """
    Remove every comment, like, share and media row of *publication_id*,
    then the publication itself, as a single unit.

    Children go first so the statement order is valid whether or not the
    store enforces ``ON DELETE CASCADE``.  If any statement fails the
    session is rolled back, so no partial cascade can be committed.
    """
    try:
        for model in DEPENDENT_MODELS:
            await db.execute(delete(model).where(model.publication_id == publication_id))
        await db.execute(delete(Publication).where(Publication.id == publication_id))
        await db.flush()
    except SQLAlchemyError:
        logger.exception("Cascade delete of publication %s failed, rolling back", publication_id)
        await db.rollback()
        raise


async def attach_media(
    db: AsyncSession,
    caller_id: uuid.UUID,
    publication_id: uuid.UUID,
    title: str,
    url: str,
) -> dict:
    """Attach a blob-store reference to a publication the caller owns."""
    publication = await get_publication_or_raise(db, publication_id)
    require_owner(caller_id, publication.author_id, NOT_AUTHORIZED_TO_ATTACH_MEDIA)

    media = MediaFile(title=title, url=url, publication_id=publication_id, user_id=caller_id)
    db.add(media)
    await db.flush()

    await cache.invalidate_publication(publication_id)
    return media_to_dict(media)
