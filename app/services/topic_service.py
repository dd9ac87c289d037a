"""
Topic service: topics that publications can be filed under and users
can follow.

Only the creator may delete a topic.  Publications filed under a deleted
topic stay, with their topic cleared.
"""
import logging
import uuid

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from app.exceptions import (
    ALREADY_FOLLOWING_TOPIC,
    NOT_AUTHORIZED_TO_DELETE_TOPIC,
    NOT_FOLLOWING_TOPIC,
    TOPIC_ALREADY_EXISTS,
    TOPIC_NOT_FOUND,
    ConflictError,
    NotFoundError,
)
from app.models import Publication, Topic, users_topics
from app.permissions import require_owner

logger = logging.getLogger(__name__)


def _topic_to_dict(topic: Topic, followers_count: int) -> dict:
    return {
        "id": str(topic.id),
        "title": topic.title,
        "topic_url": topic.topic_url,
        "created_at": topic.created_at.isoformat() if topic.created_at else None,
        "creator_id": str(topic.creator_id),
        "followers_count": followers_count,
    }


def _followers_count_subquery():
    return (
        select(users_topics.c.topic_id, func.count().label("followers"))
        .group_by(users_topics.c.topic_id)
        .subquery()
    )


async def _get_topic_or_raise(db: AsyncSession, topic_id: uuid.UUID) -> Topic:
    result = await db.execute(select(Topic).where(Topic.id == topic_id))
    topic = result.scalar_one_or_none()
    if topic is None:
        raise NotFoundError(TOPIC_NOT_FOUND)
    return topic


async def _is_following(db: AsyncSession, caller_id: uuid.UUID, topic_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(users_topics.c.user_id).where(
            users_topics.c.user_id == caller_id, users_topics.c.topic_id == topic_id
        )
    )
    return result.first() is not None


async def list_topics(db: AsyncSession) -> list[dict]:
    """Return every topic ordered by title, with follower counts in one query."""
    followers = _followers_count_subquery()
    q = (
        select(Topic, func.coalesce(followers.c.followers, 0))
        .outerjoin(followers, followers.c.topic_id == Topic.id)
        .order_by(Topic.title)
    )
    result = await db.execute(q)
    return [_topic_to_dict(topic, count) for topic, count in result.all()]


async def get_topic(db: AsyncSession, topic_id: uuid.UUID) -> dict:
    topic = await _get_topic_or_raise(db, topic_id)
    count = await db.execute(
        select(func.count()).select_from(users_topics).where(users_topics.c.topic_id == topic_id)
    )
    return _topic_to_dict(topic, count.scalar_one())


async def create_topic(
    db: AsyncSession, caller_id: uuid.UUID, title: str, topic_url: str | None = None
) -> dict:
    title = title.strip()
    existing = await db.execute(select(Topic.id).where(Topic.title == title))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(TOPIC_ALREADY_EXISTS)

    topic = Topic(title=title, topic_url=topic_url, creator_id=caller_id)
    db.add(topic)
    await db.flush()
    logger.info("Topic %s (%r) created by %s", topic.id, title, caller_id)
    return _topic_to_dict(topic, 0)


async def delete_topic(db: AsyncSession, caller_id: uuid.UUID, topic_id: uuid.UUID) -> None:
    topic = await _get_topic_or_raise(db, topic_id)
    require_owner(caller_id, topic.creator_id, NOT_AUTHORIZED_TO_DELETE_TOPIC)

    filed = await db.execute(select(Publication.id).where(Publication.topic_id == topic_id))
    publication_ids = filed.scalars().all()

    await db.execute(
        update(Publication)
        .where(Publication.topic_id == topic_id)
        .values(topic_id=None)
        .execution_options(synchronize_session="fetch")
    )
    await db.execute(delete(users_topics).where(users_topics.c.topic_id == topic_id))
    await db.execute(delete(Topic).where(Topic.id == topic_id))
    await db.flush()

    await cache.invalidate_publications(publication_ids)
    logger.info("Topic %s deleted by %s", topic_id, caller_id)


async def follow_topic(db: AsyncSession, caller_id: uuid.UUID, topic_id: uuid.UUID) -> None:
    await _get_topic_or_raise(db, topic_id)
    if await _is_following(db, caller_id, topic_id):
        raise ConflictError(ALREADY_FOLLOWING_TOPIC)
    await db.execute(insert(users_topics).values(user_id=caller_id, topic_id=topic_id))


async def unfollow_topic(db: AsyncSession, caller_id: uuid.UUID, topic_id: uuid.UUID) -> None:
    await _get_topic_or_raise(db, topic_id)
    if not await _is_following(db, caller_id, topic_id):
        raise NotFoundError(NOT_FOLLOWING_TOPIC)
    await db.execute(
        delete(users_topics).where(
            users_topics.c.user_id == caller_id, users_topics.c.topic_id == topic_id
        )
    )
