"""
User service: registration, login, profiles and friendships.

Password hashing and token issuing are delegated to ``app.security``.
The user listing is cached and invalidated on registration and profile
edits.  Friendships are symmetric: both directions are stored, so either
user's friend list can be read with a single query.
"""
import logging
import uuid

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import USER_LIST_KEY, cache
from app.config import settings
from app.exceptions import (
    ALREADY_FRIENDS,
    CANNOT_BEFRIEND_YOURSELF,
    INVALID_LOGIN_DATA,
    NOT_FRIENDS,
    USER_ALREADY_EXISTS,
    USER_NOT_FOUND,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.models import NotificationType, Publication, User, users_friends, utcnow
from app.security import create_access_token, hash_password, verify_password
from app.services import notification_service

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "bio",
    "birthday",
    "country",
    "state",
    "gender",
    "relationship_status",
    "school",
    "phone_number",
    "profile_picture_url",
    "cover_photo_url",
)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _user_to_dict(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "bio": user.bio,
        "birthday": user.birthday.isoformat() if user.birthday else None,
        "country": user.country,
        "state": user.state,
        "gender": user.gender.value if user.gender else None,
        "relationship_status": user.relationship_status.value if user.relationship_status else None,
        "school": user.school,
        "phone_number": user.phone_number,
        "profile_picture_url": user.profile_picture_url,
        "cover_photo_url": user.cover_photo_url,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


def _auth_payload(user: User) -> dict:
    return {
        "access_token": create_access_token(user.id),
        "token_type": "bearer",
        "user": _user_to_dict(user),
    }


async def _get_user_or_raise(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return user


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

async def register(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
) -> dict:
    """Create an account and return it together with a fresh access token."""
    email = email.strip().lower()
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(USER_ALREADY_EXISTS)

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        hashed_password=hash_password(password),
    )
    db.add(user)
    await db.flush()

    await cache.invalidate_users()
    logger.info("User %s registered", user.id)
    return _auth_payload(user)


async def login(db: AsyncSession, email: str, password: str) -> dict:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active or not verify_password(password, user.hashed_password):
        raise AuthenticationError(INVALID_LOGIN_DATA)
    return _auth_payload(user)


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> dict:
    return _user_to_dict(await _get_user_or_raise(db, user_id))


async def list_users(db: AsyncSession) -> list[dict]:
    """Return all active users, newest first."""
    cached = await cache.get(USER_LIST_KEY)
    if cached is not None:
        return cached

    q = select(User).where(User.is_active.is_(True)).order_by(User.created_at.desc())
    result = await db.execute(q)
    users = [_user_to_dict(u) for u in result.scalars().all()]
    await cache.set(USER_LIST_KEY, users, ttl=settings.CACHE_TTL_LIST)
    return users


async def update_profile(db: AsyncSession, caller_id: uuid.UUID, changes: dict) -> dict:
    """
    Apply *changes* to the caller's own profile.  Only keys present in
    *changes* and listed in ``PROFILE_FIELDS`` are touched.

    Publication DTOs embed the author's name, so the caller's cached
    publications are dropped along with the user listing.
    """
    user = await _get_user_or_raise(db, caller_id)
    for field in PROFILE_FIELDS:
        if field in changes:
            setattr(user, field, changes[field])
    user.updated_at = utcnow()
    await db.flush()

    result = await db.execute(select(Publication.id).where(Publication.author_id == caller_id))
    await cache.invalidate_users()
    await cache.invalidate_publications(result.scalars().all())
    logger.info("Profile of user %s updated", caller_id)
    return _user_to_dict(user)


# ---------------------------------------------------------------------------
# Friendships
# ---------------------------------------------------------------------------

async def are_friends(db: AsyncSession, user_id: uuid.UUID, friend_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(users_friends.c.user_id).where(
            users_friends.c.user_id == user_id,
            users_friends.c.friend_id == friend_id,
        )
    )
    return result.first() is not None


async def add_friend(db: AsyncSession, caller_id: uuid.UUID, friend_id: uuid.UUID) -> None:
    if caller_id == friend_id:
        raise ValidationError(CANNOT_BEFRIEND_YOURSELF)
    await _get_user_or_raise(db, friend_id)
    if await are_friends(db, caller_id, friend_id):
        raise ConflictError(ALREADY_FRIENDS)

    await db.execute(
        insert(users_friends),
        [
            {"user_id": caller_id, "friend_id": friend_id},
            {"user_id": friend_id, "friend_id": caller_id},
        ],
    )
    await notification_service.notify(
        db,
        receiving_user_id=friend_id,
        creating_user_id=caller_id,
        notification_type=NotificationType.FRIEND,
        content="added you as a friend.",
        redirect_path=f"/users/{caller_id}",
    )
    logger.info("Users %s and %s are now friends", caller_id, friend_id)


async def remove_friend(db: AsyncSession, caller_id: uuid.UUID, friend_id: uuid.UUID) -> None:
    if not await are_friends(db, caller_id, friend_id):
        raise NotFoundError(NOT_FRIENDS)

    await db.execute(
        delete(users_friends).where(
            ((users_friends.c.user_id == caller_id) & (users_friends.c.friend_id == friend_id))
            | ((users_friends.c.user_id == friend_id) & (users_friends.c.friend_id == caller_id))
        )
    )
    logger.info("Users %s and %s are no longer friends", caller_id, friend_id)


async def list_friends(db: AsyncSession, user_id: uuid.UUID) -> list[dict]:
    await _get_user_or_raise(db, user_id)
    q = (
        select(User)
        .join(users_friends, users_friends.c.friend_id == User.id)
        .where(users_friends.c.user_id == user_id)
        .order_by(User.first_name, User.last_name)
    )
    result = await db.execute(q)
    return [_user_to_dict(u) for u in result.scalars().all()]
