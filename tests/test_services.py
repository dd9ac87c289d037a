"""
Direct service-layer tests: business logic without HTTP overhead.

These call service functions with a live database session, covering the
ownership gate, the cascade delete and its rollback, and helpers that the
endpoint tests only reach indirectly.
"""
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    PUBLICATION_NOT_FOUND,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from app.models import Comment, Like, MediaFile, NotificationType, Publication, Share
from app.permissions import Access, access_for, require_owner
from app.services import (
    comment_service,
    notification_service,
    publication_service,
    reaction_service,
    user_service,
)
from app.services.publication_service import DEPENDENT_MODELS, validate_content


async def _count(db: AsyncSession, model, publication_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count()).select_from(model).where(model.publication_id == publication_id)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# permissions
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_access_for_owner_and_other():
    owner = uuid.uuid4()
    assert access_for(owner, owner) is Access.OWNER
    assert access_for(uuid.uuid4(), owner) is Access.OTHER


@pytest.mark.asyncio
async def test_require_owner_raises_forbidden_with_message():
    with pytest.raises(ForbiddenError) as exc_info:
        require_owner(uuid.uuid4(), uuid.uuid4(), "nope")
    assert exc_info.value.message == "nope"
    assert exc_info.value.code == "forbidden"


# ---------------------------------------------------------------------------
# validate_content
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_validate_content_accepts_boundary():
    assert validate_content("a" * 600, 600, "Publication") == "a" * 600


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "   "])
async def test_validate_content_rejects_blank(content):
    with pytest.raises(ValidationError):
        validate_content(content, 600, "Publication")


@pytest.mark.asyncio
async def test_validate_content_rejects_too_long():
    with pytest.raises(ValidationError) as exc_info:
        validate_content("a" * 257, 256, "Comment")
    assert "256" in exc_info.value.message


# ---------------------------------------------------------------------------
# publication_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_owner_scenario(db_session: AsyncSession, make_db_user):
    """A creates "hello"; B's edit is refused; A deletes; the id is gone."""
    a = await make_db_user("usera")
    b = await make_db_user("userb")

    created = await publication_service.create_publication(db_session, a.id, "hello")
    pub_id = uuid.UUID(created["id"])

    fetched = await publication_service.get_publication(db_session, pub_id)
    assert fetched["content"] == "hello"
    assert fetched["author_id"] == str(a.id)

    with pytest.raises(ForbiddenError):
        await publication_service.update_publication(db_session, b.id, pub_id, "bye")
    assert (await publication_service.get_publication(db_session, pub_id))["content"] == "hello"

    await publication_service.delete_publication(db_session, a.id, pub_id)
    with pytest.raises(NotFoundError) as exc_info:
        await publication_service.get_publication(db_session, pub_id)
    assert exc_info.value.message == PUBLICATION_NOT_FOUND


@pytest.mark.asyncio
async def test_missing_publication_is_not_found_before_forbidden(db_session: AsyncSession, make_db_user):
    stranger = await make_db_user("stranger")
    with pytest.raises(NotFoundError):
        await publication_service.update_publication(db_session, stranger.id, uuid.uuid4(), "x")
    with pytest.raises(NotFoundError):
        await publication_service.delete_publication(db_session, stranger.id, uuid.uuid4())


@pytest.mark.asyncio
async def test_update_is_checked_for_ownership_before_content(db_session: AsyncSession, make_db_user):
    owner = await make_db_user("owner")
    other = await make_db_user("other")
    created = await publication_service.create_publication(db_session, owner.id, "hello")

    with pytest.raises(ForbiddenError):
        await publication_service.update_publication(db_session, other.id, uuid.UUID(created["id"]), "")


@pytest.mark.asyncio
async def test_delete_removes_every_dependent(db_session: AsyncSession, make_db_user):
    author = await make_db_user("author")
    fan = await make_db_user("fan")
    created = await publication_service.create_publication(db_session, author.id, "popular")
    pub_id = uuid.UUID(created["id"])

    await comment_service.create_comment(db_session, fan.id, pub_id, "first!")
    await comment_service.create_comment(db_session, author.id, pub_id, "thanks")
    await reaction_service.like_publication(db_session, fan.id, pub_id)
    await reaction_service.share_publication(db_session, fan.id, pub_id)
    await publication_service.attach_media(db_session, author.id, pub_id, "pic", "https://cdn.example.com/a.png")

    assert await _count(db_session, Comment, pub_id) == 2
    assert await _count(db_session, Like, pub_id) == 1

    await publication_service.delete_publication(db_session, author.id, pub_id)

    for model in DEPENDENT_MODELS:
        assert await _count(db_session, model, pub_id) == 0
    remaining = await db_session.execute(select(Publication.id).where(Publication.id == pub_id))
    assert remaining.scalar_one_or_none() is None


@pytest.mark.asyncio
async def test_failed_cascade_rolls_back(db_session: AsyncSession, make_db_user, monkeypatch):
    """A failure midway through the cascade leaves every row in place."""
    author = await make_db_user("fragile")
    created = await publication_service.create_publication(db_session, author.id, "keep me")
    pub_id = uuid.UUID(created["id"])
    await comment_service.create_comment(db_session, author.id, pub_id, "c")
    await reaction_service.like_publication(db_session, author.id, pub_id)
    await reaction_service.share_publication(db_session, author.id, pub_id)
    await db_session.commit()

    original_execute = db_session.execute
    calls = {"n": 0}

    async def flaky_execute(statement, *args, **kwargs):
        calls["n"] += 1
        # comments and likes are deleted, then the share delete fails
        if calls["n"] == 3:
            raise OperationalError("DELETE FROM shares", {}, Exception("disk I/O error"))
        return await original_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db_session, "execute", flaky_execute)
    with pytest.raises(OperationalError):
        await publication_service.delete_publication_tree(db_session, pub_id)
    monkeypatch.undo()

    assert await _count(db_session, Comment, pub_id) == 1
    assert await _count(db_session, Like, pub_id) == 1
    assert await _count(db_session, Share, pub_id) == 1
    remaining = await db_session.execute(select(Publication.id).where(Publication.id == pub_id))
    assert remaining.scalar_one() == pub_id


@pytest.mark.asyncio
async def test_attach_media_returns_reference(db_session: AsyncSession, make_db_user):
    author = await make_db_user("media")
    created = await publication_service.create_publication(db_session, author.id, "with media")
    media = await publication_service.attach_media(
        db_session, author.id, uuid.UUID(created["id"]), "clip", "https://cdn.example.com/clip.mp4"
    )
    assert media["url"] == "https://cdn.example.com/clip.mp4"
    assert await _count(db_session, MediaFile, uuid.UUID(created["id"])) == 1


# ---------------------------------------------------------------------------
# comment_service / reaction_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_comment_unknown_publication_writes_nothing(db_session: AsyncSession, make_db_user):
    user = await make_db_user("commenter")
    missing = uuid.uuid4()
    with pytest.raises(NotFoundError):
        await comment_service.create_comment(db_session, user.id, missing, "hello?")
    assert await _count(db_session, Comment, missing) == 0


@pytest.mark.asyncio
async def test_double_share_conflicts(db_session: AsyncSession, make_db_user):
    user = await make_db_user("sharer")
    created = await publication_service.create_publication(db_session, user.id, "share me")
    pub_id = uuid.UUID(created["id"])
    await reaction_service.share_publication(db_session, user.id, pub_id)
    with pytest.raises(ConflictError):
        await reaction_service.share_publication(db_session, user.id, pub_id)


# ---------------------------------------------------------------------------
# notification_service / user_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_notify_skips_self(db_session: AsyncSession, make_db_user):
    user = await make_db_user("selfish")
    result = await notification_service.notify(
        db_session, user.id, user.id, NotificationType.LIKE, "liked your publication."
    )
    assert result is None
    assert await notification_service.list_notifications(db_session, user.id) == []


@pytest.mark.asyncio
async def test_add_friend_validates_before_lookup(db_session: AsyncSession, make_db_user):
    user = await make_db_user("loner")
    with pytest.raises(ValidationError):
        await user_service.add_friend(db_session, user.id, user.id)
    with pytest.raises(NotFoundError):
        await user_service.add_friend(db_session, user.id, uuid.uuid4())
