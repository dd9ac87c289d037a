from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Association tables
# ---------------------------------------------------------------------------
users_friends = Table(
    "users_friends",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("friend_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

users_topics = Table(
    "users_topics",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("topic_id", Uuid, ForeignKey("topics.id", ondelete="CASCADE"), primary_key=True),
)


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class RelationshipStatus(str, enum.Enum):
    SINGLE = "single"
    IN_A_RELATIONSHIP = "in_a_relationship"
    ENGAGED = "engaged"
    MARRIED = "married"
    COMPLICATED = "complicated"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(256), unique=True, nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(15), nullable=False)
    last_name: Mapped[str] = mapped_column(String(15), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    birthday: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    gender: Mapped[Optional[Gender]] = mapped_column(
        Enum(Gender, native_enum=False, length=20), nullable=True
    )
    relationship_status: Mapped[Optional[RelationshipStatus]] = mapped_column(
        Enum(RelationshipStatus, native_enum=False, length=20), nullable=True
    )
    school: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    # Blob store references, like MediaFile.url
    profile_picture_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    cover_photo_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships: lazy="raise" forces explicit eager loading in services
    publications: Mapped[List["Publication"]] = relationship(
        "Publication", back_populates="author", lazy="raise"
    )
    friends: Mapped[List["User"]] = relationship(
        "User",
        secondary=users_friends,
        primaryjoin=lambda: User.id == users_friends.c.user_id,
        secondaryjoin=lambda: User.id == users_friends.c.friend_id,
        lazy="raise",
    )
    followed_topics: Mapped[List["Topic"]] = relationship(
        "Topic", secondary=users_topics, back_populates="followers", lazy="raise"
    )


# ---------------------------------------------------------------------------
# Topic
# ---------------------------------------------------------------------------
class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    topic_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    followers: Mapped[List["User"]] = relationship(
        "User", secondary=users_topics, back_populates="followed_topics", lazy="raise"
    )


# ---------------------------------------------------------------------------
# Publication
# ---------------------------------------------------------------------------
class Publication(Base):
    __tablename__ = "publications"

    __table_args__ = (
        # Author's feed sorted by date (profile page)
        Index("ix_publications_author_id_created_at", "author_id", "created_at"),
        Index("ix_publications_topic_id_created_at", "topic_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(String(600), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    latest_activity: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_commented_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    topic_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("topics.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships: all lazy="raise"; services load what they serialise
    author: Mapped["User"] = relationship("User", back_populates="publications", lazy="raise")
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="publication", lazy="raise", passive_deletes=True
    )
    likes: Mapped[List["Like"]] = relationship(
        "Like", back_populates="publication", lazy="raise", passive_deletes=True
    )
    shares: Mapped[List["Share"]] = relationship(
        "Share", back_populates="publication", lazy="raise", passive_deletes=True
    )
    media: Mapped[List["MediaFile"]] = relationship(
        "MediaFile", back_populates="publication", lazy="raise", passive_deletes=True
    )


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    publication_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("publications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    publication: Mapped["Publication"] = relationship(
        "Publication", back_populates="comments", lazy="raise"
    )


# ---------------------------------------------------------------------------
# Like / Share: join records, existence is the fact
# ---------------------------------------------------------------------------
class Like(Base):
    __tablename__ = "likes"

    __table_args__ = (UniqueConstraint("publication_id", "user_id", name="uq_likes_publication_user"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    publication_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("publications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    publication: Mapped["Publication"] = relationship(
        "Publication", back_populates="likes", lazy="raise"
    )


class Share(Base):
    __tablename__ = "shares"

    __table_args__ = (UniqueConstraint("publication_id", "user_id", name="uq_shares_publication_user"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    publication_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("publications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    publication: Mapped["Publication"] = relationship(
        "Publication", back_populates="shares", lazy="raise"
    )


# ---------------------------------------------------------------------------
# MediaFile: a reference into the blob store
# ---------------------------------------------------------------------------
class MediaFile(Base):
    __tablename__ = "media_files"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(50), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    publication_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("publications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    publication: Mapped["Publication"] = relationship(
        "Publication", back_populates="media", lazy="raise"
    )


# ---------------------------------------------------------------------------
# Notification
# ---------------------------------------------------------------------------
class NotificationType(str, enum.Enum):
    COMMENT = "comment"
    LIKE = "like"
    SHARE = "share"
    FRIEND = "friend"


class Notification(Base):
    __tablename__ = "notifications"

    __table_args__ = (
        Index("ix_notifications_receiver_created_at", "receiving_user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    notification_type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, native_enum=False, length=20), nullable=False
    )
    content: Mapped[str] = mapped_column(String(256), nullable=False)
    redirect_path: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    receiving_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    creating_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
