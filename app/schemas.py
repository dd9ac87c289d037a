import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.config import settings
from app.models import Gender, NotificationType, RelationshipStatus


# --- User ---

class UserRegister(BaseModel):
    email: str = Field(min_length=3, max_length=256, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6, max_length=100)
    first_name: str = Field(min_length=1, max_length=15)
    last_name: str = Field(min_length=1, max_length=15)


class UserLogin(BaseModel):
    email: str
    password: str


class UserUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=15)
    last_name: str | None = Field(None, min_length=1, max_length=15)
    bio: str | None = Field(None, max_length=500)
    birthday: date | None = None
    country: str | None = Field(None, max_length=60)
    state: str | None = Field(None, max_length=60)
    gender: Gender | None = None
    relationship_status: RelationshipStatus | None = None
    school: str | None = Field(None, max_length=100)
    phone_number: str | None = Field(None, max_length=30)
    profile_picture_url: str | None = Field(None, max_length=2048)
    cover_photo_url: str | None = Field(None, max_length=2048)


class AuthorSummary(BaseModel):
    id: uuid.UUID
    first_name: str
    last_name: str


class UserResponse(AuthorSummary):
    email: str
    bio: str | None = None
    birthday: date | None = None
    country: str | None = None
    state: str | None = None
    gender: Gender | None = None
    relationship_status: RelationshipStatus | None = None
    school: str | None = None
    phone_number: str | None = None
    profile_picture_url: str | None = None
    cover_photo_url: str | None = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class FriendshipStatus(BaseModel):
    are_friends: bool


# --- Media ---

class MediaForm(BaseModel):
    title: str = Field(min_length=1, max_length=50)
    url: str = Field(min_length=1, max_length=2048)


class MediaResponse(BaseModel):
    id: uuid.UUID
    title: str
    url: str
    created_at: datetime
    publication_id: uuid.UUID


# --- Publication ---

class PublicationForm(BaseModel):
    content: str = Field(min_length=1, max_length=settings.PUBLICATION_MAX_LENGTH)
    topic_id: uuid.UUID | None = None


class PublicationUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=settings.PUBLICATION_MAX_LENGTH)


class PublicationResponse(BaseModel):
    id: uuid.UUID
    content: str
    created_at: datetime
    modified_at: datetime | None = None
    latest_activity: datetime | None = None
    last_commented_at: datetime | None = None
    author_id: uuid.UUID
    topic_id: uuid.UUID | None = None
    author: AuthorSummary | None = None
    likes_count: int = 0
    comments_count: int = 0
    shares_count: int = 0
    media: list[MediaResponse] = []


# --- Comment ---

class CommentForm(BaseModel):
    content: str = Field(min_length=1, max_length=settings.COMMENT_MAX_LENGTH)


class CommentResponse(BaseModel):
    id: uuid.UUID
    content: str
    created_at: datetime
    modified_at: datetime | None = None
    publication_id: uuid.UUID
    user_id: uuid.UUID


# --- Like / Share ---

class ReactionResponse(BaseModel):
    id: uuid.UUID
    created_at: datetime
    publication_id: uuid.UUID
    user_id: uuid.UUID


# --- Topic ---

class TopicForm(BaseModel):
    title: str = Field(min_length=1, max_length=50)
    topic_url: str | None = Field(None, max_length=2048)


class TopicResponse(BaseModel):
    id: uuid.UUID
    title: str
    topic_url: str | None = None
    created_at: datetime
    creator_id: uuid.UUID
    followers_count: int = 0


# --- Notification ---

class NotificationResponse(BaseModel):
    id: uuid.UUID
    notification_type: NotificationType
    content: str
    redirect_path: str | None = None
    is_read: bool
    created_at: datetime
    creating_user_id: uuid.UUID
    receiving_user_id: uuid.UUID


# --- Misc ---

class MessageResponse(BaseModel):
    message: str


class MetricsResponse(BaseModel):
    total_publications: int
    total_comments: int
    total_likes: int
    total_shares: int
    total_users: int
    avg_comments_per_publication: float
    cache_info: dict = {}
