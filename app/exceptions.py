"""
Application exception hierarchy.

Services raise these; ``app.handlers`` maps each class to an HTTP status.
Every error carries a human-readable ``message`` and a machine-readable
``code``.
"""

# Publication messages
PUBLICATION_NOT_FOUND = "Publication not found!"
NOT_AUTHORIZED_TO_EDIT_PUBLICATION = "You are not authorized to edit this publication!"
NOT_AUTHORIZED_TO_DELETE_PUBLICATION = "You are not authorized to delete this publication!"

# Comment messages
COMMENT_NOT_FOUND = "Comment not found!"
NOT_AUTHORIZED_TO_EDIT_COMMENT = "You are not authorized to edit this comment!"
NOT_AUTHORIZED_TO_DELETE_COMMENT = "You are not authorized to delete this comment!"

# Reaction messages
ALREADY_LIKED = "You have already liked this publication!"
LIKE_NOT_FOUND = "You have not liked this publication!"
ALREADY_SHARED = "You have already shared this publication!"
SHARE_NOT_FOUND = "You have not shared this publication!"

# Media messages
NOT_AUTHORIZED_TO_ATTACH_MEDIA = "You are not authorized to attach media to this publication!"

# User messages
USER_NOT_FOUND = "User not found!"
USER_ALREADY_EXISTS = "User with this email already exists!"
INVALID_LOGIN_DATA = "Invalid email or password!"
INVALID_TOKEN = "Could not validate credentials"
CANNOT_BEFRIEND_YOURSELF = "Cannot add yourself as a friend!"
ALREADY_FRIENDS = "You are already friends with this user!"
NOT_FRIENDS = "You are not friends with this user!"

# Topic messages
TOPIC_NOT_FOUND = "Topic not found!"
TOPIC_ALREADY_EXISTS = "Topic with this title already exists!"
NOT_AUTHORIZED_TO_DELETE_TOPIC = "You are not authorized to delete this topic!"
ALREADY_FOLLOWING_TOPIC = "You are already following this topic!"
NOT_FOLLOWING_TOPIC = "You are not following this topic!"

# Notification messages
NOTIFICATION_NOT_FOUND = "Notification not found!"
NOT_AUTHORIZED_TO_READ_NOTIFICATION = "This notification does not belong to you!"


class AppError(Exception):
    """Base class for every error the service layer raises on purpose."""

    code: str = "app_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    """A referenced entity does not exist. Maps to 404."""

    code = "not_found"


class ForbiddenError(AppError):
    """The caller does not own the record it tried to change. Maps to 403."""

    code = "forbidden"


class ValidationError(AppError):
    """Payload violates a length or required-field constraint. Maps to 400."""

    code = "validation_error"


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials. Maps to 401."""

    code = "authentication_error"


class ConflictError(AppError):
    """The write would duplicate an existing fact. Maps to 409."""

    code = "conflict"
