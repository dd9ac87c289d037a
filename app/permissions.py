"""
Ownership checks for user-owned records.

Every mutation of a Publication, Comment, Topic or Notification is gated by
comparing the record's owner id with the caller id.  The comparison yields
an explicit ``Access`` tag; anything other than ``Access.OWNER`` is refused
with ``ForbiddenError``.
"""
import enum
import logging
import uuid

from app.exceptions import ForbiddenError

logger = logging.getLogger(__name__)


class Access(enum.Enum):
    OWNER = "owner"
    OTHER = "other"


def access_for(caller_id: uuid.UUID, owner_id: uuid.UUID) -> Access:
    return Access.OWNER if caller_id == owner_id else Access.OTHER


def require_owner(caller_id: uuid.UUID, owner_id: uuid.UUID, message: str) -> None:
    """Raise ``ForbiddenError(message)`` unless *caller_id* owns the record."""
    access = access_for(caller_id, owner_id)
    if access is not Access.OWNER:
        logger.warning("Ownership check refused caller=%s owner=%s", caller_id, owner_id)
        raise ForbiddenError(message)
