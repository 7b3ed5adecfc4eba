"""
Error taxonomy for the Friendship Manager

Each error carries the HTTP status the transport layer maps it to and a short,
human-readable message that is safe to show to the caller.
"""
from fastapi import status


class FriendshipError(Exception):
    """Base class for every error surfaced by the Friendship Manager"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Friendship operation failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(FriendshipError):
    """No authenticated identity could be resolved for the request"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "User not authenticated"


class ValidationError(FriendshipError):
    """Malformed input"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundOrForbidden(FriendshipError):
    """
    The record does not exist or the caller is not a participant.

    Both cases share one error so callers cannot probe for relationships
    they are not part of.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Friendship not found"


class InternalStoreError(FriendshipError):
    """Opaque store failure, never exposes driver detail"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal storage error"


class StoreConflict(InternalStoreError):
    """A write violated a uniqueness constraint"""
    default_message = "Record already exists"
