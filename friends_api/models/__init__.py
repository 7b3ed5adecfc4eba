"""
Database models for the Friendships API

All models should be imported here for Alembic to detect them.
"""
from friends_api.models.social import Friendship, FriendContext, FriendLike

__all__ = [
    # Social
    "Friendship",
    "FriendContext",
    "FriendLike",
]
