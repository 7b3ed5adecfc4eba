"""
Social and friends schemas
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class FriendshipStatus(str, Enum):
    """Allowed friendship states"""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class FriendRequestCreate(BaseModel):
    """Create friend request"""
    friend_id: UUID


class FriendStatusUpdate(BaseModel):
    """Change the status of a friendship"""
    status: FriendshipStatus


class FriendshipResponse(BaseModel):
    """Friendship record"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    friend_id: UUID
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class PendingRequestsResponse(BaseModel):
    """Response with pending friend requests"""
    incoming: List[FriendshipResponse]
    outgoing: List[FriendshipResponse]
    incoming_count: int
    outgoing_count: int


class FriendContextRequest(BaseModel):
    """Add or remove a context note about a friend"""
    friend_id: UUID
    context: str = Field(..., min_length=1)


class FriendContextResponse(BaseModel):
    """Context note attached to a friend"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    friend_id: UUID
    text: str = Field(..., serialization_alias="context")
    created_at: datetime


class LikeSummaryResponse(BaseModel):
    """Likes received by a user"""
    friend_id: UUID
    like_count: int
    liked: bool


class FriendCheckResponse(BaseModel):
    """Whether the caller is friends with another user"""
    is_friend: bool
    user_id: UUID


class FriendCountResponse(BaseModel):
    count: int


class FriendActionResponse(BaseModel):
    """Response after a friend action (remove, context, like)"""
    success: bool = True
    message: str
    friendship_id: Optional[UUID] = None
