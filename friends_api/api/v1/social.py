"""
Social/Friends API endpoints
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Request, status

from friends_api.core.config import settings
from friends_api.core.dependencies import get_current_user_id, get_store
from friends_api.core.rate_limit import limiter
from friends_api.schemas.social import (
    FriendActionResponse,
    FriendCheckResponse,
    FriendContextRequest,
    FriendContextResponse,
    FriendCountResponse,
    FriendRequestCreate,
    FriendshipResponse,
    FriendshipStatus,
    FriendStatusUpdate,
    LikeSummaryResponse,
    PendingRequestsResponse,
)
from friends_api.services.social_service import social_service
from friends_api.storage import Store

router = APIRouter(prefix="/social", tags=["social"])


@router.post("/friends", response_model=FriendshipResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.FRIEND_REQUEST_RATE_LIMIT)
def send_friend_request(
    request: Request,
    payload: FriendRequestCreate,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Send a friend request to another user"""
    return social_service.request_friend(store, current_user_id, payload.friend_id)


@router.get("/friends", response_model=List[FriendshipResponse])
def get_friendships(
    status: Optional[FriendshipStatus] = None,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Get every friendship the current user takes part in"""
    return social_service.list_friendships(store, current_user_id, status)


@router.get("/friends/requests", response_model=PendingRequestsResponse)
def get_pending_requests(
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Get pending friend requests (incoming and outgoing)"""
    incoming, outgoing = social_service.get_pending_requests(store, current_user_id)
    return PendingRequestsResponse(
        incoming=[FriendshipResponse.model_validate(fs) for fs in incoming],
        outgoing=[FriendshipResponse.model_validate(fs) for fs in outgoing],
        incoming_count=len(incoming),
        outgoing_count=len(outgoing)
    )


@router.get("/friends/count", response_model=FriendCountResponse)
def get_friend_count(
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Get friend count for current user"""
    return {"count": social_service.get_friend_count(store, current_user_id)}


@router.get("/friends/check/{user_id}", response_model=FriendCheckResponse)
def check_friendship(
    user_id: UUID,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Check if you are friends with another user"""
    is_friend = social_service.are_friends(store, current_user_id, user_id)
    return {"is_friend": is_friend, "user_id": user_id}


@router.get("/friends/{friendship_id}", response_model=FriendshipResponse)
def get_friendship(
    friendship_id: str,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Get a single friendship"""
    return social_service.get_friendship(store, friendship_id, current_user_id)


@router.put("/friends/{friendship_id}", response_model=FriendshipResponse)
def update_friend_status(
    friendship_id: str,
    payload: FriendStatusUpdate,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Accept, decline or reset a friendship"""
    return social_service.update_status(store, friendship_id, current_user_id, payload.status)


@router.delete("/friends/{friendship_id}", response_model=FriendActionResponse)
def remove_friend(
    friendship_id: str,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Remove a friend"""
    social_service.remove_friendship(store, friendship_id, current_user_id)
    return FriendActionResponse(
        message="Friend removed successfully",
        friendship_id=friendship_id
    )


@router.get("/friends/{friend_id}/contexts", response_model=List[FriendContextResponse])
def get_friend_contexts(
    friend_id: UUID,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Get every context note describing a user"""
    return social_service.list_contexts(store, friend_id)


@router.post("/contexts", response_model=FriendActionResponse)
def add_friend_context(
    payload: FriendContextRequest,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Attach a context note to a friend"""
    social_service.add_context(store, current_user_id, payload.friend_id, payload.context)
    return FriendActionResponse(message="Friend context added successfully")


@router.delete("/contexts", response_model=FriendActionResponse)
def remove_friend_context(
    payload: FriendContextRequest,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Remove your own matching context notes"""
    social_service.remove_context(store, current_user_id, payload.friend_id, payload.context)
    return FriendActionResponse(message="Friend context removed successfully")


@router.post("/friends/{friend_id}/like", response_model=FriendActionResponse)
def like_friend(
    friend_id: UUID,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Like a friend"""
    social_service.like(store, current_user_id, friend_id)
    return FriendActionResponse(message="Friend liked successfully")


@router.delete("/friends/{friend_id}/like", response_model=FriendActionResponse)
def unlike_friend(
    friend_id: UUID,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Unlike a friend"""
    social_service.unlike(store, current_user_id, friend_id)
    return FriendActionResponse(message="Friend unliked successfully")


@router.get("/friends/{friend_id}/likes", response_model=LikeSummaryResponse)
def get_like_summary(
    friend_id: UUID,
    store: Store = Depends(get_store),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """Get the likes a user has received"""
    return social_service.get_like_summary(store, friend_id, current_user_id)
