"""
Social service for managing friendships, friend contexts and likes
"""
import logging
from typing import List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import or_

from friends_api.core.config import settings
from friends_api.core.exceptions import NotFoundOrForbidden, StoreConflict, ValidationError
from friends_api.models.social import (
    FRIENDSHIP_STATUSES,
    Friendship,
    FriendContext,
    FriendLike,
    make_pair_key,
)
from friends_api.storage import Store
from friends_api.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

UserId = Union[UUID, str]


def _parse_user_id(value: Optional[UserId], field: str = "friend_id") -> UUID:
    """Normalize a user id, raising ValidationError if empty or malformed"""
    if isinstance(value, UUID):
        return value
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    try:
        return UUID(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field} is not a valid user id")


def _friendship_id(value) -> UUID:
    """Parse a friendship id. A malformed id cannot name a record, so it is reported as not found."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise NotFoundOrForbidden()


def _participant(user_id: UUID):
    return or_(Friendship.user_id == user_id, Friendship.friend_id == user_id)


class SocialService:
    """Service for friendship lifecycle, contexts and likes"""

    # Relationship lifecycle

    def request_friend(self, store: Store, requester_id: UserId, target_id: UserId) -> Friendship:
        """
        Send a friend request.

        Only one record may exist per pair of users, in either direction and
        whatever its status, so a repeat or reverse request is rejected.
        """
        requester_id = _parse_user_id(requester_id, "user_id")
        target_id = _parse_user_id(target_id)

        if requester_id == target_id:
            raise ValidationError("Cannot send friend request to yourself")

        pair_key = make_pair_key(requester_id, target_id)
        if store.count(Friendship, Friendship.pair_key == pair_key):
            raise ValidationError("Friendship already exists")

        now = utc_now()
        friendship = Friendship(
            user_id=requester_id,
            friend_id=target_id,
            pair_key=pair_key,
            status="pending",
            created_at=now,
            updated_at=now
        )
        try:
            friendship = store.insert(friendship)
        except StoreConflict:
            # Lost a race with a concurrent request for the same pair
            raise ValidationError("Friendship already exists")

        logger.info(f"Friend request {friendship.id} sent: {requester_id} -> {target_id}")
        return friendship

    def list_friendships(
        self,
        store: Store,
        user_id: UserId,
        status: Optional[str] = None
    ) -> List[Friendship]:
        """Every friendship the user participates in, newest first"""
        user_id = _parse_user_id(user_id, "user_id")
        criteria = [_participant(user_id)]
        if status is not None:
            criteria.append(Friendship.status == self._validate_status(status))
        return store.query(
            Friendship,
            *criteria,
            order_by=(Friendship.created_at.desc(), Friendship.id)
        )

    def get_friendship(self, store: Store, friendship_id: UUID, user_id: UserId) -> Friendship:
        """Get a friendship the user participates in"""
        user_id = _parse_user_id(user_id, "user_id")
        friendship_id = _friendship_id(friendship_id)
        found = store.query(Friendship, Friendship.id == friendship_id, _participant(user_id))
        if not found:
            raise NotFoundOrForbidden()
        return found[0]

    def update_status(
        self,
        store: Store,
        friendship_id: UUID,
        user_id: UserId,
        new_status: str
    ) -> Friendship:
        """
        Change the status of a friendship.

        The participant check and the write are one conditional UPDATE, so a
        caller outside the friendship sees the same error as for a missing one.
        """
        user_id = _parse_user_id(user_id, "user_id")
        friendship_id = _friendship_id(friendship_id)
        new_status = self._validate_status(new_status)

        rows = store.update_where(
            Friendship,
            [Friendship.id == friendship_id, _participant(user_id)],
            {"status": new_status, "updated_at": utc_now()}
        )
        if not rows:
            raise NotFoundOrForbidden()

        logger.info(f"Friendship {friendship_id} set to {new_status} by {user_id}")
        return self.get_friendship(store, friendship_id, user_id)

    def remove_friendship(self, store: Store, friendship_id: UUID, user_id: UserId) -> None:
        """Delete a friendship. Contexts and likes between the users are kept."""
        user_id = _parse_user_id(user_id, "user_id")
        friendship_id = _friendship_id(friendship_id)
        rows = store.delete_where(
            Friendship,
            [Friendship.id == friendship_id, _participant(user_id)]
        )
        if not rows:
            raise NotFoundOrForbidden()
        logger.info(f"Friendship {friendship_id} removed by {user_id}")

    def get_pending_requests(self, store: Store, user_id: UserId) -> Tuple[List[Friendship], List[Friendship]]:
        """Pending requests as (incoming, outgoing)"""
        user_id = _parse_user_id(user_id, "user_id")
        order = (Friendship.created_at.desc(), Friendship.id)
        incoming = store.query(
            Friendship,
            Friendship.friend_id == user_id,
            Friendship.status == "pending",
            order_by=order
        )
        outgoing = store.query(
            Friendship,
            Friendship.user_id == user_id,
            Friendship.status == "pending",
            order_by=order
        )
        return incoming, outgoing

    def are_friends(self, store: Store, user_id: UserId, other_user_id: UserId) -> bool:
        """Check if two users are friends"""
        pair_key = make_pair_key(_parse_user_id(user_id, "user_id"), _parse_user_id(other_user_id, "user_id"))
        return store.count(
            Friendship,
            Friendship.pair_key == pair_key,
            Friendship.status == "accepted"
        ) > 0

    def get_friend_count(self, store: Store, user_id: UserId) -> int:
        """Get count of accepted friendships"""
        user_id = _parse_user_id(user_id, "user_id")
        return store.count(Friendship, _participant(user_id), Friendship.status == "accepted")

    # Contexts

    def add_context(self, store: Store, user_id: UserId, friend_id: UserId, text: str) -> FriendContext:
        """Attach a note about friend_id. Duplicate notes are allowed."""
        user_id = _parse_user_id(user_id, "user_id")
        friend_id = _parse_user_id(friend_id)
        text = self._validate_context(text)

        context = store.insert(FriendContext(
            user_id=user_id,
            friend_id=friend_id,
            text=text,
            created_at=utc_now()
        ))
        logger.info(f"Context added by {user_id} about {friend_id}")
        return context

    def remove_context(self, store: Store, user_id: UserId, friend_id: UserId, text: str) -> int:
        """Remove the caller's matching notes. Removing nothing is not an error."""
        user_id = _parse_user_id(user_id, "user_id")
        friend_id = _parse_user_id(friend_id)
        text = self._validate_context(text)

        rows = store.delete_where(
            FriendContext,
            [
                FriendContext.user_id == user_id,
                FriendContext.friend_id == friend_id,
                FriendContext.text == text,
            ]
        )
        logger.info(f"Removed {rows} context(s) by {user_id} about {friend_id}")
        return rows

    def list_contexts(self, store: Store, friend_id: UserId) -> List[FriendContext]:
        """Every note describing friend_id, whoever wrote it"""
        friend_id = _parse_user_id(friend_id)
        return store.query(
            FriendContext,
            FriendContext.friend_id == friend_id,
            order_by=(FriendContext.created_at.desc(), FriendContext.id)
        )

    # Likes

    def like(self, store: Store, user_id: UserId, friend_id: UserId) -> None:
        """Like a user. Liking again is a no-op."""
        user_id = _parse_user_id(user_id, "user_id")
        friend_id = _parse_user_id(friend_id)

        if self._has_liked(store, user_id, friend_id):
            return
        try:
            store.insert(FriendLike(user_id=user_id, friend_id=friend_id, created_at=utc_now()))
        except StoreConflict:
            # A concurrent like already created the marker
            return
        logger.info(f"{user_id} liked {friend_id}")

    def unlike(self, store: Store, user_id: UserId, friend_id: UserId) -> None:
        """Remove a like if present"""
        user_id = _parse_user_id(user_id, "user_id")
        friend_id = _parse_user_id(friend_id)
        rows = store.delete_where(
            FriendLike,
            [FriendLike.user_id == user_id, FriendLike.friend_id == friend_id]
        )
        if rows:
            logger.info(f"{user_id} unliked {friend_id}")

    def get_like_summary(self, store: Store, friend_id: UserId, viewer_id: UserId) -> dict:
        """Likes received by friend_id and whether the viewer is among them"""
        friend_id = _parse_user_id(friend_id)
        viewer_id = _parse_user_id(viewer_id, "user_id")
        return {
            "friend_id": friend_id,
            "like_count": store.count(FriendLike, FriendLike.friend_id == friend_id),
            "liked": self._has_liked(store, viewer_id, friend_id),
        }

    # Helpers

    def _has_liked(self, store: Store, user_id: UUID, friend_id: UUID) -> bool:
        return store.count(
            FriendLike,
            FriendLike.user_id == user_id,
            FriendLike.friend_id == friend_id
        ) > 0

    def _validate_status(self, status) -> str:
        value = getattr(status, "value", status)
        if value not in FRIENDSHIP_STATUSES:
            raise ValidationError(f"Invalid status: must be one of {', '.join(FRIENDSHIP_STATUSES)}")
        return value

    def _validate_context(self, text: Optional[str]) -> str:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Context text is required")
        if len(text) > settings.CONTEXT_MAX_LENGTH:
            raise ValidationError(f"Context text must be at most {settings.CONTEXT_MAX_LENGTH} characters")
        return text


social_service = SocialService()
