"""
Social features models - Friendships, friend contexts and likes
"""
from uuid import uuid4
from sqlalchemy import Column, String, Text, DateTime, Uuid, UniqueConstraint, Index
from friends_api.database import Base
from friends_api.utils.time_utils import utc_now


FRIENDSHIP_STATUSES = ("pending", "accepted", "declined")


def make_pair_key(user_a, user_b) -> str:
    """Order-independent key for a pair of users"""
    return ":".join(sorted([str(user_a), str(user_b)]))


class Friendship(Base):
    """Friendship between two users, requested by user_id toward friend_id"""
    __tablename__ = "friendships"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    friend_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # One record per unordered pair, whichever side requested it
    pair_key = Column(String(80), nullable=False)

    # Status: 'pending', 'accepted', 'declined'
    status = Column(String(50), nullable=False, default="pending")

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    __table_args__ = (
        UniqueConstraint('pair_key', name='unique_friendship_pair'),
    )

    def __repr__(self):
        return f"<Friendship id={self.id} {self.user_id}->{self.friend_id} status={self.status}>"


class FriendContext(Base):
    """Free-text note a user attaches describing another user"""
    __tablename__ = "friend_contexts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    friend_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    __table_args__ = (
        Index('ix_friend_contexts_owner_target', 'user_id', 'friend_id'),
    )


class FriendLike(Base):
    """Like marker from one user toward another"""
    __tablename__ = "friend_likes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    friend_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    # Presence, not a counter
    __table_args__ = (
        UniqueConstraint('user_id', 'friend_id', name='unique_friend_like'),
    )
