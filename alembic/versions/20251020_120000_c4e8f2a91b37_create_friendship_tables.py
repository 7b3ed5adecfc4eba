"""Create friendships, friend_contexts and friend_likes tables

Revision ID: c4e8f2a91b37
Revises:
Create Date: 2025-10-20 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c4e8f2a91b37'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'friendships',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('friend_id', sa.Uuid(), nullable=False),
        # Sorted "a:b" of both ids, one row per unordered pair
        sa.Column('pair_key', sa.String(80), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('pair_key', name='unique_friendship_pair'),
    )
    op.create_index('ix_friendships_user_id', 'friendships', ['user_id'])
    op.create_index('ix_friendships_friend_id', 'friendships', ['friend_id'])

    op.create_table(
        'friend_contexts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('friend_id', sa.Uuid(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_friend_contexts_user_id', 'friend_contexts', ['user_id'])
    op.create_index('ix_friend_contexts_friend_id', 'friend_contexts', ['friend_id'])
    op.create_index('ix_friend_contexts_owner_target', 'friend_contexts', ['user_id', 'friend_id'])

    # Likes are presence markers, at most one per (user, friend)
    op.create_table(
        'friend_likes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('friend_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('user_id', 'friend_id', name='unique_friend_like'),
    )
    op.create_index('ix_friend_likes_user_id', 'friend_likes', ['user_id'])
    op.create_index('ix_friend_likes_friend_id', 'friend_likes', ['friend_id'])


def downgrade() -> None:
    op.drop_index('ix_friend_likes_friend_id', table_name='friend_likes')
    op.drop_index('ix_friend_likes_user_id', table_name='friend_likes')
    op.drop_table('friend_likes')
    op.drop_index('ix_friend_contexts_owner_target', table_name='friend_contexts')
    op.drop_index('ix_friend_contexts_friend_id', table_name='friend_contexts')
    op.drop_index('ix_friend_contexts_user_id', table_name='friend_contexts')
    op.drop_table('friend_contexts')
    op.drop_index('ix_friendships_friend_id', table_name='friendships')
    op.drop_index('ix_friendships_user_id', table_name='friendships')
    op.drop_table('friendships')
