from datetime import timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from friends_api.core.exceptions import InternalStoreError, NotFoundOrForbidden, ValidationError
from friends_api.models.social import Friendship, FriendContext, FriendLike
from friends_api.services.social_service import social_service
from friends_api.storage import SQLAlchemyStore
from friends_api.utils.time_utils import utc_now


def _reload(store, friendship_id):
    return store.query(Friendship, Friendship.id == friendship_id)


class TestFriendRequests:

    def test_request_creates_pending_friendship(self, store, alice, bob):
        friendship = social_service.request_friend(store, alice, bob)

        assert friendship.status == "pending"
        assert friendship.user_id == alice
        assert friendship.friend_id == bob
        assert friendship.created_at is not None
        assert len(_reload(store, friendship.id)) == 1

    def test_request_accepts_string_ids(self, store, alice, bob):
        friendship = social_service.request_friend(store, str(alice), str(bob))
        assert friendship.friend_id == bob

    @pytest.mark.parametrize("target", ["", "   ", None, "not-a-uuid"])
    def test_request_rejects_malformed_target(self, store, alice, target):
        with pytest.raises(ValidationError):
            social_service.request_friend(store, alice, target)

    def test_request_to_self_is_rejected(self, store, alice):
        with pytest.raises(ValidationError):
            social_service.request_friend(store, alice, alice)

    def test_duplicate_request_is_rejected(self, store, alice, bob):
        social_service.request_friend(store, alice, bob)
        with pytest.raises(ValidationError):
            social_service.request_friend(store, alice, bob)

    def test_reverse_request_is_rejected(self, store, alice, bob):
        social_service.request_friend(store, alice, bob)
        with pytest.raises(ValidationError):
            social_service.request_friend(store, bob, alice)
        assert store.count(Friendship) == 1


class TestListFriendships:

    def test_lists_both_directions_only_for_participants(self, store, alice, bob, carol):
        sent = social_service.request_friend(store, alice, bob)
        received = social_service.request_friend(store, carol, alice)
        unrelated = social_service.request_friend(store, bob, carol)

        ids = {f.id for f in social_service.list_friendships(store, alice)}
        assert ids == {sent.id, received.id}
        assert unrelated.id not in ids

    def test_newest_first(self, store, alice, bob, carol):
        older = social_service.request_friend(store, alice, bob)
        newer = social_service.request_friend(store, alice, carol)
        store.update_where(
            Friendship,
            [Friendship.id == older.id],
            {"created_at": utc_now() - timedelta(days=1)}
        )

        listed = social_service.list_friendships(store, alice)
        assert [f.id for f in listed] == [newer.id, older.id]

    def test_status_filter(self, store, alice, bob, carol):
        accepted = social_service.request_friend(store, alice, bob)
        social_service.request_friend(store, alice, carol)
        social_service.update_status(store, accepted.id, bob, "accepted")

        listed = social_service.list_friendships(store, alice, status="accepted")
        assert [f.id for f in listed] == [accepted.id]

    def test_invalid_status_filter(self, store, alice):
        with pytest.raises(ValidationError):
            social_service.list_friendships(store, alice, status="blocked")

    def test_empty_for_user_without_friendships(self, store, alice):
        assert social_service.list_friendships(store, alice) == []


class TestUpdateStatus:

    def test_accept_is_visible_to_both_participants(self, store, alice, bob):
        friendship = social_service.request_friend(store, alice, bob)

        updated = social_service.update_status(store, friendship.id, bob, "accepted")
        assert updated.status == "accepted"

        for user in (alice, bob):
            listed = social_service.list_friendships(store, user)
            assert len(listed) == 1
            assert listed[0].status == "accepted"

    def test_requester_may_also_change_status(self, store, alice, bob):
        friendship = social_service.request_friend(store, alice, bob)
        updated = social_service.update_status(store, friendship.id, alice, "declined")
        assert updated.status == "declined"

    def test_non_participant_is_rejected_and_record_unchanged(self, store, alice, bob, carol):
        friendship = social_service.request_friend(store, alice, bob)

        with pytest.raises(NotFoundOrForbidden):
            social_service.update_status(store, friendship.id, carol, "accepted")

        assert _reload(store, friendship.id)[0].status == "pending"

    def test_missing_friendship(self, store, alice):
        with pytest.raises(NotFoundOrForbidden):
            social_service.update_status(store, uuid4(), alice, "accepted")

    @pytest.mark.parametrize("status", ["blocked", "", "ACCEPTED"])
    def test_invalid_status_is_rejected(self, store, alice, bob, status):
        friendship = social_service.request_friend(store, alice, bob)
        with pytest.raises(ValidationError):
            social_service.update_status(store, friendship.id, bob, status)
        assert _reload(store, friendship.id)[0].status == "pending"

    def test_declined_can_be_reopened(self, store, alice, bob):
        friendship = social_service.request_friend(store, alice, bob)
        social_service.update_status(store, friendship.id, bob, "declined")
        updated = social_service.update_status(store, friendship.id, bob, "accepted")
        assert updated.status == "accepted"


class TestRemoveFriendship:

    def test_remove_twice(self, store, alice, bob):
        friendship_id = social_service.request_friend(store, alice, bob).id

        social_service.remove_friendship(store, friendship_id, bob)
        with pytest.raises(NotFoundOrForbidden):
            social_service.remove_friendship(store, friendship_id, bob)

        assert _reload(store, friendship_id) == []

    def test_remove_then_read_by_id(self, store, alice, bob):
        friendship_id = social_service.request_friend(store, alice, bob).id

        social_service.remove_friendship(store, friendship_id, alice)

        with pytest.raises(NotFoundOrForbidden):
            social_service.get_friendship(store, friendship_id, alice)
        assert social_service.list_friendships(store, bob) == []

    def test_non_participant_cannot_remove(self, store, alice, bob, carol):
        friendship = social_service.request_friend(store, alice, bob)
        with pytest.raises(NotFoundOrForbidden):
            social_service.remove_friendship(store, friendship.id, carol)
        assert len(_reload(store, friendship.id)) == 1

    def test_malformed_id_reads_as_not_found(self, store, alice):
        with pytest.raises(NotFoundOrForbidden):
            social_service.remove_friendship(store, "nope", alice)

    def test_pair_can_request_again_after_removal(self, store, alice, bob):
        friendship = social_service.request_friend(store, alice, bob)
        social_service.remove_friendship(store, friendship.id, alice)
        again = social_service.request_friend(store, bob, alice)
        assert again.user_id == bob

    def test_contexts_and_likes_survive_removal(self, store, alice, bob):
        friendship = social_service.request_friend(store, alice, bob)
        social_service.add_context(store, alice, bob, "likes coffee")
        social_service.like(store, alice, bob)

        social_service.remove_friendship(store, friendship.id, alice)

        assert [c.text for c in social_service.list_contexts(store, bob)] == ["likes coffee"]
        assert store.count(FriendLike) == 1


class TestFriendQueries:

    def test_pending_requests_split_by_direction(self, store, alice, bob, carol):
        outgoing = social_service.request_friend(store, alice, bob)
        incoming = social_service.request_friend(store, carol, alice)

        received, sent = social_service.get_pending_requests(store, alice)
        assert [f.id for f in received] == [incoming.id]
        assert [f.id for f in sent] == [outgoing.id]

    def test_get_friendship_is_participant_only(self, store, alice, bob, carol):
        friendship = social_service.request_friend(store, alice, bob)
        assert social_service.get_friendship(store, friendship.id, bob).id == friendship.id
        with pytest.raises(NotFoundOrForbidden):
            social_service.get_friendship(store, friendship.id, carol)

    def test_are_friends_and_count_use_accepted_only(self, store, alice, bob, carol):
        friendship = social_service.request_friend(store, alice, bob)
        social_service.request_friend(store, alice, carol)

        assert not social_service.are_friends(store, alice, bob)
        assert social_service.get_friend_count(store, alice) == 0

        social_service.update_status(store, friendship.id, bob, "accepted")

        assert social_service.are_friends(store, bob, alice)
        assert not social_service.are_friends(store, alice, carol)
        assert social_service.get_friend_count(store, alice) == 1


class TestContexts:

    def test_add_list_remove(self, store, alice, bob):
        social_service.add_context(store, alice, bob, "likes coffee")
        assert "likes coffee" in [c.text for c in social_service.list_contexts(store, bob)]

        removed = social_service.remove_context(store, alice, bob, "likes coffee")
        assert removed == 1
        assert social_service.list_contexts(store, bob) == []

    def test_list_includes_every_author(self, store, alice, bob, carol):
        social_service.add_context(store, alice, bob, "plays chess")
        social_service.add_context(store, carol, bob, "runs marathons")
        social_service.add_context(store, bob, alice, "night owl")

        texts = {c.text for c in social_service.list_contexts(store, bob)}
        assert texts == {"plays chess", "runs marathons"}

    def test_duplicates_are_kept_and_removed_together(self, store, alice, bob):
        social_service.add_context(store, alice, bob, "likes coffee")
        social_service.add_context(store, alice, bob, "likes coffee")
        assert len(social_service.list_contexts(store, bob)) == 2

        assert social_service.remove_context(store, alice, bob, "likes coffee") == 2

    def test_only_owner_removes(self, store, alice, bob, carol):
        social_service.add_context(store, alice, bob, "likes coffee")

        assert social_service.remove_context(store, carol, bob, "likes coffee") == 0
        assert len(social_service.list_contexts(store, bob)) == 1

    def test_remove_without_match_is_not_an_error(self, store, alice, bob):
        assert social_service.remove_context(store, alice, bob, "never written") == 0

    def test_text_is_trimmed(self, store, alice, bob):
        context = social_service.add_context(store, alice, bob, "  likes tea \n")
        assert context.text == "likes tea"

    @pytest.mark.parametrize("text", ["", "   ", None, "x" * 501])
    def test_invalid_text_is_rejected(self, store, alice, bob, text):
        with pytest.raises(ValidationError):
            social_service.add_context(store, alice, bob, text)

    def test_malformed_friend_is_rejected(self, store, alice):
        with pytest.raises(ValidationError):
            social_service.add_context(store, alice, "bob", "likes coffee")


class TestLikes:

    def test_like_twice_keeps_one_record(self, store, alice, bob):
        social_service.like(store, alice, bob)
        social_service.like(store, alice, bob)

        likes = store.query(FriendLike, FriendLike.user_id == alice, FriendLike.friend_id == bob)
        assert len(likes) == 1

    def test_unlike_removes_and_is_idempotent(self, store, alice, bob):
        social_service.like(store, alice, bob)
        social_service.unlike(store, alice, bob)
        social_service.unlike(store, alice, bob)
        assert store.count(FriendLike) == 0

    def test_concurrent_duplicate_like_is_treated_as_success(self, db_session, alice, bob):
        class StaleCountStore(SQLAlchemyStore):
            def count(self, model, *criteria):
                return 0

        store = SQLAlchemyStore(db_session)
        social_service.like(store, alice, bob)

        social_service.like(StaleCountStore(db_session), alice, bob)
        assert store.count(FriendLike) == 1

    def test_like_summary(self, store, alice, bob, carol):
        social_service.like(store, alice, bob)
        social_service.like(store, carol, bob)

        summary = social_service.get_like_summary(store, bob, alice)
        assert summary == {"friend_id": bob, "like_count": 2, "liked": True}

        summary = social_service.get_like_summary(store, alice, bob)
        assert summary["like_count"] == 0
        assert summary["liked"] is False


class TestStoreFailures:

    def test_store_errors_are_wrapped(self, alice):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection lost"))
        store = SQLAlchemyStore(db)

        with pytest.raises(InternalStoreError) as exc_info:
            social_service.list_friendships(store, alice)

        assert "connection lost" not in exc_info.value.message
        db.rollback.assert_called_once()

    def test_context_model_is_stored(self, store, alice, bob):
        social_service.add_context(store, alice, bob, "likes coffee")
        stored = store.query(FriendContext, FriendContext.user_id == alice)
        assert stored[0].friend_id == bob
