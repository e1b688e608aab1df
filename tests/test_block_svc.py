import pytest

from app.core.exceptions import (
    SelfReferenceError,
    AlreadyBlockedError,
    NotBlockedError,
    UserNotFound,
)
from app.models.block import Block
from app.models.history import FollowAction, ConnectionAction, BlockAction
from app.service import block_svc, follow_svc, connection_svc


class TestBlock:
    def test_block_and_history_reason(self, repos, alice, bob):
        block = block_svc.block_user(repos, alice, bob, reason="spam")

        assert block.blocker_id == alice.uid
        assert block.reason == "spam"
        assert block_svc.is_blocked(repos, alice, bob)
        assert not block_svc.is_blocked(repos, bob, alice)

        history = block_svc.block_history(repos, bob)
        assert history.total == 1
        assert history.items[0].action == BlockAction.BLOCK
        assert history.items[0].reason == "spam"

    def test_block_self(self, repos, alice):
        with pytest.raises(SelfReferenceError) as exc:
            block_svc.block_user(repos, alice, alice.uid)
        assert exc.value.message == "Cannot block yourself."

    def test_block_twice(self, repos, alice, bob):
        block_svc.block_user(repos, alice, bob)
        with pytest.raises(AlreadyBlockedError):
            block_svc.block_user(repos, alice, bob)
        assert block_svc.block_history(repos, alice).total == 1

    def test_block_is_asymmetric(self, repos, db_session, alice, bob):
        block_svc.block_user(repos, alice, bob)
        block_svc.block_user(repos, bob, alice)

        assert db_session.query(Block).count() == 2
        assert block_svc.is_blocked_by(repos, alice, bob)
        assert block_svc.is_blocked_by(repos, bob, alice)

    def test_duplicate_insert_is_translated(self, repos, alice, bob, monkeypatch):
        block_svc.block_user(repos, alice, bob)

        real_is_blocked = repos.blocks.is_blocked
        calls = []

        def stale_is_blocked(blocker_id, blocked_id):
            calls.append(blocker_id)
            if len(calls) == 1:
                return False
            return real_is_blocked(blocker_id, blocked_id)

        monkeypatch.setattr(repos.blocks, "is_blocked", stale_is_blocked)

        with pytest.raises(AlreadyBlockedError):
            block_svc.block_user(repos, alice, bob)

    def test_block_unknown_user(self, repos, alice):
        with pytest.raises(UserNotFound):
            block_svc.block_user(repos, alice, "ghost")


class TestBlockCascade:
    def test_cascade_removes_follows_both_ways_and_connection(self, repos, alice, bob):
        follow_svc.follow_user(repos, alice, bob)
        follow_svc.follow_user(repos, bob, alice)
        connection_svc.request_connection(repos, alice, bob)
        connection_svc.request_connection(repos, bob, alice)

        block_svc.block_user(repos, bob, alice)

        assert not follow_svc.is_following(repos, alice, bob)
        assert not follow_svc.is_following(repos, bob, alice)
        assert not connection_svc.is_connected(repos, alice, bob)

        follow_actions = [h.action for h in follow_svc.follow_history(repos, alice).items]
        assert follow_actions.count(FollowAction.UNFOLLOW) == 2

        conn_history = connection_svc.connection_history_between(repos, alice, bob).items
        removed = [h for h in conn_history if h.action == ConnectionAction.REMOVED]
        assert len(removed) == 1
        assert removed[0].actor_id == bob.uid

        block_actions = [h.action for h in block_svc.block_history(repos, alice).items]
        assert block_actions == [BlockAction.BLOCK]

    def test_cascade_removes_pending_request(self, repos, alice, bob):
        connection_svc.request_connection(repos, bob, alice)
        block_svc.block_user(repos, alice, bob)

        assert connection_svc.pending_requests_count(repos, alice) == 0
        assert connection_svc.sent_requests_count(repos, bob) == 0
        actions = [h.action for h in connection_svc.connection_history_between(repos, alice, bob).items]
        assert sorted(actions) == sorted([ConnectionAction.REQUESTED, ConnectionAction.REMOVED])

    def test_cascade_leaves_other_pairs_alone(self, repos, alice, bob, carol):
        follow_svc.follow_user(repos, alice, carol)
        follow_svc.follow_user(repos, carol, bob)
        connection_svc.request_connection(repos, alice, carol)

        block_svc.block_user(repos, alice, bob)

        assert follow_svc.is_following(repos, alice, carol)
        assert follow_svc.is_following(repos, carol, bob)
        assert connection_svc.sent_requests_count(repos, alice) == 1

    def test_block_without_relationships(self, repos, alice, bob):
        block_svc.block_user(repos, alice, bob)
        assert follow_svc.follow_history(repos, alice).total == 0
        assert connection_svc.connection_history_between(repos, alice, bob).total == 0


class TestUnblock:
    def test_unblock(self, repos, alice, bob):
        block_svc.block_user(repos, alice, bob)
        block_svc.unblock_user(repos, alice, bob)

        assert not block_svc.is_blocked(repos, alice, bob)
        assert block_svc.can_interact(repos, alice, bob)
        actions = [h.action for h in block_svc.block_history(repos, alice).items]
        assert sorted(actions) == sorted([BlockAction.BLOCK, BlockAction.UNBLOCK])

    def test_unblock_not_blocked(self, repos, alice, bob):
        with pytest.raises(NotBlockedError):
            block_svc.unblock_user(repos, alice, bob)

    def test_unblock_wrong_direction(self, repos, alice, bob):
        block_svc.block_user(repos, alice, bob)
        with pytest.raises(NotBlockedError):
            block_svc.unblock_user(repos, bob, alice)

    def test_unblock_does_not_restore(self, repos, alice, bob):
        follow_svc.follow_user(repos, alice, bob)
        connection_svc.request_connection(repos, alice, bob)
        connection_svc.request_connection(repos, bob, alice)

        block_svc.block_user(repos, alice, bob)
        block_svc.unblock_user(repos, alice, bob)

        assert not follow_svc.is_following(repos, alice, bob)
        assert not connection_svc.is_connected(repos, alice, bob)
        follow_svc.follow_user(repos, alice, bob)


class TestBlockQueries:
    def test_status_and_can_interact(self, repos, alice, bob, carol):
        block_svc.block_user(repos, bob, alice)

        status = block_svc.block_status(repos, alice, bob)
        assert (status.blocked, status.blocked_by, status.can_interact) == (False, True, False)
        assert not block_svc.can_interact(repos, alice, bob)
        assert block_svc.can_interact(repos, alice, carol)

    def test_list_and_count(self, repos, alice, bob, carol):
        block_svc.block_user(repos, alice, bob)
        block_svc.block_user(repos, alice, carol, reason="rude")

        listing = block_svc.list_blocked(repos, alice)
        assert listing.total == 2
        assert {item.user.uid for item in listing.items} == {bob.uid, carol.uid}
        assert block_svc.blocked_count(repos, alice) == 2
        assert block_svc.blocked_count(repos, bob) == 0
