import pytest

from app.core.exceptions import (
    SelfReferenceError,
    BlockedError,
    AlreadyConnectedError,
    PendingRequestExistsError,
    NotConnectedError,
    ConnectionNotFound,
    NotPendingError,
    NotParticipantError,
    StorageFailure,
)
from app.models.connection import Connection, ConnectionStatus
from app.models.history import ConnectionAction
from app.service import connection_svc, block_svc


def _actions(repos, a, b):
    return [h.action for h in connection_svc.connection_history_between(repos, a, b).items]


def _rows(db_session):
    return db_session.query(Connection).all()


class TestRequest:
    def test_request_creates_pending(self, repos, alice, bob):
        conn = connection_svc.request_connection(repos, alice, bob)

        assert conn.status == ConnectionStatus.PENDING
        assert conn.requester_id == alice.uid
        assert conn.recipient_id == bob.uid
        assert conn.responded_at is None
        assert not connection_svc.is_connected(repos, alice, bob)
        assert _actions(repos, alice, bob) == [ConnectionAction.REQUESTED]

    def test_request_self(self, repos, alice):
        with pytest.raises(SelfReferenceError) as exc:
            connection_svc.request_connection(repos, alice, alice.uid)
        assert exc.value.message == "Cannot connect with yourself."

    def test_repeat_request(self, repos, alice, bob):
        connection_svc.request_connection(repos, alice, bob)
        with pytest.raises(PendingRequestExistsError):
            connection_svc.request_connection(repos, alice, bob)
        assert connection_svc.sent_requests_count(repos, alice) == 1

    def test_request_when_blocked(self, repos, alice, bob):
        block_svc.block_user(repos, bob, alice)
        with pytest.raises(BlockedError):
            connection_svc.request_connection(repos, alice, bob)
        with pytest.raises(BlockedError):
            connection_svc.request_connection(repos, bob, alice)

    def test_mutual_request_merges(self, repos, db_session, alice, bob):
        pending = connection_svc.request_connection(repos, alice, bob)
        merged = connection_svc.request_connection(repos, bob, alice)

        assert merged.id == pending.id
        assert merged.status == ConnectionStatus.ACCEPTED
        assert merged.responded_at is not None
        assert len(_rows(db_session)) == 1
        assert connection_svc.is_connected(repos, alice, bob)

        history = connection_svc.connection_history_between(repos, alice, bob)
        assert sorted(h.action for h in history.items) == sorted([ConnectionAction.REQUESTED, ConnectionAction.ACCEPTED])
        accepted = [h for h in history.items if h.action == ConnectionAction.ACCEPTED][0]
        assert accepted.actor_id == bob.uid

    def test_request_after_accept(self, repos, alice, bob):
        connection_svc.request_connection(repos, alice, bob)
        connection_svc.request_connection(repos, bob, alice)

        with pytest.raises(AlreadyConnectedError):
            connection_svc.request_connection(repos, alice, bob)
        with pytest.raises(AlreadyConnectedError):
            connection_svc.request_connection(repos, bob, alice)

    def test_history_pair_is_canonical(self, repos, alice, bob):
        connection_svc.request_connection(repos, bob, alice)
        entry = connection_svc.connection_history_between(repos, alice, bob).items[0]

        assert (entry.user_a_id, entry.user_b_id) == tuple(sorted([alice.uid, bob.uid]))
        assert entry.actor_id == bob.uid
        assert connection_svc.connection_history_between(repos, bob, alice).total == 1


class TestMergeRaces:
    def test_stale_reverse_read_retries_into_merge(self, repos, db_session, alice, bob, monkeypatch):
        """
        bob 的请求没看到 alice 刚提交的 pending（读到旧数据），
        插入撞上无序对唯一约束 => 重试 => 合并成 accepted
        """
        connection_svc.request_connection(repos, alice, bob)

        real_get_pending = repos.connections.get_pending
        calls = []

        def stale_get_pending(requester_id, recipient_id):
            calls.append((requester_id, recipient_id))
            if len(calls) == 1:
                return None
            return real_get_pending(requester_id, recipient_id)

        monkeypatch.setattr(repos.connections, "get_pending", stale_get_pending)

        conn = connection_svc.request_connection(repos, bob, alice)

        assert conn.status == ConnectionStatus.ACCEPTED
        rows = _rows(db_session)
        assert len(rows) == 1
        assert rows[0].status == ConnectionStatus.ACCEPTED.value
        assert _actions(repos, alice, bob).count(ConnectionAction.REQUESTED) == 1

    def test_lost_compare_and_set_reports_already_connected(self, repos, db_session, alice, bob, monkeypatch):
        """
        两个人同时合并同一个 pending 请求：对方先提交，我的条件更新命中 0 行
        => 重试 => 看到 accepted => AlreadyConnected，而不是第二行
        """
        connection_svc.request_connection(repos, alice, bob)

        real_accept = repos.connections.accept_pending
        calls = []

        def accept_lost_race(connection_id):
            calls.append(connection_id)
            if len(calls) == 1:
                real_accept(connection_id)
                db_session.commit()
                return None
            return real_accept(connection_id)

        monkeypatch.setattr(repos.connections, "accept_pending", accept_lost_race)

        with pytest.raises(AlreadyConnectedError):
            connection_svc.request_connection(repos, bob, alice)

        rows = _rows(db_session)
        assert len(rows) == 1
        assert rows[0].status == ConnectionStatus.ACCEPTED.value

    def test_retries_are_bounded(self, repos, alice, bob, monkeypatch):
        connection_svc.request_connection(repos, alice, bob)
        monkeypatch.setattr(repos.connections, "accept_pending", lambda connection_id: None)

        with pytest.raises(StorageFailure):
            connection_svc.request_connection(repos, bob, alice)
        assert connection_svc.pending_requests_count(repos, bob) == 1


class TestAccept:
    def test_accept_by_recipient(self, repos, alice, bob):
        pending = connection_svc.request_connection(repos, alice, bob)
        conn = connection_svc.accept_connection(repos, pending.id)

        assert conn.status == ConnectionStatus.ACCEPTED
        assert conn.responded_at is not None
        assert connection_svc.is_connected(repos, bob, alice)

        history = connection_svc.connection_history_between(repos, alice, bob)
        accepted = [h for h in history.items if h.action == ConnectionAction.ACCEPTED]
        assert len(accepted) == 1
        assert accepted[0].actor_id == bob.uid

    def test_accept_with_connection_object_and_actor(self, repos, alice, bob):
        pending = connection_svc.request_connection(repos, alice, bob)
        connection_svc.accept_connection(repos, pending, actor=bob.uid)
        assert connection_svc.is_connected(repos, alice, bob)

    def test_accept_by_outsider(self, repos, alice, bob, carol):
        pending = connection_svc.request_connection(repos, alice, bob)
        with pytest.raises(NotParticipantError):
            connection_svc.accept_connection(repos, pending.id, actor=carol)
        assert connection_svc.get_connection(repos, pending.id).status == ConnectionStatus.PENDING

    def test_requester_cannot_accept_own_request(self, repos, alice, bob):
        pending = connection_svc.request_connection(repos, alice, bob)
        with pytest.raises(NotParticipantError) as exc:
            connection_svc.accept_connection(repos, pending.id, actor=alice)

        assert exc.value.status_code == 403
        assert connection_svc.get_connection(repos, pending.id).status == ConnectionStatus.PENDING
        assert not connection_svc.is_connected(repos, alice, bob)
        assert _actions(repos, alice, bob) == [ConnectionAction.REQUESTED]

    def test_requester_can_withdraw_by_rejecting(self, repos, db_session, alice, bob):
        pending = connection_svc.request_connection(repos, alice, bob)
        connection_svc.reject_connection(repos, pending.id, actor=alice)

        assert _rows(db_session) == []
        history = connection_svc.connection_history_between(repos, alice, bob)
        rejected = [h for h in history.items if h.action == ConnectionAction.REJECTED]
        assert rejected[0].actor_id == alice.uid

    def test_accept_twice(self, repos, alice, bob):
        pending = connection_svc.request_connection(repos, alice, bob)
        connection_svc.accept_connection(repos, pending.id)
        with pytest.raises(NotPendingError):
            connection_svc.accept_connection(repos, pending.id)

    def test_accept_unknown_id(self, repos):
        with pytest.raises(ConnectionNotFound):
            connection_svc.accept_connection(repos, "missing-id")

    def test_accept_race_surfaces_real_state(self, repos, db_session, alice, bob, monkeypatch):
        pending = connection_svc.request_connection(repos, alice, bob)

        real_accept = repos.connections.accept_pending
        calls = []

        def accept_lost_race(connection_id):
            calls.append(connection_id)
            if len(calls) == 1:
                real_accept(connection_id)
                db_session.commit()
                return None
            return real_accept(connection_id)

        monkeypatch.setattr(repos.connections, "accept_pending", accept_lost_race)

        with pytest.raises(NotPendingError):
            connection_svc.accept_connection(repos, pending.id)


class TestReject:
    def test_reject_deletes_row_and_keeps_history(self, repos, db_session, alice, bob):
        """被拒绝的请求直接删除，不保留 rejected 状态行；只有流水里还能查到"""
        pending = connection_svc.request_connection(repos, alice, bob)
        snapshot = connection_svc.reject_connection(repos, pending.id)

        assert snapshot.id == pending.id
        assert _rows(db_session) == []
        with pytest.raises(ConnectionNotFound):
            connection_svc.get_connection(repos, pending.id)
        with pytest.raises(ConnectionNotFound):
            connection_svc.accept_connection(repos, pending.id)

        history = connection_svc.connection_history_between(repos, alice, bob)
        rejected = [h for h in history.items if h.action == ConnectionAction.REJECTED]
        assert len(rejected) == 1
        assert rejected[0].actor_id == bob.uid

    def test_reject_accepted(self, repos, alice, bob):
        pending = connection_svc.request_connection(repos, alice, bob)
        connection_svc.accept_connection(repos, pending.id)
        with pytest.raises(NotPendingError):
            connection_svc.reject_connection(repos, pending.id)
        assert connection_svc.is_connected(repos, alice, bob)

    def test_reject_by_outsider(self, repos, alice, bob, carol):
        pending = connection_svc.request_connection(repos, alice, bob)
        with pytest.raises(NotParticipantError):
            connection_svc.reject_connection(repos, pending.id, actor=carol.uid)

    def test_request_again_after_reject(self, repos, alice, bob):
        pending = connection_svc.request_connection(repos, alice, bob)
        connection_svc.reject_connection(repos, pending.id)

        again = connection_svc.request_connection(repos, alice, bob)
        assert again.id != pending.id
        assert again.status == ConnectionStatus.PENDING


class TestRemove:
    def _connect(self, repos, a, b):
        connection_svc.request_connection(repos, a, b)
        return connection_svc.request_connection(repos, b, a)

    @pytest.mark.parametrize("by_requester", [True, False])
    def test_remove_by_either_side(self, repos, db_session, alice, bob, by_requester):
        self._connect(repos, alice, bob)
        caller, other = (alice, bob) if by_requester else (bob, alice)

        connection_svc.remove_connection(repos, caller, other)

        assert not connection_svc.is_connected(repos, alice, bob)
        assert _rows(db_session) == []
        history = connection_svc.connection_history_between(repos, alice, bob)
        removed = [h for h in history.items if h.action == ConnectionAction.REMOVED]
        assert len(removed) == 1
        assert removed[0].actor_id == caller.uid

    def test_remove_pending(self, repos, alice, bob):
        connection_svc.request_connection(repos, alice, bob)
        with pytest.raises(NotConnectedError):
            connection_svc.remove_connection(repos, alice, bob)
        assert connection_svc.sent_requests_count(repos, alice) == 1

    def test_remove_without_connection(self, repos, alice, bob):
        with pytest.raises(NotConnectedError):
            connection_svc.remove_connection(repos, alice, bob)

    def test_remove_self(self, repos, alice):
        with pytest.raises(NotConnectedError):
            connection_svc.remove_connection(repos, alice, alice)


class TestConnectionQueries:
    def test_lists_and_counts(self, repos, alice, bob, carol, make_user):
        dave = make_user("dave")
        connection_svc.request_connection(repos, alice, bob)
        connection_svc.request_connection(repos, bob, alice)
        connection_svc.request_connection(repos, carol, alice)
        connection_svc.request_connection(repos, alice, dave)

        connections = connection_svc.list_connections(repos, alice)
        assert [item.user.uid for item in connections.items] == [bob.uid]
        assert connections.items[0].connection.other_party(alice.uid) == bob.uid

        incoming = connection_svc.list_pending_requests(repos, alice)
        assert [item.user.uid for item in incoming.items] == [carol.uid]

        sent = connection_svc.list_sent_requests(repos, alice)
        assert [item.user.uid for item in sent.items] == [dave.uid]

        counts = connection_svc.connection_counts(repos, alice)
        assert (counts.connections, counts.pending_requests, counts.sent_requests) == (1, 1, 1)
        assert connection_svc.connections_count(repos, bob) == 1
        assert connection_svc.pending_requests_count(repos, dave) == 1

    def test_list_pagination(self, repos, make_user, alice):
        for i in range(3):
            connection_svc.request_connection(repos, make_user(f"u{i}"), alice)

        page = connection_svc.list_pending_requests(repos, alice, page=0, page_size=2)
        assert page.total == 3
        assert page.count == 2


def test_merge_then_block_removes_connection(repos, alice, bob):
    assert connection_svc.request_connection(repos, alice, bob).status == ConnectionStatus.PENDING
    assert connection_svc.request_connection(repos, bob, alice).status == ConnectionStatus.ACCEPTED
    assert connection_svc.is_connected(repos, alice, bob)
    before = connection_svc.connections_count(repos, alice)

    block_svc.block_user(repos, alice, bob)

    assert not connection_svc.is_connected(repos, alice, bob)
    assert connection_svc.connections_count(repos, alice) == before - 1
    actions = _actions(repos, alice, bob)
    assert ConnectionAction.REMOVED in actions
    assert block_svc.block_history(repos, alice).total == 1
