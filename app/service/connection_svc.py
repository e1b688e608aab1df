from typing import Any, Optional

from app.schemas.connection import ConnectionOut, BatchConnectionsOut, ConnectionCountsOut
from app.schemas.history import BatchConnectionHistoryOut
from app.models.connection import ConnectionStatus
from app.models.history import ConnectionAction
from app.storage.relation_repos import RelationRepos
from app.service.identity_svc import resolve_user, resolve_pair

from app.core.config import settings
from app.core.db import run_atomic, storage_guard
from app.core.logx import logger
from app.core.exceptions import (
    SelfReferenceError,
    BlockedError,
    AlreadyConnectedError,
    PendingRequestExistsError,
    NotConnectedError,
    ConnectionNotFound,
    NotPendingError,
    NotParticipantError,
    ConcurrentUpdateError,
)


def _accept(repos: RelationRepos, conn: ConnectionOut, actor_id: str) -> ConnectionOut:
    """
    pending -> accepted 的条件更新 + accepted 流水
    条件更新没命中说明别人先改了这一行，交给 run_atomic 重试
    """
    accepted = repos.connections.accept_pending(conn.id)
    if accepted is None:
        raise ConcurrentUpdateError(f"connection {conn.id} is no longer pending")
    repos.history.add_connection_event(conn.requester_id, conn.recipient_id, actor_id, ConnectionAction.ACCEPTED)
    return accepted


def _connection_id(connection: Any) -> str:
    if isinstance(connection, str):
        return connection
    return getattr(connection, "id", connection)


@storage_guard
def request_connection(repos: RelationRepos, requester: Any, recipient: Any) -> ConnectionOut:
    """
    发起连接请求：
    1. 解析双方身份，禁止连接自己
    2. 锁住这对用户，任一方向拉黑 => BlockedError
    3. 已经是 accepted => AlreadyConnectedError
    4. 对方之前已经向我发过 pending 请求 => 直接合并成 accepted（不新建第二行）
    5. 我已经发过 pending 请求 => PendingRequestExistsError
    6. 否则新建 pending 记录 + requested 流水

    每个无序用户对只能有一行，并发的双向请求撞上唯一约束时整体重试，
    重试时会重新读到对方已提交的那一行，走合并或者 AlreadyConnected
    """
    requester_id, recipient_id = resolve_pair(repos.users, requester, recipient)
    if requester_id == recipient_id:
        raise SelfReferenceError("connect with")

    merged = False

    def work() -> ConnectionOut:
        nonlocal merged
        repos.users.lock_pair(requester_id, recipient_id)

        if repos.blocks.is_blocked_either(requester_id, recipient_id):
            raise BlockedError()
        if repos.connections.is_connected(requester_id, recipient_id):
            raise AlreadyConnectedError()

        reverse = repos.connections.get_pending(recipient_id, requester_id)
        if reverse is not None:
            merged = True
            return _accept(repos, reverse, requester_id)

        if repos.connections.get_pending(requester_id, recipient_id) is not None:
            raise PendingRequestExistsError()

        merged = False
        conn = repos.connections.create_pending(requester_id, recipient_id)
        repos.history.add_connection_event(requester_id, recipient_id, requester_id, ConnectionAction.REQUESTED)
        return conn

    def on_conflict(err) -> None:
        # 另一方的请求刚刚提交，重试时重新判断
        return None

    conn = run_atomic(
        repos.db,
        work,
        retries=settings.TRANSACTION_RETRIES,
        on_integrity_error=on_conflict,
        op="request_connection",
    )
    if merged:
        logger.info(f"connection {conn.id} accepted by {requester_id} (mutual request)")
    else:
        logger.info(f"connection {conn.id} requested {requester_id} -> {recipient_id}")
    return conn


def _load_pending(repos: RelationRepos, connection_id: str, actor_id: Optional[str], recipient_only: bool) -> tuple:
    """
    事务内重新读取连接并校验：
    - 不存在 => ConnectionNotFound
    - 不是 pending => NotPendingError
    - 操作人默认是接收方；显式传入时必须是参与方之一
    - recipient_only（接受）时只允许接收方，发起方不能自己接受自己的请求
    """
    conn = repos.connections.get_connection(connection_id)
    if conn is None:
        raise ConnectionNotFound(connection_id)
    if conn.status != ConnectionStatus.PENDING:
        raise NotPendingError()

    if actor_id is None:
        actor_id = conn.recipient_id
    if not conn.involves(actor_id):
        raise NotParticipantError()
    if recipient_only and actor_id != conn.recipient_id:
        raise NotParticipantError("Only the recipient can accept this connection request.")
    return conn, actor_id


@storage_guard
def accept_connection(repos: RelationRepos, connection: Any, actor: Any = None) -> ConnectionOut:
    """
    接受连接请求（只能从 pending 出发）：
    - connection 可以是连接 id，也可以是带 .id 的连接对象
    - 只有接收方可以接受；actor 不传时默认就是接收方
    - 被并发处理过时，重试会报出真实状态（NotPending / ConnectionNotFound）
    """
    connection_id = _connection_id(connection)
    actor_ref = None if actor is None else resolve_user(repos.users, actor)
    actor_ids = []

    def work() -> ConnectionOut:
        conn, actor_id = _load_pending(repos, connection_id, actor_ref, recipient_only=True)
        repos.users.lock_pair(conn.requester_id, conn.recipient_id)
        actor_ids.append(actor_id)
        return _accept(repos, conn, actor_id)

    conn = run_atomic(repos.db, work, retries=settings.TRANSACTION_RETRIES, op="accept_connection")
    logger.info(f"connection {conn.id} accepted by {actor_ids[-1]}")
    return conn


@storage_guard
def reject_connection(repos: RelationRepos, connection: Any, actor: Any = None) -> ConnectionOut:
    """
    拒绝连接请求：
    1. 先写 rejected 流水（记录要比这一行活得久）
    2. 再删除 pending 记录，回到“无关系”
    被拒绝的请求不会以 rejected 状态保留，返回的是删除前的快照
    接收方拒绝，或者发起方撤回自己的请求，两者都可以
    """
    connection_id = _connection_id(connection)
    actor_ref = None if actor is None else resolve_user(repos.users, actor)
    actor_ids = []

    def work() -> ConnectionOut:
        conn, actor_id = _load_pending(repos, connection_id, actor_ref, recipient_only=False)
        repos.users.lock_pair(conn.requester_id, conn.recipient_id)
        actor_ids.append(actor_id)

        repos.history.add_connection_event(conn.requester_id, conn.recipient_id, actor_id, ConnectionAction.REJECTED)
        if not repos.connections.delete_connection(conn.id, status=ConnectionStatus.PENDING.value):
            raise ConcurrentUpdateError(f"connection {conn.id} is no longer pending")
        return conn

    conn = run_atomic(repos.db, work, retries=settings.TRANSACTION_RETRIES, op="reject_connection")
    logger.info(f"connection {conn.id} rejected by {actor_ids[-1]}")
    return conn


@storage_guard
def remove_connection(repos: RelationRepos, user: Any, other_user: Any) -> ConnectionOut:
    """
    解除已建立的连接（任意一方都可以发起，user 记为操作人）
    - 没有 accepted 记录 => NotConnectedError
    """
    user_id, other_id = resolve_pair(repos.users, user, other_user)

    def work() -> ConnectionOut:
        repos.users.lock_pair(user_id, other_id)
        conn = repos.connections.get_accepted_between(user_id, other_id)
        if conn is None:
            raise NotConnectedError()

        repos.history.add_connection_event(user_id, other_id, user_id, ConnectionAction.REMOVED)
        if not repos.connections.delete_connection(conn.id, status=ConnectionStatus.ACCEPTED.value):
            raise ConcurrentUpdateError(f"connection {conn.id} changed concurrently")
        return conn

    conn = run_atomic(repos.db, work, retries=settings.TRANSACTION_RETRIES, op="remove_connection")
    logger.info(f"connection {conn.id} removed by {user_id}")
    return conn


# ---------- 查询 ----------

@storage_guard
def get_connection(repos: RelationRepos, connection_id: str) -> ConnectionOut:
    conn = repos.connections.get_connection(connection_id)
    if conn is None:
        raise ConnectionNotFound(connection_id)
    return conn


@storage_guard
def is_connected(repos: RelationRepos, user: Any, other_user: Any) -> bool:
    user_id, other_id = resolve_pair(repos.users, user, other_user)
    return repos.connections.is_connected(user_id, other_id)


@storage_guard
def list_connections(repos: RelationRepos, user: Any, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
    """已建立的连接（最近接受的在前），每项带对方的公开信息"""
    uid = resolve_user(repos.users, user)
    return repos.connections.list_connections(uid, page=page, page_size=page_size)


@storage_guard
def list_pending_requests(repos: RelationRepos, user: Any, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
    """别人发给我、还没处理的请求"""
    uid = resolve_user(repos.users, user)
    return repos.connections.list_pending_requests(uid, page=page, page_size=page_size)


@storage_guard
def list_sent_requests(repos: RelationRepos, user: Any, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
    uid = resolve_user(repos.users, user)
    return repos.connections.list_sent_requests(uid, page=page, page_size=page_size)


@storage_guard
def connections_count(repos: RelationRepos, user: Any) -> int:
    return repos.connections.count_connections(resolve_user(repos.users, user))


@storage_guard
def pending_requests_count(repos: RelationRepos, user: Any) -> int:
    return repos.connections.count_pending_requests(resolve_user(repos.users, user))


@storage_guard
def sent_requests_count(repos: RelationRepos, user: Any) -> int:
    return repos.connections.count_sent_requests(resolve_user(repos.users, user))


@storage_guard
def connection_counts(repos: RelationRepos, user: Any) -> ConnectionCountsOut:
    uid = resolve_user(repos.users, user)
    return ConnectionCountsOut(
        connections=repos.connections.count_connections(uid),
        pending_requests=repos.connections.count_pending_requests(uid),
        sent_requests=repos.connections.count_sent_requests(uid),
    )


@storage_guard
def connection_history_between(
    repos: RelationRepos,
    user: Any,
    other_user: Any,
    page: int = 0,
    page_size: Optional[int] = None,
) -> BatchConnectionHistoryOut:
    """
    两个用户之间的全部连接流水（不区分谁发起），最新在前
    被拒绝的请求只能从这里查到
    """
    user_id, other_id = resolve_pair(repos.users, user, other_user)
    return repos.history.list_connection_history(user_id, other_id, page=page, page_size=page_size)
