from typing import Any

from app.schemas.relationship import (
    PendingDirection,
    RelationshipOut,
    RelationshipStatsOut,
    RelationshipConfigOut,
)
from app.models.connection import ConnectionStatus
from app.storage.relation_repos import RelationRepos
from app.service.identity_svc import resolve_pair

from app.core.db import storage_guard


@storage_guard
def get_relationship(repos: RelationRepos, user: Any, other_user: Any) -> RelationshipOut:
    """
    user 视角下和 other_user 的完整关系（纯只读聚合）：
    - connected / connection_pending 都从同一行连接记录推出来，
      所以 connected 为 True 时 connection_pending 一定是 none
    """
    user_id, other_id = resolve_pair(repos.users, user, other_user)

    conn = repos.connections.get_between(user_id, other_id)
    connected = conn is not None and conn.status == ConnectionStatus.ACCEPTED
    pending = PendingDirection.NONE
    if conn is not None and conn.status == ConnectionStatus.PENDING:
        pending = PendingDirection.SENT if conn.requester_id == user_id else PendingDirection.RECEIVED

    return RelationshipOut(
        following=repos.follows.is_following(user_id, other_id),
        followed_by=repos.follows.is_following(other_id, user_id),
        connected=connected,
        connection_pending=pending,
        blocked=repos.blocks.is_blocked(user_id, other_id),
        blocked_by=repos.blocks.is_blocked(other_id, user_id),
    )


# ---------- 全站计数（后台看板） ----------

@storage_guard
def total_follows(repos: RelationRepos) -> int:
    return repos.follows.count_all()


@storage_guard
def total_accepted_connections(repos: RelationRepos) -> int:
    return repos.connections.count_by_status(ConnectionStatus.ACCEPTED.value)


@storage_guard
def total_pending_connections(repos: RelationRepos) -> int:
    return repos.connections.count_by_status(ConnectionStatus.PENDING.value)


@storage_guard
def total_blocks(repos: RelationRepos) -> int:
    return repos.blocks.count_all()


@storage_guard
def get_stats(repos: RelationRepos) -> RelationshipStatsOut:
    return RelationshipStatsOut(
        total_follows=repos.follows.count_all(),
        total_accepted_connections=repos.connections.count_by_status(ConnectionStatus.ACCEPTED.value),
        total_pending_connections=repos.connections.count_by_status(ConnectionStatus.PENDING.value),
        total_blocks=repos.blocks.count_all(),
    )


def get_config(repos: RelationRepos, enabled: bool) -> RelationshipConfigOut:
    """
    看板配置：全站计数 + 模块开关
    开关由调用方注入，引擎自己不读配置
    """
    stats = get_stats(repos)
    return RelationshipConfigOut(enabled=enabled, **stats.model_dump())
