from typing import Any, Optional

from app.schemas.block import BlockOut, BatchBlocksOut, BlockStatusOut
from app.schemas.history import BatchBlockHistoryOut
from app.models.history import FollowAction, ConnectionAction, BlockAction
from app.storage.relation_repos import RelationRepos
from app.service.identity_svc import resolve_user, resolve_pair

from app.core.config import settings
from app.core.db import run_atomic, storage_guard
from app.core.logx import logger
from app.core.exceptions import (
    SelfReferenceError,
    AlreadyBlockedError,
    NotBlockedError,
    ConcurrentUpdateError,
)


@storage_guard
def block_user(repos: RelationRepos, blocker: Any, blocked: Any, reason: Optional[str] = None) -> BlockOut:
    """
    拉黑用户，整个过程是一个事务：
    1. 删除双方之间所有方向的关注，每删一条写一条 unfollow 流水
    2. 删除双方之间的连接（pending 或 accepted），写 removed 流水，操作人记为拉黑方
    3. 写 Block 记录 + block 流水（带 reason）
    任一步失败全部回滚；解除拉黑不会恢复这里删掉的关系
    """
    blocker_id, blocked_id = resolve_pair(repos.users, blocker, blocked)
    if blocker_id == blocked_id:
        raise SelfReferenceError("block")

    cascade = {}

    def work() -> BlockOut:
        repos.users.lock_pair(blocker_id, blocked_id)

        if repos.blocks.is_blocked(blocker_id, blocked_id):
            raise AlreadyBlockedError()

        follows_removed = 0
        for follow in repos.follows.list_between(blocker_id, blocked_id):
            if repos.follows.delete_follow(follow.follower_id, follow.followed_id) is None:
                raise ConcurrentUpdateError(f"follow {follow.id} changed concurrently")
            repos.history.add_follow_event(follow.follower_id, follow.followed_id, FollowAction.UNFOLLOW)
            follows_removed += 1

        connections_removed = 0
        conn = repos.connections.get_between(blocker_id, blocked_id)
        if conn is not None:
            repos.history.add_connection_event(blocker_id, blocked_id, blocker_id, ConnectionAction.REMOVED)
            if not repos.connections.delete_connection(conn.id):
                raise ConcurrentUpdateError(f"connection {conn.id} changed concurrently")
            connections_removed = 1

        block = repos.blocks.create_block(blocker_id, blocked_id, reason)
        repos.history.add_block_event(blocker_id, blocked_id, BlockAction.BLOCK, reason=reason)

        cascade.update(follows=follows_removed, connections=connections_removed)
        return block

    def on_conflict(err) -> None:
        if repos.blocks.is_blocked(blocker_id, blocked_id):
            raise AlreadyBlockedError()

    block = run_atomic(
        repos.db,
        work,
        retries=settings.TRANSACTION_RETRIES,
        on_integrity_error=on_conflict,
        op="block",
    )
    logger.info(
        f"block {blocker_id} -> {blocked_id} "
        f"(cascade: {cascade['follows']} follows, {cascade['connections']} connections)"
    )
    return block


@storage_guard
def unblock_user(repos: RelationRepos, blocker: Any, blocked: Any) -> BlockOut:
    """
    解除拉黑：删除 Block 记录 + unblock 流水
    - 没有拉黑记录 => NotBlockedError
    """
    blocker_id, blocked_id = resolve_pair(repos.users, blocker, blocked)

    def work() -> BlockOut:
        deleted = repos.blocks.delete_block(blocker_id, blocked_id)
        if deleted is None:
            raise NotBlockedError()
        repos.history.add_block_event(blocker_id, blocked_id, BlockAction.UNBLOCK)
        return deleted

    deleted = run_atomic(repos.db, work, op="unblock")
    logger.info(f"unblock {blocker_id} -> {blocked_id}")
    return deleted


# ---------- 查询 ----------

@storage_guard
def is_blocked(repos: RelationRepos, blocker: Any, blocked: Any) -> bool:
    blocker_id, blocked_id = resolve_pair(repos.users, blocker, blocked)
    return repos.blocks.is_blocked(blocker_id, blocked_id)


@storage_guard
def is_blocked_by(repos: RelationRepos, user: Any, other_user: Any) -> bool:
    """other_user 是否拉黑了 user"""
    user_id, other_id = resolve_pair(repos.users, user, other_user)
    return repos.blocks.is_blocked(other_id, user_id)


@storage_guard
def can_interact(repos: RelationRepos, user: Any, other_user: Any) -> bool:
    user_id, other_id = resolve_pair(repos.users, user, other_user)
    return not repos.blocks.is_blocked_either(user_id, other_id)


@storage_guard
def block_status(repos: RelationRepos, user: Any, other_user: Any) -> BlockStatusOut:
    user_id, other_id = resolve_pair(repos.users, user, other_user)
    blocked = repos.blocks.is_blocked(user_id, other_id)
    blocked_by = repos.blocks.is_blocked(other_id, user_id)
    return BlockStatusOut(
        blocked=blocked,
        blocked_by=blocked_by,
        can_interact=not (blocked or blocked_by),
    )


@storage_guard
def list_blocked(repos: RelationRepos, user: Any, page: int = 0, page_size: Optional[int] = None) -> BatchBlocksOut:
    uid = resolve_user(repos.users, user)
    return repos.blocks.list_blocked(uid, page=page, page_size=page_size)


@storage_guard
def blocked_count(repos: RelationRepos, user: Any) -> int:
    return repos.blocks.count_blocked(resolve_user(repos.users, user))


@storage_guard
def block_history(repos: RelationRepos, user: Any, page: int = 0, page_size: Optional[int] = None) -> BatchBlockHistoryOut:
    uid = resolve_user(repos.users, user)
    return repos.history.list_block_history(uid, page=page, page_size=page_size)
