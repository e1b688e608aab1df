from typing import Any, Optional

from app.schemas.follow import FollowOut, BatchFollowsOut, FollowCountsOut
from app.schemas.history import BatchFollowHistoryOut
from app.models.history import FollowAction
from app.storage.relation_repos import RelationRepos
from app.service.identity_svc import resolve_user, resolve_pair

from app.core.db import run_atomic, storage_guard
from app.core.logx import logger
from app.core.exceptions import (
    SelfReferenceError,
    BlockedError,
    AlreadyFollowingError,
    NotFollowingError,
    StorageFailure,
)


@storage_guard
def follow_user(repos: RelationRepos, follower: Any, followed: Any) -> FollowOut:
    """
    关注用户：
    1. 解析双方身份，禁止关注自己
    2. 锁住这对用户，任一方向存在拉黑则失败
    3. 已经关注过 => AlreadyFollowingError（重复关注不是幂等成功）
    4. 写 Follow 记录 + follow 流水，同一事务提交
    并发重复关注时由唯一约束兜底，IntegrityError 翻译成 AlreadyFollowingError
    """
    follower_id, followed_id = resolve_pair(repos.users, follower, followed)
    if follower_id == followed_id:
        raise SelfReferenceError("follow")

    def work() -> FollowOut:
        repos.users.lock_pair(follower_id, followed_id)

        if repos.blocks.is_blocked_either(follower_id, followed_id):
            raise BlockedError()
        if repos.follows.is_following(follower_id, followed_id):
            raise AlreadyFollowingError(follower_id, followed_id)

        follow = repos.follows.create_follow(follower_id, followed_id)
        repos.history.add_follow_event(follower_id, followed_id, FollowAction.FOLLOW)
        return follow

    def on_conflict(err) -> None:
        if repos.follows.is_following(follower_id, followed_id):
            raise AlreadyFollowingError(follower_id, followed_id)
        raise StorageFailure() from err

    follow = run_atomic(repos.db, work, on_integrity_error=on_conflict, op="follow")
    logger.info(f"follow {follower_id} -> {followed_id}")
    return follow


@storage_guard
def unfollow_user(repos: RelationRepos, follower: Any, followed: Any) -> FollowOut:
    """
    取消关注：删除当前关注记录并写 unfollow 流水
    - 没有关注记录（包括自己取关自己）=> NotFollowingError
    """
    follower_id, followed_id = resolve_pair(repos.users, follower, followed)

    def work() -> FollowOut:
        deleted = repos.follows.delete_follow(follower_id, followed_id)
        if deleted is None:
            raise NotFollowingError(follower_id, followed_id)
        repos.history.add_follow_event(follower_id, followed_id, FollowAction.UNFOLLOW)
        return deleted

    deleted = run_atomic(repos.db, work, op="unfollow")
    logger.info(f"unfollow {follower_id} -> {followed_id}")
    return deleted


# ---------- 查询 ----------

@storage_guard
def is_following(repos: RelationRepos, follower: Any, followed: Any) -> bool:
    follower_id, followed_id = resolve_pair(repos.users, follower, followed)
    return repos.follows.is_following(follower_id, followed_id)


@storage_guard
def list_following(repos: RelationRepos, user: Any, page: int = 0, page_size: Optional[int] = None) -> BatchFollowsOut:
    """
    我关注的人列表（最新关注在前）
    - 返回 FollowUserOut 列表（对方 UserOut + is_mutual）
    """
    uid = resolve_user(repos.users, user)
    return repos.follows.list_following(uid, page=page, page_size=page_size)


@storage_guard
def list_followers(repos: RelationRepos, user: Any, page: int = 0, page_size: Optional[int] = None) -> BatchFollowsOut:
    """
    我的粉丝列表（最新关注在前）
    """
    uid = resolve_user(repos.users, user)
    return repos.follows.list_followers(uid, page=page, page_size=page_size)


@storage_guard
def followers_count(repos: RelationRepos, user: Any) -> int:
    return repos.follows.count_followers(resolve_user(repos.users, user))


@storage_guard
def following_count(repos: RelationRepos, user: Any) -> int:
    return repos.follows.count_following(resolve_user(repos.users, user))


@storage_guard
def follow_counts(repos: RelationRepos, user: Any) -> FollowCountsOut:
    uid = resolve_user(repos.users, user)
    return FollowCountsOut(
        followers=repos.follows.count_followers(uid),
        following=repos.follows.count_following(uid),
    )


@storage_guard
def follow_history(repos: RelationRepos, user: Any, page: int = 0, page_size: Optional[int] = None) -> BatchFollowHistoryOut:
    """用户作为任意一方的关注 / 取关流水，最新在前"""
    uid = resolve_user(repos.users, user)
    return repos.history.list_follow_history(uid, page=page, page_size=page_size)
