from typing import Optional, Protocol

from app.models.history import FollowAction, ConnectionAction, BlockAction
from app.schemas.history import (
    FollowHistoryOut,
    ConnectionHistoryOut,
    BlockHistoryOut,
    BatchFollowHistoryOut,
    BatchConnectionHistoryOut,
    BatchBlockHistoryOut,
)


class IHistoryRepository(Protocol):
    """
    关系流水仓库接口协议：
    - 三张只插入的历史表（关注 / 连接 / 拉黑）
    - 写入必须和当前状态表处于同一事务，写失败整个操作回滚
    """

    def add_follow_event(self, follower_id: str, followed_id: str, action: FollowAction) -> FollowHistoryOut:
        ...

    def add_connection_event(self, user_x: str, user_y: str, actor_id: str, action: ConnectionAction) -> ConnectionHistoryOut:
        """
        user_x / user_y 顺序无所谓，落库时统一成规范顺序
        """
        ...

    def add_block_event(self, blocker_id: str, blocked_id: str, action: BlockAction, reason: Optional[str] = None) -> BlockHistoryOut:
        ...

    def list_follow_history(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchFollowHistoryOut:
        """user 作为任意一方的关注流水，按时间倒序"""
        ...

    def list_connection_history(self, user_a: str, user_b: str, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionHistoryOut:
        """A 与 B 之间的全部连接流水（单个规范对查询），按时间倒序"""
        ...

    def list_block_history(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchBlockHistoryOut:
        ...
