from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy import or_

from app.models.connection import canonical_pair
from app.models.history import (
    FollowHistory,
    ConnectionHistory,
    BlockHistory,
    FollowAction,
    ConnectionAction,
    BlockAction,
)
from app.schemas.history import (
    FollowHistoryOut,
    ConnectionHistoryOut,
    BlockHistoryOut,
    BatchFollowHistoryOut,
    BatchConnectionHistoryOut,
    BatchBlockHistoryOut,
)
from app.storage.history.history_interface import IHistoryRepository
from app.core.time import now_utc8


class SQLAlchemyHistoryRepository(IHistoryRepository):
    """
    使用 SQLAlchemy 实现的关系流水仓库（只有插入和查询，没有更新 / 删除）
    """

    def __init__(self, db: Session):
        self.db = db

    def _insert(self, entry):
        self.db.add(entry)
        self.db.flush()
        return entry

    # ---------- 写入 ----------

    def add_follow_event(self, follower_id: str, followed_id: str, action: FollowAction) -> FollowHistoryOut:
        entry = self._insert(
            FollowHistory(
                follower_id=follower_id,
                followed_id=followed_id,
                action=FollowAction(action).value,
                created_at=now_utc8(),
            )
        )
        return FollowHistoryOut.model_validate(entry)

    def add_connection_event(self, user_x: str, user_y: str, actor_id: str, action: ConnectionAction) -> ConnectionHistoryOut:
        user_a, user_b = canonical_pair(user_x, user_y)
        entry = self._insert(
            ConnectionHistory(
                user_a_id=user_a,
                user_b_id=user_b,
                actor_id=actor_id,
                action=ConnectionAction(action).value,
                created_at=now_utc8(),
            )
        )
        return ConnectionHistoryOut.model_validate(entry)

    def add_block_event(self, blocker_id: str, blocked_id: str, action: BlockAction, reason: Optional[str] = None) -> BlockHistoryOut:
        entry = self._insert(
            BlockHistory(
                blocker_id=blocker_id,
                blocked_id=blocked_id,
                action=BlockAction(action).value,
                reason=reason,
                created_at=now_utc8(),
            )
        )
        return BlockHistoryOut.model_validate(entry)

    # ---------- 查询 ----------

    @staticmethod
    def _page(base_q, page: int, page_size: Optional[int]):
        total = base_q.count()
        if page_size is not None:
            base_q = base_q.offset(page * page_size).limit(page_size)
        return total, base_q.all()

    def list_follow_history(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchFollowHistoryOut:
        base_q = (
            self.db.query(FollowHistory)
            .filter(or_(FollowHistory.follower_id == user_id, FollowHistory.followed_id == user_id))
            .order_by(FollowHistory.created_at.desc(), FollowHistory.id.desc())
        )
        total, rows = self._page(base_q, page, page_size)
        items = [FollowHistoryOut.model_validate(r) for r in rows]
        return BatchFollowHistoryOut(total=total, count=len(items), items=items)

    def list_connection_history(self, user_a: str, user_b: str, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionHistoryOut:
        low, high = canonical_pair(user_a, user_b)
        base_q = (
            self.db.query(ConnectionHistory)
            .filter(ConnectionHistory.user_a_id == low, ConnectionHistory.user_b_id == high)
            .order_by(ConnectionHistory.created_at.desc(), ConnectionHistory.id.desc())
        )
        total, rows = self._page(base_q, page, page_size)
        items = [ConnectionHistoryOut.model_validate(r) for r in rows]
        return BatchConnectionHistoryOut(total=total, count=len(items), items=items)

    def list_block_history(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchBlockHistoryOut:
        base_q = (
            self.db.query(BlockHistory)
            .filter(or_(BlockHistory.blocker_id == user_id, BlockHistory.blocked_id == user_id))
            .order_by(BlockHistory.created_at.desc(), BlockHistory.id.desc())
        )
        total, rows = self._page(base_q, page, page_size)
        items = [BlockHistoryOut.model_validate(r) for r in rows]
        return BatchBlockHistoryOut(total=total, count=len(items), items=items)
