from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from app.models.block import Block
from app.models.user import User
from app.schemas.block import BlockOut, BlockUserOut, BatchBlocksOut
from app.schemas.user import UserOut
from app.storage.block.block_interface import IBlockRepository
from app.core.time import now_utc8


class SQLAlchemyBlockRepository(IBlockRepository):
    """
    使用 SQLAlchemy 实现的拉黑仓库
    """

    def __init__(self, db: Session):
        self.db = db

    def _pair_query(self, blocker_id: str, blocked_id: str):
        return self.db.query(Block).filter(
            Block.blocker_id == blocker_id,
            Block.blocked_id == blocked_id,
        )

    def create_block(self, blocker_id: str, blocked_id: str, reason: Optional[str] = None) -> BlockOut:
        block = Block(
            blocker_id=blocker_id,
            blocked_id=blocked_id,
            reason=reason,
            created_at=now_utc8(),
        )
        self.db.add(block)
        self.db.flush()
        return BlockOut.model_validate(block)

    def delete_block(self, blocker_id: str, blocked_id: str) -> Optional[BlockOut]:
        block = self._pair_query(blocker_id, blocked_id).first()
        if not block:
            return None

        deleted_out = BlockOut.model_validate(block)
        deleted = (
            self.db.query(Block)
            .filter(Block.id == block.id)
            .delete(synchronize_session="fetch")
        )
        return deleted_out if deleted else None

    def is_blocked(self, blocker_id: str, blocked_id: str) -> bool:
        return self._pair_query(blocker_id, blocked_id).first() is not None

    def is_blocked_either(self, user_a: str, user_b: str) -> bool:
        return (
            self.db.query(Block.id)
            .filter(
                or_(
                    and_(Block.blocker_id == user_a, Block.blocked_id == user_b),
                    and_(Block.blocker_id == user_b, Block.blocked_id == user_a),
                )
            )
            .first()
            is not None
        )

    def _blocked_query(self, user_id: str):
        # 已软删除的用户不出现在列表里，也不计入数量
        return (
            self.db.query(Block, User)
            .join(User, User.uid == Block.blocked_id)
            .filter(Block.blocker_id == user_id, User.deleted_at.is_(None))
        )

    def list_blocked(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchBlocksOut:
        base_q = self._blocked_query(user_id).order_by(Block.created_at.desc(), Block.id.desc())

        total = base_q.count()
        if page_size is not None:
            base_q = base_q.offset(page * page_size).limit(page_size)

        items = [
            BlockUserOut(
                block=BlockOut.model_validate(block_orm),
                user=UserOut.model_validate(user_orm),
            )
            for block_orm, user_orm in base_q.all()
        ]
        return BatchBlocksOut(total=total, count=len(items), items=items)

    def count_blocked(self, user_id: str) -> int:
        return self._blocked_query(user_id).count()

    def count_all(self) -> int:
        return self.db.query(Block).count()
