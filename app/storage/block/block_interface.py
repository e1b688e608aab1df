from typing import Optional, Protocol

from app.schemas.block import BlockOut, BatchBlocksOut


class IBlockRepository(Protocol):
    """
    拉黑关系仓库接口协议（单向，每个有序用户对最多一行）
    """

    def create_block(self, blocker_id: str, blocked_id: str, reason: Optional[str] = None) -> BlockOut:
        """插入拉黑记录；重复拉黑由唯一约束抛 IntegrityError"""
        ...

    def delete_block(self, blocker_id: str, blocked_id: str) -> Optional[BlockOut]:
        """删除拉黑记录，返回被删除的记录；不存在返回 None"""
        ...

    def is_blocked(self, blocker_id: str, blocked_id: str) -> bool:
        """blocker_id 是否拉黑了 blocked_id"""
        ...

    def is_blocked_either(self, user_a: str, user_b: str) -> bool:
        """任一方向存在拉黑"""
        ...

    def list_blocked(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchBlocksOut:
        """我拉黑的用户，按拉黑时间倒序"""
        ...

    def count_blocked(self, user_id: str) -> int:
        ...

    def count_all(self) -> int:
        ...
