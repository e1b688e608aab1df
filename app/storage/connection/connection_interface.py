from typing import Optional, Protocol

from app.schemas.connection import ConnectionOut, BatchConnectionsOut


class IConnectionRepository(Protocol):
    """
    连接关系仓库接口协议
    - 每个无序用户对最多一行（存储层唯一约束保证）
    - 写方法只 flush / 条件更新，不提交
    """

    def get_connection(self, connection_id: str) -> Optional[ConnectionOut]:
        ...

    def get_between(self, user_a: str, user_b: str) -> Optional[ConnectionOut]:
        """两个用户之间的连接记录（不分方向、不分状态）"""
        ...

    def get_pending(self, requester_id: str, recipient_id: str) -> Optional[ConnectionOut]:
        """requester -> recipient 方向上处于 pending 的请求"""
        ...

    def get_accepted_between(self, user_a: str, user_b: str) -> Optional[ConnectionOut]:
        ...

    def is_connected(self, user_a: str, user_b: str) -> bool:
        ...

    def create_pending(self, requester_id: str, recipient_id: str) -> ConnectionOut:
        """
        插入 pending 请求；同一对用户已有记录时唯一约束抛 IntegrityError
        """
        ...

    def accept_pending(self, connection_id: str) -> Optional[ConnectionOut]:
        """
        条件更新 pending -> accepted（WHERE status = 'pending'），并写入 responded_at
        没有命中任何行（已被别人接受 / 删除）时返回 None
        """
        ...

    def delete_connection(self, connection_id: str, status: Optional[str] = None) -> bool:
        """
        条件删除：status 不为 None 时只删除处于该状态的记录
        返回是否真的删掉了一行
        """
        ...

    def list_connections(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
        """已接受的连接，按响应时间倒序，附带对方用户信息"""
        ...

    def list_pending_requests(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
        """别人发给我的 pending 请求，按请求时间倒序"""
        ...

    def list_sent_requests(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
        """我发出的 pending 请求，按请求时间倒序"""
        ...

    def count_connections(self, user_id: str) -> int:
        ...

    def count_pending_requests(self, user_id: str) -> int:
        ...

    def count_sent_requests(self, user_id: str) -> int:
        ...

    def count_by_status(self, status: str) -> int:
        """全站某个状态的连接数"""
        ...
