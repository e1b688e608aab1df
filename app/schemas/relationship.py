from enum import Enum
from pydantic import BaseModel, ConfigDict


class PendingDirection(str, Enum):
    SENT = "sent"          # A 向 B 发出的请求还在等待
    RECEIVED = "received"  # B 向 A 发出的请求还在等待
    NONE = "none"


class RelationshipOut(BaseModel):
    """
    A 视角下与 B 的完整关系（只读聚合，不写库）
    - connected 为 True 时 connection_pending 一定是 none
    """
    following: bool
    followed_by: bool
    connected: bool
    connection_pending: PendingDirection
    blocked: bool
    blocked_by: bool

    model_config = ConfigDict(from_attributes=True)


class RelationshipStatsOut(BaseModel):
    """
    全站统计（给后台看板用）
    """
    total_follows: int
    total_accepted_connections: int
    total_pending_connections: int
    total_blocks: int


class RelationshipConfigOut(RelationshipStatsOut):
    enabled: bool
