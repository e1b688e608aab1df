from typing import Optional, List
from pydantic import BaseModel, ConfigDict
from datetime import datetime

from app.models.history import FollowAction, ConnectionAction, BlockAction


class FollowHistoryOut(BaseModel):
    id: str
    follower_id: str
    followed_id: str
    action: FollowAction
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConnectionHistoryOut(BaseModel):
    id: str
    user_a_id: str             # 规范顺序中较小的 uid
    user_b_id: str             # 规范顺序中较大的 uid
    actor_id: str              # 执行操作的一方
    action: ConnectionAction
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BlockHistoryOut(BaseModel):
    id: str
    blocker_id: str
    blocked_id: str
    action: BlockAction
    reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BatchFollowHistoryOut(BaseModel):
    total: int
    count: int
    items: List[FollowHistoryOut]


class BatchConnectionHistoryOut(BaseModel):
    total: int
    count: int
    items: List[ConnectionHistoryOut]


class BatchBlockHistoryOut(BaseModel):
    total: int
    count: int
    items: List[BlockHistoryOut]
