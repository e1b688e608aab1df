from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime

from app.schemas.user import UserOut


class BlockCreate(BaseModel):
    """
    拉黑用户
    """
    blocker_id: str
    blocked_id: str
    reason: Optional[str] = Field(default=None, max_length=255)

    model_config = ConfigDict(extra="forbid")


class BlockCancel(BaseModel):
    """
    解除拉黑
    """
    blocker_id: str
    blocked_id: str

    model_config = ConfigDict(extra="forbid")


class BlockOut(BaseModel):
    id: str
    blocker_id: str
    blocked_id: str
    reason: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BlockUserOut(BaseModel):
    """
    拉黑列表项：拉黑记录 + 被拉黑用户信息
    """
    block: BlockOut
    user: UserOut

    model_config = ConfigDict(from_attributes=True)


class BatchBlocksOut(BaseModel):
    total: int
    count: int
    items: List[BlockUserOut]

    model_config = ConfigDict(from_attributes=True)


class BlockStatusOut(BaseModel):
    """
    两个用户之间的拉黑状态（从 user 的视角）
    """
    blocked: bool          # user 拉黑了 other
    blocked_by: bool       # other 拉黑了 user
    can_interact: bool     # 双方都没有拉黑对方
