from typing import Optional, List
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from app.schemas.user import UserOut


class FollowCreate(BaseModel):
    """
    创建关注
    - user_id / followed_user_id 可以是 uid，也可以是数字 id
    """
    user_id: str               # 关注者
    followed_user_id: str      # 被关注者

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class FollowCancel(BaseModel):
    """
    取消关注（直接删除当前关注记录）
    """
    user_id: str               # 关注者
    followed_user_id: str      # 被关注者

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class FollowOut(BaseModel):
    """
    单条关注关系输出
    """
    id: str
    follower_id: str
    followed_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FollowUserOut(BaseModel):
    """
    在关注列表 / 粉丝列表展示中，更实用的结构：
    - 返回对方用户的基础信息
    - 是否已互相关注
    """
    user: UserOut
    followed_at: datetime
    is_mutual: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)


class BatchFollowsOut(BaseModel):
    """
    分页列表返回（关注列表/粉丝列表）
    - total: 满足条件数量
    - count: 当前页数量
    """
    total: int
    count: int
    items: List[FollowUserOut]

    model_config = ConfigDict(from_attributes=True)


class FollowCountsOut(BaseModel):
    followers: int
    following: int
