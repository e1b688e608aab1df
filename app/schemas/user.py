from typing import Optional
from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    """
    创建用户（关系引擎自己不注册用户，这里给初始化脚本 / 测试用）
    """
    username: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class UserOut(BaseModel):
    """
    对外返回的用户公开信息，列表里展示“对方是谁”
    """
    uid: str                                     # 规范用户标识
    username: str                                # 昵称
    avatar_url: Optional[str] = None             # 头像 URL
    bio: Optional[str] = None                    # 简介

    model_config = ConfigDict(from_attributes=True)
