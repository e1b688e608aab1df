from typing import Optional, List
from pydantic import BaseModel, ConfigDict
from datetime import datetime

from app.models.connection import ConnectionStatus
from app.schemas.user import UserOut


class ConnectionRequestIn(BaseModel):
    """
    发起连接请求
    """
    requester_id: str
    recipient_id: str

    model_config = ConfigDict(extra="forbid")


class ConnectionActionIn(BaseModel):
    """
    接受 / 拒绝请求时的操作人：
    - 不传时默认是接收方
    """
    actor_id: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class ConnectionRemove(BaseModel):
    """
    解除连接：user_id 是执行解除的一方
    """
    user_id: str
    other_user_id: str

    model_config = ConfigDict(extra="forbid")


class ConnectionOut(BaseModel):
    id: str
    requester_id: str
    recipient_id: str
    status: ConnectionStatus
    requested_at: datetime
    responded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def other_party(self, uid: str) -> str:
        """连接中 uid 以外的另一方"""
        return self.recipient_id if uid == self.requester_id else self.requester_id

    def involves(self, uid: str) -> bool:
        return uid in (self.requester_id, self.recipient_id)


class ConnectionUserOut(BaseModel):
    """
    列表项：连接记录 + 对方用户信息
    """
    connection: ConnectionOut
    user: UserOut

    model_config = ConfigDict(from_attributes=True)


class BatchConnectionsOut(BaseModel):
    total: int
    count: int
    items: List[ConnectionUserOut]

    model_config = ConfigDict(from_attributes=True)


class ConnectionCountsOut(BaseModel):
    connections: int
    pending_requests: int
    sent_requests: int
