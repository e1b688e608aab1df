from enum import Enum

from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, Index
from app.models.base import Base
from app.core.time import now_utc8, new_rid


class ConnectionStatus(str, Enum):
    PENDING = "pending"    # 已发出请求，等待对方处理
    ACCEPTED = "accepted"  # 双方已确认
    # 没有 rejected：被拒绝的请求直接删除，只在历史表里留痕


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """无序用户对的规范顺序（较小的标识在前）"""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


class Connection(Base):
    """ 双向连接（好友）关系表，每个无序用户对最多一行，不论方向和状态

        CREATE TABLE IF NOT EXISTS connections (
            id VARCHAR(36) PRIMARY KEY,
            requester_id VARCHAR(36) NOT NULL,              -- 发起方 (FK -> users.uid)
            recipient_id VARCHAR(36) NOT NULL,              -- 接收方 (FK -> users.uid)
            user_low_id VARCHAR(36) NOT NULL,               -- 规范顺序：较小的 uid
            user_high_id VARCHAR(36) NOT NULL,              -- 规范顺序：较大的 uid
            status VARCHAR(16) NOT NULL DEFAULT 'pending',  -- pending / accepted
            requested_at TIMESTAMP NOT NULL,
            responded_at TIMESTAMP NULL,
            updated_at TIMESTAMP NOT NULL,

            CONSTRAINT uq_connections_pair UNIQUE (user_low_id, user_high_id),
            CONSTRAINT ck_connections_not_self CHECK (requester_id <> recipient_id)
        );
    """

    __tablename__ = "connections"

    id = Column(String(36), primary_key=True, default=new_rid)
    requester_id = Column(String(36), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    recipient_id = Column(String(36), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    # 由 requester/recipient 推导出的无序对，用来在存储层保证 A->B 与 B->A 不会同时存在
    user_low_id = Column(String(36), nullable=False)
    user_high_id = Column(String(36), nullable=False)
    status = Column(String(16), nullable=False, default=ConnectionStatus.PENDING.value)
    requested_at = Column(TIMESTAMP(timezone=True), default=now_utc8, nullable=False)
    responded_at = Column(TIMESTAMP(timezone=True), nullable=True)
    updated_at = Column(TIMESTAMP(timezone=True), default=now_utc8, onupdate=now_utc8, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_connections_pair"),
        CheckConstraint("requester_id <> recipient_id", name="ck_connections_not_self"),
        Index("idx_connections_requester_status", "requester_id", "status"),
        Index("idx_connections_recipient_status", "recipient_id", "status"),
        Index("idx_connections_status", "status"),
    )
