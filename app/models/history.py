from enum import Enum

from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, Index
from app.models.base import Base
from app.core.time import now_utc8, new_rid

# 历史表只插入，不更新、不删除；与当前状态表在同一个事务里写入
# 外键用 RESTRICT：用户只做软删除，硬删除用户不能连带抹掉流水


class FollowAction(str, Enum):
    FOLLOW = "follow"
    UNFOLLOW = "unfollow"


class ConnectionAction(str, Enum):
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    REMOVED = "removed"


class BlockAction(str, Enum):
    BLOCK = "block"
    UNBLOCK = "unblock"


class FollowHistory(Base):
    """ 关注 / 取关流水（方向本身有意义，不做规范化）

        CREATE TABLE IF NOT EXISTS follows_history (
            id VARCHAR(36) PRIMARY KEY,
            follower_id VARCHAR(36) NOT NULL,
            followed_id VARCHAR(36) NOT NULL,
            action VARCHAR(16) NOT NULL,        -- follow / unfollow
            created_at TIMESTAMP NOT NULL
        );
    """

    __tablename__ = "follows_history"

    id = Column(String(36), primary_key=True, default=new_rid)
    follower_id = Column(String(36), ForeignKey("users.uid", ondelete="RESTRICT"), nullable=False)
    followed_id = Column(String(36), ForeignKey("users.uid", ondelete="RESTRICT"), nullable=False)
    action = Column(String(16), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8, nullable=False)

    __table_args__ = (
        Index("idx_follows_history_follower", "follower_id"),
        Index("idx_follows_history_followed", "followed_id"),
        Index("idx_follows_history_created_at", "created_at"),
    )


class ConnectionHistory(Base):
    """ 连接流水：
        - user_a_id / user_b_id 按规范顺序保存（较小的 uid 在前），与谁发起无关
          查询“A 和 B 之间的全部记录”只需要一个等值条件
        - actor_id 记录是谁执行了这次操作

        CREATE TABLE IF NOT EXISTS connections_history (
            id VARCHAR(36) PRIMARY KEY,
            user_a_id VARCHAR(36) NOT NULL,
            user_b_id VARCHAR(36) NOT NULL,
            actor_id VARCHAR(36) NOT NULL,
            action VARCHAR(16) NOT NULL,        -- requested / accepted / rejected / removed
            created_at TIMESTAMP NOT NULL
        );
    """

    __tablename__ = "connections_history"

    id = Column(String(36), primary_key=True, default=new_rid)
    user_a_id = Column(String(36), ForeignKey("users.uid", ondelete="RESTRICT"), nullable=False)
    user_b_id = Column(String(36), ForeignKey("users.uid", ondelete="RESTRICT"), nullable=False)
    actor_id = Column(String(36), ForeignKey("users.uid", ondelete="RESTRICT"), nullable=False)
    action = Column(String(16), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8, nullable=False)

    __table_args__ = (
        Index("idx_connections_history_pair", "user_a_id", "user_b_id"),
        Index("idx_connections_history_actor", "actor_id"),
        Index("idx_connections_history_created_at", "created_at"),
    )


class BlockHistory(Base):
    """ 拉黑 / 解除拉黑流水，block 时同时记录原因 """

    __tablename__ = "blocks_history"

    id = Column(String(36), primary_key=True, default=new_rid)
    blocker_id = Column(String(36), ForeignKey("users.uid", ondelete="RESTRICT"), nullable=False)
    blocked_id = Column(String(36), ForeignKey("users.uid", ondelete="RESTRICT"), nullable=False)
    action = Column(String(16), nullable=False)
    reason = Column(String(255), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8, nullable=False)

    __table_args__ = (
        Index("idx_blocks_history_blocker", "blocker_id"),
        Index("idx_blocks_history_blocked", "blocked_id"),
        Index("idx_blocks_history_created_at", "created_at"),
    )
