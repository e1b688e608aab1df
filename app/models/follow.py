from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, Index
from app.models.base import Base
from app.core.time import now_utc8, new_rid


class Follow(Base):
    """ 用户关注关系表，只保存“当前有效”的关注（取消关注直接删除，历史见 follows_history）

        CREATE TABLE IF NOT EXISTS follows (
            id VARCHAR(36) PRIMARY KEY,                      -- 记录主键
            follower_id VARCHAR(36) NOT NULL,                -- 关注者ID (FK -> users.uid)
            followed_id VARCHAR(36) NOT NULL,                -- 被关注者ID (FK -> users.uid)
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,  -- 关注时间

            CONSTRAINT uq_follows_pair UNIQUE (follower_id, followed_id),   -- 防止并发重复关注
            CONSTRAINT ck_follows_not_self CHECK (follower_id <> followed_id)
        );

        CREATE INDEX idx_follows_follower ON follows (follower_id);
        CREATE INDEX idx_follows_followed ON follows (followed_id);
    """

    __tablename__ = "follows"

    id = Column(String(36), primary_key=True, default=new_rid)
    # 关注者ID
    follower_id = Column(String(36), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    # 被关注者ID
    followed_id = Column(String(36), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8, nullable=False)

    __table_args__ = (
        # 唯一约束放在存储层，两个并发的 follow 只有一个能插入成功
        UniqueConstraint("follower_id", "followed_id", name="uq_follows_pair"),
        CheckConstraint("follower_id <> followed_id", name="ck_follows_not_self"),
        Index("idx_follows_follower", "follower_id"),
        Index("idx_follows_followed", "followed_id"),
    )
