from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, Index
from app.models.base import Base
from app.core.time import now_utc8, new_rid


class Block(Base):
    """ 拉黑关系表（单向：A 拉黑 B 不代表 B 拉黑 A），解除拉黑直接删除

        CREATE TABLE IF NOT EXISTS blocks (
            id VARCHAR(36) PRIMARY KEY,
            blocker_id VARCHAR(36) NOT NULL,                 -- 拉黑者 (FK -> users.uid)
            blocked_id VARCHAR(36) NOT NULL,                 -- 被拉黑者 (FK -> users.uid)
            reason VARCHAR(255) NULL,                        -- 拉黑原因（可选）
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,

            CONSTRAINT uq_blocks_pair UNIQUE (blocker_id, blocked_id),
            CONSTRAINT ck_blocks_not_self CHECK (blocker_id <> blocked_id)
        );
    """

    __tablename__ = "blocks"

    id = Column(String(36), primary_key=True, default=new_rid)
    blocker_id = Column(String(36), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    blocked_id = Column(String(36), ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    reason = Column(String(255), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8, nullable=False)

    __table_args__ = (
        UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        CheckConstraint("blocker_id <> blocked_id", name="ck_blocks_not_self"),
        Index("idx_blocks_blocker", "blocker_id"),
        Index("idx_blocks_blocked", "blocked_id"),
    )
