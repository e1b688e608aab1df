from sqlalchemy import Column, Integer, String, TIMESTAMP, Text
import uuid
from app.models.base import Base
from app.core.time import now_utc8


class User(Base):
    """ 用户模型，对应数据库中的 users 表。
        关系引擎只需要稳定的用户标识，不做认证，所以这里只保留身份和公开资料字段。

        CREATE TABLE IF NOT EXISTS users (
            _id INT AUTO_INCREMENT PRIMARY KEY,        -- 系统主键 ID（数字引用）
            uid VARCHAR(36) UNIQUE,                   -- 用户的业务主键（规范标识）
            username VARCHAR(100) NOT NULL,           -- 用户昵称
            avatar_url VARCHAR(255),                  -- 用户头像 URL
            bio TEXT,                                 -- 用户简介
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,    -- 创建时间
            deleted_at TIMESTAMP NULL                 -- 软删除时间戳
        );
    """

    __tablename__ = "users"
    # 系统主键：自增，调用方可以用数字 id 引用用户
    _id = Column(Integer, primary_key=True, autoincrement=True)
    # 业务主键：关系表全部以它作为用户标识
    uid = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    username = Column(String(100), nullable=False)
    avatar_url = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), default=now_utc8)
    deleted_at = Column(TIMESTAMP(timezone=True), nullable=True)  # 软删除的用户无法被解析
