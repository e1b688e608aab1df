from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from fastapi import Depends

from app.core.config import settings
from app.models.base import Base
# 导入所有模型，保证 Base.metadata 里有完整的表结构
from app.models import user, follow, connection, block, history  # noqa: F401
from app.storage.user.SQLAlchemyUserRepository import SQLAlchemyUserRepository
from app.storage.follow.SQLAlchemyFollowRepository import SQLAlchemyFollowRepository
from app.storage.connection.SQLAlchemyConnectionRepository import SQLAlchemyConnectionRepository
from app.storage.block.SQLAlchemyBlockRepository import SQLAlchemyBlockRepository
from app.storage.history.SQLAlchemyHistoryRepository import SQLAlchemyHistoryRepository
from app.storage.relation_repos import RelationRepos

# SQLAlchemy 引擎（连接串见 app/core/config.py，可用环境变量 DB_URL 覆盖）
engine = create_engine(settings.DB_URL, echo=settings.DB_ECHO, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """建表（已存在的表不会重建）"""
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def build_relation_repos(db: Session) -> RelationRepos:
    return RelationRepos(
        db=db,
        users=SQLAlchemyUserRepository(db),
        follows=SQLAlchemyFollowRepository(db),
        connections=SQLAlchemyConnectionRepository(db),
        blocks=SQLAlchemyBlockRepository(db),
        history=SQLAlchemyHistoryRepository(db),
    )


# 未来可以根据配置切换不同的实现
def get_relation_repos(db: Session = Depends(get_db)) -> RelationRepos:
    return build_relation_repos(db)
