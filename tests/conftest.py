"""Pytest configuration and fixtures for the relationship engine tests."""

import os

# 必须在导入 app 之前设置，database.py 导入时就会创建引擎
os.environ["DB_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models.base import Base
from app.models.user import User
from app.schemas.user import UserCreate
from app.storage.database import build_relation_repos

TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema and session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repos(db_session):
    return build_relation_repos(db_session)


@pytest.fixture
def make_user(repos):
    """Factory: make_user("alice") -> UserOut"""

    def _make(username: str, **kwargs):
        return repos.users.create_user(UserCreate(username=username, **kwargs))

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def pk_of(db_session):
    """uid -> 数字主键，用来测试按数字 id 引用用户"""

    def _pk(uid: str) -> int:
        return db_session.query(User._id).filter(User.uid == uid).scalar()

    return _pk
