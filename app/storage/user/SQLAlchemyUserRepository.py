from typing import Optional, Any
from sqlalchemy.orm import Session
from app.models.user import User
from app.schemas.user import UserCreate, UserOut
from app.storage.user.user_interface import IUserRepository
from app.core.db import transaction


class SQLAlchemyUserRepository(IUserRepository):
    """
    使用 SQLAlchemy 实现的用户仓库
    业务层依赖 IUserRepository 接口，而不是这个具体实现
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        """内部封装一个基础查询（过滤软删除）"""
        return self.db.query(User).filter(User.deleted_at.is_(None))

    def _uid_by_pk(self, pk: int) -> Optional[str]:
        row = (
            self.db.query(User.uid)
            .filter(User._id == pk, User.deleted_at.is_(None))
            .first()
        )
        return row[0] if row else None

    def _uid_by_uid(self, uid: str) -> Optional[str]:
        row = (
            self.db.query(User.uid)
            .filter(User.uid == uid, User.deleted_at.is_(None))
            .first()
        )
        return row[0] if row else None

    def resolve_uid(self, reference: Any) -> Optional[str]:
        # bool 是 int 的子类，不能当成数字 id
        if reference is None or isinstance(reference, bool):
            return None

        if isinstance(reference, int):
            return self._uid_by_pk(reference)

        if isinstance(reference, str):
            ref = reference.strip()
            if not ref:
                return None
            if ref.isdigit():
                return self._uid_by_pk(int(ref))
            return self._uid_by_uid(ref)

        # 结构体：优先 uid，其次数字主键
        uid = getattr(reference, "uid", None)
        if isinstance(uid, str):
            return self._uid_by_uid(uid)
        pk = getattr(reference, "_id", None)
        if isinstance(pk, int) and not isinstance(pk, bool):
            return self._uid_by_pk(pk)
        return None

    def get_user_by_uid(self, uid: str) -> Optional[UserOut]:
        user = self._base_query().filter(User.uid == uid).first()
        return UserOut.model_validate(user) if user else None

    def create_user(self, user_data: UserCreate) -> UserOut:
        user = User(**user_data.model_dump(exclude_none=True))

        with transaction(self.db):
            self.db.add(user)

        self.db.refresh(user)
        return UserOut.model_validate(user)

    def lock_pair(self, uid_a: str, uid_b: str) -> None:
        (
            self.db.query(User._id)
            .filter(User.uid.in_(sorted({uid_a, uid_b})))
            .order_by(User.uid)
            .with_for_update()
            .all()
        )
