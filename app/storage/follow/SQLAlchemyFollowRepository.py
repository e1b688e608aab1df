from typing import Optional, List

from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from app.models.follow import Follow
from app.models.user import User
from app.schemas.follow import FollowOut, FollowUserOut, BatchFollowsOut
from app.schemas.user import UserOut
from app.storage.follow.follow_interface import IFollowRepository
from app.core.time import now_utc8


class SQLAlchemyFollowRepository(IFollowRepository):
    """
    使用 SQLAlchemy 实现的关注关系仓库
    """

    def __init__(self, db: Session):
        self.db = db

    def _pair_query(self, follower_id: str, followed_id: str):
        return self.db.query(Follow).filter(
            Follow.follower_id == follower_id,
            Follow.followed_id == followed_id,
        )

    def create_follow(self, follower_id: str, followed_id: str) -> FollowOut:
        follow = Follow(
            follower_id=follower_id,
            followed_id=followed_id,
            created_at=now_utc8(),
        )
        self.db.add(follow)
        # flush 让唯一约束冲突在事务内部就暴露出来
        self.db.flush()
        return FollowOut.model_validate(follow)

    def delete_follow(self, follower_id: str, followed_id: str) -> Optional[FollowOut]:
        follow = self._pair_query(follower_id, followed_id).first()
        if not follow:
            return None

        deleted_out = FollowOut.model_validate(follow)
        deleted = (
            self.db.query(Follow)
            .filter(Follow.id == follow.id)
            .delete(synchronize_session="fetch")
        )
        return deleted_out if deleted else None

    def is_following(self, follower_id: str, followed_id: str) -> bool:
        return self._pair_query(follower_id, followed_id).first() is not None

    def list_between(self, user_a: str, user_b: str) -> List[FollowOut]:
        rows = (
            self.db.query(Follow)
            .filter(
                or_(
                    and_(Follow.follower_id == user_a, Follow.followed_id == user_b),
                    and_(Follow.follower_id == user_b, Follow.followed_id == user_a),
                )
            )
            .all()
        )
        return [FollowOut.model_validate(f) for f in rows]

    def _following_query(self, user_id: str):
        """我关注的、未被软删除的用户（列表和计数共用，保证两者一致）"""
        return (
            self.db.query(Follow, User)
            .join(User, User.uid == Follow.followed_id)
            .filter(
                Follow.follower_id == user_id,
                User.deleted_at.is_(None),
            )
        )

    def _followers_query(self, user_id: str):
        return (
            self.db.query(Follow, User)
            .join(User, User.uid == Follow.follower_id)
            .filter(
                Follow.followed_id == user_id,
                User.deleted_at.is_(None),
            )
        )

    def list_following(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchFollowsOut:
        """
        我关注的人列表：
        - 从 Follow 中找出 follower_id = 当前用户 的记录
        - join 到 User 表拿到被关注者的用户信息
        - 再计算这些人中，哪些也关注了我（互关）
        """
        base_q = self._following_query(user_id).order_by(Follow.created_at.desc(), Follow.id.desc())
        return self._build_batch(base_q, user_id, page, page_size, following=True)

    def list_followers(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchFollowsOut:
        """
        我的粉丝列表：
        - 从 Follow 中找出 followed_id = 当前用户 的记录
        - join 到 User 表拿到关注者的用户信息
        - 再计算这些人中，哪些也是我关注的（互关）
        """
        base_q = self._followers_query(user_id).order_by(Follow.created_at.desc(), Follow.id.desc())
        return self._build_batch(base_q, user_id, page, page_size, following=False)

    def _build_batch(self, base_q, user_id: str, page: int, page_size: Optional[int], following: bool) -> BatchFollowsOut:
        total = base_q.count()

        if page_size is not None:
            base_q = base_q.offset(page * page_size).limit(page_size)
        rows = base_q.all()

        # 对方用户 ID 列表，用于批量查询互关
        other_user_ids = [u.uid for _, u in rows]
        if following:
            mutual_ids = self._get_mutual_ids_following(user_id, other_user_ids)
        else:
            mutual_ids = self._get_mutual_ids_followers(user_id, other_user_ids)

        items: List[FollowUserOut] = []
        for follow_orm, user_orm in rows:
            items.append(
                FollowUserOut(
                    user=UserOut.model_validate(user_orm),
                    followed_at=follow_orm.created_at,
                    is_mutual=(user_orm.uid in mutual_ids),
                )
            )

        return BatchFollowsOut(
            total=total,
            count=len(items),
            items=items,
        )

    def _get_mutual_ids_following(self, user_id: str, other_user_ids: List[str]) -> set[str]:
        """
        list_following 用：
        - 判断 other_user_ids（我关注的人）是否也关注我
        """
        if not other_user_ids:
            return set()
        rows = (
            self.db.query(Follow.follower_id)
            .filter(
                Follow.follower_id.in_(other_user_ids),
                Follow.followed_id == user_id,
            )
            .all()
        )
        return {r[0] for r in rows}

    def _get_mutual_ids_followers(self, user_id: str, other_user_ids: List[str]) -> set[str]:
        """
        list_followers 用：
        - 判断我是否关注 other_user_ids（我的粉丝）
        """
        if not other_user_ids:
            return set()
        rows = (
            self.db.query(Follow.followed_id)
            .filter(
                Follow.follower_id == user_id,
                Follow.followed_id.in_(other_user_ids),
            )
            .all()
        )
        return {r[0] for r in rows}

    def count_followers(self, user_id: str) -> int:
        return self._followers_query(user_id).count()

    def count_following(self, user_id: str) -> int:
        return self._following_query(user_id).count()

    def count_all(self) -> int:
        return self.db.query(Follow).count()
