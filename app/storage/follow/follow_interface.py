from typing import Optional, List, Protocol

from app.schemas.follow import FollowOut, BatchFollowsOut


class IFollowRepository(Protocol):
    """
    关注关系仓库接口协议（数据层抽象接口）
    业务层只依赖本接口，不依赖具体 SQLAlchemy 实现
    写方法只 flush 不提交，事务由业务层统一控制
    """

    def create_follow(self, follower_id: str, followed_id: str) -> FollowOut:
        """
        插入关注记录：
        - 重复关注由唯一约束兜底，IntegrityError 原样抛给业务层翻译
        """
        ...

    def delete_follow(self, follower_id: str, followed_id: str) -> Optional[FollowOut]:
        """
        删除关注记录，返回被删除的记录；没有有效记录（或已被并发删除）返回 None
        """
        ...

    def is_following(self, follower_id: str, followed_id: str) -> bool:
        """
        判断 follower_id 是否正在关注 followed_id
        """
        ...

    def list_between(self, user_a: str, user_b: str) -> List[FollowOut]:
        """
        两个用户之间所有方向的关注记录（拉黑级联删除用）
        """
        ...

    def list_following(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchFollowsOut:
        """
        获取用户的“关注列表”（我关注了谁），按关注时间倒序
        - page: 页码（0 开始）
        - page_size: 每页数量，None 表示不分页
        """
        ...

    def list_followers(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchFollowsOut:
        """
        获取用户的“粉丝列表”（谁关注了我），按关注时间倒序
        """
        ...

    def count_followers(self, user_id: str) -> int:
        ...

    def count_following(self, user_id: str) -> int:
        ...

    def count_all(self) -> int:
        """全站有效关注数"""
        ...
