from typing import Optional, Protocol, Any

from app.schemas.user import UserCreate, UserOut


class IUserRepository(Protocol):
    """
    用户仓库接口协议（数据层抽象接口）
    对关系引擎来说它就是“身份解析器”：把各种形式的用户引用变成规范 uid
    """

    def resolve_uid(self, reference: Any) -> Optional[str]:
        """
        把用户引用解析为规范 uid：
        - 带 uid（或 _id）属性的对象
        - int：数字主键 _id
        - 纯数字字符串：同上
        - 其他字符串：视为 uid
        用户不存在或已软删除时返回 None（由业务层决定抛什么错）
        """
        ...

    def get_user_by_uid(self, uid: str) -> Optional[UserOut]:
        """根据 uid 查询用户（已过滤软删除）"""
        ...

    def create_user(self, user_data: UserCreate) -> UserOut:
        """创建用户（初始化数据 / 测试用，自己提交事务）"""
        ...

    def lock_pair(self, uid_a: str, uid_b: str) -> None:
        """
        在当前事务内按规范顺序锁住两个用户行（SELECT ... FOR UPDATE）：
        - 同一对用户上的写操作因此串行化
        - 不支持行锁的数据库（SQLite）上是普通查询
        """
        ...
