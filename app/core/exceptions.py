# domain_exceptions.py
from typing import Optional


class RelationshipError(Exception):
    """
    关系引擎业务异常基类：
    - code: 错误种类（调用方据此分支，不要依赖 message 文本）
    - message: 可以直接展示给用户的简短提示
    - status_code: 接口层映射用的 HTTP 状态码
    业务异常不允许重试，重试只针对 StorageFailure
    """

    code = "relationship_error"
    status_code = 400
    default_message = "Relationship operation failed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UserNotFound(RelationshipError):
    """
    用户引用无法解析为有效用户时抛出：
    - uid / 数字 id 不存在，或用户已被软删除
    """

    code = "user_not_found"
    status_code = 404

    def __init__(self, reference=None, message: Optional[str] = None):
        self.reference = reference
        if message is None and reference is not None:
            message = f"User '{reference}' not found."
        super().__init__(message or "User not found.")


class SelfReferenceError(RelationshipError):
    """
    关注 / 连接 / 拉黑自己时抛出（两个引用解析到同一个 uid）
    """

    code = "self_reference"
    status_code = 400

    def __init__(self, action: str = "interact with", message: Optional[str] = None):
        self.action = action
        super().__init__(message or f"Cannot {action} yourself.")


class BlockedError(RelationshipError):
    """任一方向存在拉黑关系时，禁止关注 / 发起连接"""

    code = "blocked"
    status_code = 403
    default_message = "This action is not available because one of you has blocked the other."


class AlreadyFollowingError(RelationshipError):
    """
    重复关注同一个用户时抛出：
    - 关注不是幂等成功的，重复调用只会得到这个错误
    """

    code = "already_following"
    status_code = 409

    def __init__(
        self,
        user_id: Optional[str] = None,
        target_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.user_id = user_id
        self.target_id = target_id
        super().__init__(message or "Already following this user.")


class NotFollowingError(RelationshipError):
    """取消关注时发现并没有有效的关注记录"""

    code = "not_following"
    status_code = 404

    def __init__(
        self,
        user_id: Optional[str] = None,
        target_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.user_id = user_id
        self.target_id = target_id
        super().__init__(message or "Not following this user.")


class AlreadyConnectedError(RelationshipError):
    code = "already_connected"
    status_code = 409
    default_message = "You are already connected with this user."


class PendingRequestExistsError(RelationshipError):
    code = "pending_request_exists"
    status_code = 409
    default_message = "A connection request to this user is already pending."


class NotConnectedError(RelationshipError):
    code = "not_connected"
    status_code = 404
    default_message = "You are not connected with this user."


class ConnectionNotFound(RelationshipError):
    """按 id 查找连接记录失败（可能已经被拒绝 / 删除）"""

    code = "connection_not_found"
    status_code = 404

    def __init__(self, connection_id: Optional[str] = None, message: Optional[str] = None):
        self.connection_id = connection_id
        if message is None and connection_id is not None:
            message = f"Connection '{connection_id}' not found."
        super().__init__(message or "Connection not found.")


class NotPendingError(RelationshipError):
    """接受 / 拒绝一个已经不是 pending 状态的连接请求"""

    code = "not_pending"
    status_code = 409
    default_message = "This connection request is no longer pending."


class NotParticipantError(RelationshipError):
    """操作人不是该连接的任何一方"""

    code = "not_participant"
    status_code = 403
    default_message = "You are not a participant of this connection."


class AlreadyBlockedError(RelationshipError):
    code = "already_blocked"
    status_code = 409
    default_message = "You have already blocked this user."


class NotBlockedError(RelationshipError):
    code = "not_blocked"
    status_code = 404
    default_message = "This user is not blocked."


class StorageFailure(RelationshipError):
    """
    底层事务因业务之外的原因中止（连接断开、死锁、历史记录写入失败等）：
    - 原始的 SQLAlchemyError 挂在 __cause__ 上
    - 整个操作已经回滚，调用方可以安全重试
    """

    code = "storage_failure"
    status_code = 503
    default_message = "Something went wrong, please try again."


class ConcurrentUpdateError(Exception):
    """
    事务内的条件更新 / 删除没有命中任何行：
    - 说明同一条记录被并发修改了
    - 只在 run_atomic 内部使用，触发整体重试，不会抛给调用方
    """

    def __init__(self, message: str = "row changed concurrently"):
        super().__init__(message)
