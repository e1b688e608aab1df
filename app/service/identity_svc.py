from typing import Any, Tuple

from app.storage.user.user_interface import IUserRepository
from app.core.exceptions import UserNotFound


def resolve_user(user_repo: IUserRepository, reference: Any) -> str:
    """
    把调用方给的用户引用（对象 / 数字 id / uid 字符串）解析成规范 uid
    解析不到就直接报错，不能把未知的字符串当成新的用户标识继续往下走
    """
    uid = user_repo.resolve_uid(reference)
    if uid is None:
        raise UserNotFound(_describe(reference))
    return uid


def resolve_pair(user_repo: IUserRepository, reference_a: Any, reference_b: Any) -> Tuple[str, str]:
    return resolve_user(user_repo, reference_a), resolve_user(user_repo, reference_b)


def _describe(reference: Any):
    for attr in ("uid", "_id"):
        value = getattr(reference, attr, None)
        if value is not None:
            return value
    return reference
