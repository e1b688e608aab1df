from contextlib import contextmanager
from functools import wraps
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ConcurrentUpdateError, StorageFailure
from app.core.logx import logger

T = TypeVar("T")


@contextmanager
def transaction(db: Session):
    """
    事务管理器：
    - 正常退出 => commit
    - 任何异常 => rollback 后原样抛出
    仓库层只 add / flush / 条件更新，提交统一由这里完成
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def run_atomic(
    db: Session,
    work: Callable[[], T],
    retries: int = 1,
    on_integrity_error: Optional[Callable[[IntegrityError], None]] = None,
    op: str = "operation",
) -> T:
    """
    把 work() 作为一个原子单元执行（当前状态表 + 历史表一起提交或一起回滚）：
    - 业务异常（RelationshipError）回滚后原样抛出，不重试
    - ConcurrentUpdateError => 重试
    - IntegrityError => 交给 on_integrity_error：它抛出业务异常就结束；正常返回则重试
      没有 handler 时视为存储故障
    - 其他 SQLAlchemyError => StorageFailure
    - 重试次数耗尽 => StorageFailure
    每次尝试都从一个全新的事务开始
    """
    last_error: Optional[Exception] = None

    for attempt in range(1, max(retries, 1) + 1):
        try:
            # 事务内第一条语句必须是 work() 里的加锁读：先结束身份解析等读操作自动开启的事务，
            # 否则 REPEATABLE READ 下快照早于 FOR UPDATE，事务内的检查会读到旧数据
            if db.in_transaction():
                db.rollback()
            with transaction(db):
                return work()
        except ConcurrentUpdateError as e:
            logger.warning(f"[{op}] concurrent update detected (attempt {attempt}/{retries}), retrying")
            last_error = e
        except IntegrityError as e:
            if on_integrity_error is None:
                logger.exception(f"[{op}] integrity error")
                raise StorageFailure() from e
            logger.warning(f"[{op}] uniqueness conflict (attempt {attempt}/{retries}): {e.orig}")
            try:
                on_integrity_error(e)
            except SQLAlchemyError as inner:
                logger.exception(f"[{op}] storage failure while resolving conflict")
                raise StorageFailure() from inner
            last_error = e
        except SQLAlchemyError as e:
            logger.exception(f"[{op}] storage failure, transaction rolled back")
            raise StorageFailure() from e

    logger.error(f"[{op}] gave up after {retries} attempts")
    raise StorageFailure() from last_error


def storage_guard(func):
    """
    业务层函数的兜底装饰器（第一个参数必须带 .db，即 RelationRepos）：
    - 身份解析、只读查询里冒出来的 SQLAlchemyError 统一变成 StorageFailure
    - 同时回滚当前 Session，让它可以继续使用
    """

    @wraps(func)
    def wrapper(repos, *args, **kwargs):
        try:
            return func(repos, *args, **kwargs)
        except SQLAlchemyError as e:
            repos.db.rollback()
            logger.exception(f"[{func.__name__}] storage failure")
            raise StorageFailure() from e

    return wrapper
