import uuid
from datetime import datetime, timezone, timedelta

TZ_UTC8 = timezone(timedelta(hours=8))


def now_utc8():
    """返回东八区的当前时间"""
    return datetime.now(TZ_UTC8)


def new_rid() -> str:
    """
    生成记录主键（36 位字符串）：
    - 解释器支持 uuid7 时使用 uuid7（按时间有序）
    - 否则退回 uuid4；排序一律以时间戳列为准，不依赖主键顺序
    """
    return str(getattr(uuid, "uuid7", uuid.uuid4)())
