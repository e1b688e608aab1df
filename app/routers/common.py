from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Query

from app.core.config import settings


def require_enabled() -> None:
    """
    关系模块总开关（接口层检查，引擎本身不关心）
    """
    if not settings.CONNECTIONS_ENABLED:
        raise HTTPException(status_code=403, detail="Relationship features are disabled.")


@dataclass
class Page:
    page: int
    page_size: int


def page_params(
    page: int = Query(0, ge=0),
    page_size: Optional[int] = Query(None, ge=1),
) -> Page:
    """分页参数：不传用默认页大小，超过上限直接截断"""
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE
    return Page(page=page, page_size=min(page_size, settings.MAX_PAGE_SIZE))
