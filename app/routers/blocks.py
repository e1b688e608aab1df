from fastapi import APIRouter, Depends

from app.schemas.block import BlockCreate, BlockCancel
from app.core.biz_response import BizResponse
from app.core.exceptions import RelationshipError
from app.service import block_svc
from app.storage.database import get_relation_repos
from app.storage.relation_repos import RelationRepos
from app.routers.common import Page, page_params, require_enabled

blocks_router = APIRouter(prefix="/blocks", tags=["blocks"], dependencies=[Depends(require_enabled)])


@blocks_router.post("/")
def block_user(data: BlockCreate, repos: RelationRepos = Depends(get_relation_repos)):
    """
    拉黑用户：同时清掉双方之间的关注和连接
    """
    try:
        result = block_svc.block_user(repos, data.blocker_id, data.blocked_id, reason=data.reason)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@blocks_router.delete("/")
def unblock_user(data: BlockCancel, repos: RelationRepos = Depends(get_relation_repos)):
    try:
        result = block_svc.unblock_user(repos, data.blocker_id, data.blocked_id)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@blocks_router.get("/users/{uid}")
def list_blocked(uid: str, paging: Page = Depends(page_params), repos: RelationRepos = Depends(get_relation_repos)):
    """
    我拉黑的用户列表
    """
    try:
        result = block_svc.list_blocked(repos, uid, page=paging.page, page_size=paging.page_size)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@blocks_router.get("/status")
def block_status(user_id: str, other_user_id: str, repos: RelationRepos = Depends(get_relation_repos)):
    try:
        return BizResponse(data=block_svc.block_status(repos, user_id, other_user_id))
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@blocks_router.get("/history/{uid}")
def block_history(uid: str, paging: Page = Depends(page_params), repos: RelationRepos = Depends(get_relation_repos)):
    try:
        result = block_svc.block_history(repos, uid, page=paging.page, page_size=paging.page_size)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)
