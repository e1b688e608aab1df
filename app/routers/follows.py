from fastapi import APIRouter, Depends

from app.schemas.follow import FollowCreate, FollowCancel
from app.core.biz_response import BizResponse
from app.core.exceptions import RelationshipError
from app.service import follow_svc
from app.storage.database import get_relation_repos
from app.storage.relation_repos import RelationRepos
from app.routers.common import Page, page_params, require_enabled

follows_router = APIRouter(prefix="/follows", tags=["follows"], dependencies=[Depends(require_enabled)])


@follows_router.post("/")
def follow_user(follow: FollowCreate, repos: RelationRepos = Depends(get_relation_repos)):
    """
    关注用户：user_id 关注 followed_user_id
    """
    try:
        result = follow_svc.follow_user(repos, follow.user_id, follow.followed_user_id)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@follows_router.delete("/")
def unfollow_user(cancel: FollowCancel, repos: RelationRepos = Depends(get_relation_repos)):
    """
    取消关注：删除关注记录并写 unfollow 流水
    """
    try:
        result = follow_svc.unfollow_user(repos, cancel.user_id, cancel.followed_user_id)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@follows_router.get("/following/{uid}")
def list_following(uid: str, paging: Page = Depends(page_params), repos: RelationRepos = Depends(get_relation_repos)):
    """
    我关注的人列表
    """
    try:
        result = follow_svc.list_following(repos, uid, page=paging.page, page_size=paging.page_size)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@follows_router.get("/followers/{uid}")
def list_followers(uid: str, paging: Page = Depends(page_params), repos: RelationRepos = Depends(get_relation_repos)):
    """
    我的粉丝列表
    """
    try:
        result = follow_svc.list_followers(repos, uid, page=paging.page, page_size=paging.page_size)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@follows_router.get("/status")
def follow_status(user_id: str, followed_user_id: str, repos: RelationRepos = Depends(get_relation_repos)):
    try:
        result = follow_svc.is_following(repos, user_id, followed_user_id)
        return BizResponse(data={"following": result})
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@follows_router.get("/counts/{uid}")
def follow_counts(uid: str, repos: RelationRepos = Depends(get_relation_repos)):
    try:
        return BizResponse(data=follow_svc.follow_counts(repos, uid))
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@follows_router.get("/history/{uid}")
def follow_history(uid: str, paging: Page = Depends(page_params), repos: RelationRepos = Depends(get_relation_repos)):
    """
    关注 / 取关流水（uid 作为任意一方）
    """
    try:
        result = follow_svc.follow_history(repos, uid, page=paging.page, page_size=paging.page_size)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)
