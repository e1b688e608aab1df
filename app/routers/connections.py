from typing import Optional

from fastapi import APIRouter, Body, Depends

from app.schemas.connection import ConnectionRequestIn, ConnectionActionIn, ConnectionRemove
from app.core.biz_response import BizResponse
from app.core.exceptions import RelationshipError
from app.service import connection_svc
from app.storage.database import get_relation_repos
from app.storage.relation_repos import RelationRepos
from app.routers.common import Page, page_params, require_enabled

connections_router = APIRouter(prefix="/connections", tags=["connections"], dependencies=[Depends(require_enabled)])


@connections_router.post("/requests")
def request_connection(data: ConnectionRequestIn, repos: RelationRepos = Depends(get_relation_repos)):
    """
    发起连接请求
    - 对方已经向我发过请求时，直接合并为 accepted
    """
    try:
        result = connection_svc.request_connection(repos, data.requester_id, data.recipient_id)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@connections_router.post("/{connection_id}/accept")
def accept_connection(
    connection_id: str,
    data: Optional[ConnectionActionIn] = Body(None),
    repos: RelationRepos = Depends(get_relation_repos),
):
    try:
        actor = data.actor_id if data else None
        result = connection_svc.accept_connection(repos, connection_id, actor=actor)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@connections_router.post("/{connection_id}/reject")
def reject_connection(
    connection_id: str,
    data: Optional[ConnectionActionIn] = Body(None),
    repos: RelationRepos = Depends(get_relation_repos),
):
    """
    拒绝请求：记录被删除，只在流水里留下 rejected
    """
    try:
        actor = data.actor_id if data else None
        result = connection_svc.reject_connection(repos, connection_id, actor=actor)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@connections_router.delete("/")
def remove_connection(data: ConnectionRemove, repos: RelationRepos = Depends(get_relation_repos)):
    try:
        result = connection_svc.remove_connection(repos, data.user_id, data.other_user_id)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@connections_router.get("/users/{uid}")
def list_connections(uid: str, paging: Page = Depends(page_params), repos: RelationRepos = Depends(get_relation_repos)):
    try:
        result = connection_svc.list_connections(repos, uid, page=paging.page, page_size=paging.page_size)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@connections_router.get("/users/{uid}/pending")
def list_pending_requests(uid: str, paging: Page = Depends(page_params), repos: RelationRepos = Depends(get_relation_repos)):
    """
    收到的、待处理的请求
    """
    try:
        result = connection_svc.list_pending_requests(repos, uid, page=paging.page, page_size=paging.page_size)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@connections_router.get("/users/{uid}/sent")
def list_sent_requests(uid: str, paging: Page = Depends(page_params), repos: RelationRepos = Depends(get_relation_repos)):
    try:
        result = connection_svc.list_sent_requests(repos, uid, page=paging.page, page_size=paging.page_size)
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@connections_router.get("/users/{uid}/counts")
def connection_counts(uid: str, repos: RelationRepos = Depends(get_relation_repos)):
    try:
        return BizResponse(data=connection_svc.connection_counts(repos, uid))
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@connections_router.get("/history")
def connection_history(
    user_id: str,
    other_user_id: str,
    paging: Page = Depends(page_params),
    repos: RelationRepos = Depends(get_relation_repos),
):
    """
    两个用户之间的连接流水（请求 / 接受 / 拒绝 / 解除）
    """
    try:
        result = connection_svc.connection_history_between(
            repos, user_id, other_user_id, page=paging.page, page_size=paging.page_size
        )
        return BizResponse(data=result)
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)
