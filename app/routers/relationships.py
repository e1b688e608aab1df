from fastapi import APIRouter, Depends

from app.core.biz_response import BizResponse
from app.core.config import settings
from app.core.exceptions import RelationshipError
from app.service import relationship_svc
from app.storage.database import get_relation_repos
from app.storage.relation_repos import RelationRepos
from app.routers.common import require_enabled

relationships_router = APIRouter(prefix="/relationships", tags=["relationships"])


@relationships_router.get("/config")
def get_config(repos: RelationRepos = Depends(get_relation_repos)):
    """
    看板配置：模块开关 + 全站计数
    - 不挂开关依赖，关闭状态下也要能看到 enabled=false
    """
    try:
        return BizResponse(data=relationship_svc.get_config(repos, enabled=settings.CONNECTIONS_ENABLED))
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@relationships_router.get("/stats", dependencies=[Depends(require_enabled)])
def get_stats(repos: RelationRepos = Depends(get_relation_repos)):
    try:
        return BizResponse(data=relationship_svc.get_stats(repos))
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)


@relationships_router.get("/{uid}/{other_uid}", dependencies=[Depends(require_enabled)])
def get_relationship(uid: str, other_uid: str, repos: RelationRepos = Depends(get_relation_repos)):
    """
    uid 视角下和 other_uid 的完整关系
    """
    try:
        return BizResponse(data=relationship_svc.get_relationship(repos, uid, other_uid))
    except RelationshipError as e:
        return BizResponse(data=None, msg=e.message, status_code=e.status_code)
