from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.storage.user.user_interface import IUserRepository
from app.storage.follow.follow_interface import IFollowRepository
from app.storage.connection.connection_interface import IConnectionRepository
from app.storage.block.block_interface import IBlockRepository
from app.storage.history.history_interface import IHistoryRepository


@dataclass
class RelationRepos:
    """
    关系引擎一次操作需要的全部仓库，共用同一个 Session：
    - 拉黑要同时删关注、删连接、写三张历史表，必须在同一个事务里
    - db 只用来开启 / 提交事务，具体读写都走仓库
    """

    db: Session
    users: IUserRepository
    follows: IFollowRepository
    connections: IConnectionRepository
    blocks: IBlockRepository
    history: IHistoryRepository
