from typing import Optional, List

from sqlalchemy.orm import Session
from sqlalchemy import case, or_

from app.models.connection import Connection, ConnectionStatus, canonical_pair
from app.models.user import User
from app.schemas.connection import ConnectionOut, ConnectionUserOut, BatchConnectionsOut
from app.schemas.user import UserOut
from app.storage.connection.connection_interface import IConnectionRepository
from app.core.time import now_utc8

PENDING = ConnectionStatus.PENDING.value
ACCEPTED = ConnectionStatus.ACCEPTED.value


class SQLAlchemyConnectionRepository(IConnectionRepository):
    """
    使用 SQLAlchemy 实现的连接关系仓库
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- 内部基础查询 ----------

    def _pair_query(self, user_a: str, user_b: str):
        """按规范无序对查询，不用区分方向"""
        low, high = canonical_pair(user_a, user_b)
        return self.db.query(Connection).filter(
            Connection.user_low_id == low,
            Connection.user_high_id == high,
        )

    def _involving(self, user_id: str):
        return or_(Connection.requester_id == user_id, Connection.recipient_id == user_id)

    # ---------- 单条查询 ----------

    def get_connection(self, connection_id: str) -> Optional[ConnectionOut]:
        conn = self.db.query(Connection).filter(Connection.id == connection_id).first()
        return ConnectionOut.model_validate(conn) if conn else None

    def get_between(self, user_a: str, user_b: str) -> Optional[ConnectionOut]:
        conn = self._pair_query(user_a, user_b).first()
        return ConnectionOut.model_validate(conn) if conn else None

    def get_pending(self, requester_id: str, recipient_id: str) -> Optional[ConnectionOut]:
        conn = (
            self.db.query(Connection)
            .filter(
                Connection.requester_id == requester_id,
                Connection.recipient_id == recipient_id,
                Connection.status == PENDING,
            )
            .first()
        )
        return ConnectionOut.model_validate(conn) if conn else None

    def get_accepted_between(self, user_a: str, user_b: str) -> Optional[ConnectionOut]:
        conn = self._pair_query(user_a, user_b).filter(Connection.status == ACCEPTED).first()
        return ConnectionOut.model_validate(conn) if conn else None

    def is_connected(self, user_a: str, user_b: str) -> bool:
        return self._pair_query(user_a, user_b).filter(Connection.status == ACCEPTED).first() is not None

    # ---------- 写操作（不提交） ----------

    def create_pending(self, requester_id: str, recipient_id: str) -> ConnectionOut:
        low, high = canonical_pair(requester_id, recipient_id)
        now = now_utc8()
        conn = Connection(
            requester_id=requester_id,
            recipient_id=recipient_id,
            user_low_id=low,
            user_high_id=high,
            status=PENDING,
            requested_at=now,
            updated_at=now,
        )
        self.db.add(conn)
        self.db.flush()
        return ConnectionOut.model_validate(conn)

    def accept_pending(self, connection_id: str) -> Optional[ConnectionOut]:
        now = now_utc8()
        updated = (
            self.db.query(Connection)
            .filter(Connection.id == connection_id, Connection.status == PENDING)
            .update(
                {
                    Connection.status: ACCEPTED,
                    Connection.responded_at: now,
                    Connection.updated_at: now,
                },
                synchronize_session="fetch",
            )
        )
        if not updated:
            return None

        conn = self.db.get(Connection, connection_id, populate_existing=True)
        return ConnectionOut.model_validate(conn)

    def delete_connection(self, connection_id: str, status: Optional[str] = None) -> bool:
        q = self.db.query(Connection).filter(Connection.id == connection_id)
        if status is not None:
            q = q.filter(Connection.status == status)
        return q.delete(synchronize_session="fetch") > 0

    # ---------- 列表 ----------
    # 列表和计数共用同一组基础查询：对方已软删除的记录两边都不算

    def _connections_query(self, user_id: str):
        """对方可能是 requester 也可能是 recipient，用 case 取“另一方”再 join User"""
        other_id = case(
            (Connection.requester_id == user_id, Connection.recipient_id),
            else_=Connection.requester_id,
        )
        return (
            self.db.query(Connection, User)
            .join(User, User.uid == other_id)
            .filter(
                Connection.status == ACCEPTED,
                self._involving(user_id),
                User.deleted_at.is_(None),
            )
        )

    def _pending_query(self, user_id: str):
        return (
            self.db.query(Connection, User)
            .join(User, User.uid == Connection.requester_id)
            .filter(
                Connection.recipient_id == user_id,
                Connection.status == PENDING,
                User.deleted_at.is_(None),
            )
        )

    def _sent_query(self, user_id: str):
        return (
            self.db.query(Connection, User)
            .join(User, User.uid == Connection.recipient_id)
            .filter(
                Connection.requester_id == user_id,
                Connection.status == PENDING,
                User.deleted_at.is_(None),
            )
        )

    def list_connections(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
        base_q = self._connections_query(user_id).order_by(Connection.responded_at.desc(), Connection.id.desc())
        return self._build_batch(base_q, page, page_size)

    def list_pending_requests(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
        base_q = self._pending_query(user_id).order_by(Connection.requested_at.desc(), Connection.id.desc())
        return self._build_batch(base_q, page, page_size)

    def list_sent_requests(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> BatchConnectionsOut:
        base_q = self._sent_query(user_id).order_by(Connection.requested_at.desc(), Connection.id.desc())
        return self._build_batch(base_q, page, page_size)

    def _build_batch(self, base_q, page: int, page_size: Optional[int]) -> BatchConnectionsOut:
        total = base_q.count()
        if page_size is not None:
            base_q = base_q.offset(page * page_size).limit(page_size)

        items: List[ConnectionUserOut] = [
            ConnectionUserOut(
                connection=ConnectionOut.model_validate(conn_orm),
                user=UserOut.model_validate(user_orm),
            )
            for conn_orm, user_orm in base_q.all()
        ]
        return BatchConnectionsOut(total=total, count=len(items), items=items)

    # ---------- 计数 ----------

    def count_connections(self, user_id: str) -> int:
        return self._connections_query(user_id).count()

    def count_pending_requests(self, user_id: str) -> int:
        return self._pending_query(user_id).count()

    def count_sent_requests(self, user_id: str) -> int:
        return self._sent_query(user_id).count()

    def count_by_status(self, status: str) -> int:
        """全局统计，按表内实际行数计"""
        return self.db.query(Connection).filter(Connection.status == status).count()
