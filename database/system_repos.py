"""系统数据仓库：审计日志、收藏、潜在客户的数据访问层。

审计日志只追加，不提供更新和删除；
收藏与潜在客户用于连接访客与商家。
"""
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import AuditEntry, Favorite, Lead


class AuditLogRepository(BaseCRUD):
    """审计日志 仓库。"""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def append(self, entry: Dict[str, Any]) -> int:
        """追加一条审计记录。

        Args:
            entry: 审计数据字典，支持以下键：
                - action: 操作类型（必填）
                - actor_uid: 操作者ID（必填）
                - actor_name / target_id / target_name / target_type
                - before / after / meta: JSON 快照
                - country / ip_address

        Returns:
            审计记录ID。
        """
        with self._get_session() as session:
            record = AuditEntry(
                action=entry["action"],
                actor_uid=entry["actor_uid"],
                actor_name=entry.get("actor_name"),
                target_id=entry.get("target_id"),
                target_name=entry.get("target_name"),
                target_type=entry.get("target_type"),
                before=entry.get("before"),
                after=entry.get("after"),
                meta=entry.get("meta"),
                country=entry.get("country"),
                ip_address=entry.get("ip_address"),
            )
            session.add(record)
            session.commit()
            return record.id

    def list_entries(self, limit: int = 200,
                     actor_uid: Optional[str] = None,
                     target_type: Optional[str] = None,
                     country: Optional[str] = None) -> List[AuditEntry]:
        """按条件查询审计记录（最新在前）。"""
        with self._get_session() as session:
            query = session.query(AuditEntry)
            if actor_uid:
                query = query.filter(AuditEntry.actor_uid == actor_uid)
            if target_type:
                query = query.filter(AuditEntry.target_type == target_type)
            if country:
                query = query.filter(AuditEntry.country == country)
            return query.order_by(
                AuditEntry.created_at.desc(), AuditEntry.id.desc()
            ).limit(limit).all()


class FavoriteRepository(BaseCRUD):
    """收藏 仓库。"""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def find(self, user_id: str, business_id: str,
             session: Optional[Session] = None) -> Optional[Favorite]:
        def _query(sess):
            return sess.query(Favorite).filter(
                Favorite.user_id == user_id,
                Favorite.business_id == business_id
            ).first()

        if session:
            return _query(session)

        with self._get_session() as sess:
            return _query(sess)

    def toggle(self, user_id: str, business: Dict[str, Any]) -> bool:
        """切换收藏状态。

        Returns:
            切换后是否处于收藏状态。
        """
        with self._get_session() as session:
            existing = self.find(user_id, business["id"], session=session)
            if existing:
                session.delete(existing)
                session.commit()
                return False

            session.add(Favorite(
                user_id=user_id,
                business_id=business["id"],
                business_name=business.get("business_name"),
                category=business.get("category"),
                cover_image=business.get("cover_image"),
            ))
            session.commit()
            return True

    def get_favorites(self, user_id: str) -> List[Favorite]:
        return self.get_all(Favorite, filters={"user_id": user_id},
                            order_by=Favorite.created_at.desc())


class LeadRepository(BaseCRUD):
    """潜在客户 仓库。"""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def add(self, lead_data: Dict[str, Any]) -> int:
        with self._get_session() as session:
            lead = Lead(
                business_id=lead_data["business_id"],
                user_id=lead_data["user_id"],
                user_name=lead_data.get("user_name"),
                user_email=lead_data.get("user_email"),
                source=lead_data.get("source", "favorite"),
            )
            session.add(lead)
            session.commit()
            return lead.id

    def get_leads(self, business_id: str) -> List[Lead]:
        return self.get_all(Lead, filters={"business_id": business_id},
                            order_by=Lead.created_at.desc())
