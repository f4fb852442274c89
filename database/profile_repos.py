"""商家资料仓库：用户与商家资料的数据访问层。

商家资料拆分为三张表：公开部分（businesses_public）、私密部分
（businesses_private）和账户（businesses，套餐 / 试用期）。
三者共享同一个 ID（所属用户 ID），创建和更新都在同一事务中完成。
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
from sqlalchemy import or_
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import User, BusinessPublic, BusinessPrivate, BusinessAccount


class UserRepository(BaseCRUD):
    """用户 仓库。"""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def get_or_create(self, user_id: str, email: Optional[str] = None,
                      display_name: Optional[str] = None,
                      session: Optional[Session] = None) -> User:
        """获取或创建用户（按 ID 匹配）。

        Args:
            user_id: 用户ID（认证服务分配）。
            email: 邮箱（仅创建时写入）。
            display_name: 显示名称（仅创建时写入）。
            session: 外部会话（可选）。
        """
        def _do(sess):
            user = sess.get(User, user_id)
            if not user:
                user = User(id=user_id, email=email,
                            display_name=display_name)
                sess.add(user)
                sess.flush()
            return user

        if session:
            return _do(session)

        with self._get_session() as sess:
            user = _do(sess)
            sess.commit()
            return user

    def mark_as_provider(self, user_id: str, business_id: str,
                         session: Optional[Session] = None) -> User:
        """将用户标记为服务商，并切换当前角色。"""
        def _do(sess):
            user = self.get_or_create(user_id, session=sess)
            user.is_provider = True
            user.current_role = "provider"
            user.provider_since = datetime.utcnow()
            user.business_profile_id = business_id
            sess.flush()
            return user

        if session:
            return _do(session)

        with self._get_session() as sess:
            user = _do(sess)
            sess.commit()
            return user

    def switch_role(self, user_id: str, role: str,
                    session: Optional[Session] = None) -> Optional[User]:
        """切换当前角色（client / provider）。"""
        return self.update_by_id(User, user_id, session=session,
                                 current_role=role)


class BusinessProfileRepository(BaseCRUD):
    """商家资料 仓库（公开 + 私密 + 账户）。"""

    def __init__(self, conn: DatabaseConnection,
                 user_repo: UserRepository) -> None:
        super().__init__(conn)
        self._users = user_repo

    def exists(self, business_id: str,
               session: Optional[Session] = None) -> bool:
        """公开资料是否已存在。"""
        return self.get_by_id(BusinessPublic, business_id,
                              session=session) is not None

    def create(self, business_id: str,
               public_fields: Dict[str, Any],
               private_fields: Dict[str, Any],
               plan_data: Dict[str, Any],
               owner_email: Optional[str] = None) -> None:
        """在同一事务中写入公开资料、私密资料、用户标记和账户。

        Args:
            business_id: 商家ID（即用户ID）。
            public_fields: BusinessPublic 列值。
            private_fields: BusinessPrivate 列值。
            plan_data: 账户套餐 / 试用期数据。
            owner_email: 用户不存在时用于创建用户记录。
        """
        now = datetime.utcnow()
        with self._get_session() as session:
            session.add(BusinessPublic(
                id=business_id, created_at=now, updated_at=now,
                **public_fields
            ))
            session.add(BusinessPrivate(
                id=business_id, created_at=now, updated_at=now,
                **private_fields
            ))
            self._users.get_or_create(business_id, email=owner_email,
                                      session=session)
            self._users.mark_as_provider(business_id, business_id,
                                         session=session)
            session.add(BusinessAccount(
                id=business_id, owner_uid=business_id, plan_data=plan_data,
                created_at=now, updated_at=now
            ))
            session.commit()

    def get_public(self, business_id: str) -> Optional[BusinessPublic]:
        return self.get_by_id(BusinessPublic, business_id)

    def get_private(self, business_id: str) -> Optional[BusinessPrivate]:
        return self.get_by_id(BusinessPrivate, business_id)

    def get_account(self, business_id: str) -> Optional[BusinessAccount]:
        return self.get_by_id(BusinessAccount, business_id)

    def list_public(self, country_code: Optional[str] = None
                    ) -> List[BusinessPublic]:
        """读取公开资料列表。

        按国家过滤时，同时返回没有 country_code 的旧数据，
        由上层根据 country 字段归一化后再过滤。

        Args:
            country_code: 按国家代码过滤（可选）。
        """
        with self._get_session() as session:
            query = session.query(BusinessPublic)
            if country_code:
                query = query.filter(or_(
                    BusinessPublic.country_code == country_code,
                    BusinessPublic.country_code.is_(None),
                    BusinessPublic.country_code == "",
                ))
            return query.order_by(BusinessPublic.created_at.desc()).all()

    def update(self, business_id: str,
               public_fields: Dict[str, Any],
               private_fields: Dict[str, Any]) -> bool:
        """在同一事务中更新公开资料和私密资料。

        Returns:
            公开资料不存在时返回 False。
        """
        now = datetime.utcnow()
        with self._get_session() as session:
            public = session.get(BusinessPublic, business_id)
            if public is None:
                return False
            private = session.get(BusinessPrivate, business_id)
            if private is None:
                private = BusinessPrivate(id=business_id, created_at=now)
                session.add(private)

            for key, value in public_fields.items():
                setattr(public, key, value)
            for key, value in private_fields.items():
                setattr(private, key, value)
            public.updated_at = now
            private.updated_at = now
            session.commit()
            return True

    def set_status(self, business_id: str,
                   status: str) -> Optional[BusinessPublic]:
        return self.update_by_id(BusinessPublic, business_id, status=status)

    def set_plan_data(self, business_id: str,
                      plan_data: Dict[str, Any]) -> Optional[BusinessAccount]:
        """整体替换账户的 plan_data。"""
        return self.update_by_id(BusinessAccount, business_id,
                                 plan_data=dict(plan_data))
