"""商家子集合仓库：服务、员工、作品集、评价、预约、客户的数据访问层。

子集合都以 business_id 归属到某个商家，提供最小化的 CRUD：
不分页，每次列表都完整读取。

评价写入时在同一事务中用一条 UPDATE 表达式更新商家的评分聚合，
并发提交不会互相覆盖。
"""
from typing import Optional, List, Dict, Any, Tuple
from datetime import datetime
from sqlalchemy import update, func, or_
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import (
    Service, Employee, PortfolioPost, Review, BusinessPublic,
    Appointment, Customer
)


class _BusinessScopedRepository(BaseCRUD):
    """按商家归属的子集合仓库基类。"""

    model = None

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def list_for(self, business_id: str,
                 filters: Optional[Dict[str, Any]] = None,
                 order_by: Optional[Any] = None,
                 session: Optional[Session] = None) -> List[Any]:
        """获取某个商家的全部条目。"""
        conditions = {"business_id": business_id}
        conditions.update(filters or {})
        return self.get_all(self.model, filters=conditions,
                            order_by=order_by, session=session)

    def get_for(self, business_id: str, item_id: int,
                session: Optional[Session] = None) -> Optional[Any]:
        """获取条目，且必须属于指定商家。"""
        item = self.get_by_id(self.model, item_id, session=session)
        if item is None or item.business_id != business_id:
            return None
        return item

    def add(self, business_id: str, fields: Dict[str, Any]) -> int:
        """新增条目，返回自增ID。"""
        with self._get_session() as session:
            item = self.model(business_id=business_id, **fields)
            session.add(item)
            session.commit()
            return item.id

    def update_for(self, business_id: str, item_id: int,
                   fields: Dict[str, Any]) -> Optional[Any]:
        """更新条目；条目不存在或不属于该商家时返回 None。"""
        with self._get_session() as session:
            if self.get_for(business_id, item_id, session=session) is None:
                return None
            item = self.update_by_id(self.model, item_id, session=session,
                                     **fields)
            session.commit()
            return item

    def delete_for(self, business_id: str, item_id: int) -> bool:
        """删除条目；条目不存在或不属于该商家时返回 False。"""
        with self._get_session() as session:
            if self.get_for(business_id, item_id, session=session) is None:
                return False
            deleted = self.delete_by_id(self.model, item_id, session=session)
            session.commit()
            return deleted


class ServiceRepository(_BusinessScopedRepository):
    """商家服务 仓库。"""

    model = Service

    def get_services(self, business_id: str,
                     active_only: bool = False) -> List[Service]:
        filters = {"is_active": True} if active_only else None
        return self.list_for(business_id, filters=filters,
                             order_by=Service.created_at.asc())


class EmployeeRepository(_BusinessScopedRepository):
    """商家员工 仓库。"""

    model = Employee

    def get_employees(self, business_id: str,
                      active_only: bool = False) -> List[Employee]:
        """获取员工列表（按创建时间升序）。"""
        filters = {"active": True} if active_only else None
        return self.list_for(business_id, filters=filters,
                             order_by=Employee.created_at.asc())

    def count(self, business_id: str) -> int:
        with self._get_session() as session:
            return session.query(Employee).filter(
                Employee.business_id == business_id
            ).count()


class PortfolioRepository(_BusinessScopedRepository):
    """作品集 仓库。"""

    model = PortfolioPost

    def get_posts(self, business_id: str) -> List[PortfolioPost]:
        """获取作品集（最新在前）。"""
        return self.list_for(business_id,
                             order_by=PortfolioPost.created_at.desc())


class ReviewRepository(_BusinessScopedRepository):
    """评价 仓库。"""

    model = Review

    def get_reviews(self, business_id: str) -> List[Review]:
        """获取评价列表（最新在前）。"""
        return self.list_for(business_id, order_by=Review.created_at.desc())

    def add_with_aggregate(self, business_id: str,
                           fields: Dict[str, Any]
                           ) -> Optional[Tuple[int, float, int]]:
        """新增评价并更新商家评分聚合（同一事务）。

        新评分 = round(((当前评分 * 当前数量) + 新评分) / (当前数量 + 1) * 10) / 10，
        由数据库在 UPDATE 时基于当前行值计算。

        Returns:
            (评价ID, 新评分, 新评价数)；商家不存在时返回 None。
        """
        rating = int(fields["rating"])
        with self._get_session() as session:
            count = BusinessPublic.review_count
            new_rating = func.round(
                (BusinessPublic.rating * count + rating) * 10.0 / (count + 1)
            ) / 10.0
            result = session.execute(
                update(BusinessPublic)
                .where(BusinessPublic.id == business_id)
                .values(rating=new_rating, review_count=count + 1,
                        updated_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                session.rollback()
                return None

            review = Review(business_id=business_id, **fields)
            session.add(review)
            session.flush()

            row = session.query(
                BusinessPublic.rating, BusinessPublic.review_count
            ).filter(BusinessPublic.id == business_id).one()
            session.commit()
            return review.id, float(row.rating), int(row.review_count)


class AppointmentRepository(_BusinessScopedRepository):
    """预约 仓库。"""

    model = Appointment

    def get_in_range(self, business_id: str, start: datetime,
                     end: datetime) -> List[Appointment]:
        """获取时间范围内的预约（包含两端，按时间升序）。"""
        with self._get_session() as session:
            return session.query(Appointment).filter(
                Appointment.business_id == business_id,
                Appointment.date >= start,
                Appointment.date <= end,
            ).order_by(Appointment.date.asc()).all()

    def get_by_employee(self, business_id: str,
                        employee_id: int) -> List[Appointment]:
        """获取某员工的预约（最新在前）。"""
        return self.list_for(business_id, filters={"employee_id": employee_id},
                             order_by=Appointment.date.desc())

    def get_by_customer(self, business_id: str,
                        customer_id: int) -> List[Appointment]:
        """获取某客户的预约（最新在前）。"""
        return self.list_for(business_id, filters={"customer_id": customer_id},
                             order_by=Appointment.date.desc())


class CustomerRepository(_BusinessScopedRepository):
    """客户 仓库。"""

    model = Customer

    def get_customers(self, business_id: str,
                      include_archived: bool = False) -> List[Customer]:
        """获取客户列表（按姓名排序，默认不含已归档）。"""
        with self._get_session() as session:
            query = session.query(Customer).filter(
                Customer.business_id == business_id
            )
            if not include_archived:
                query = query.filter(Customer.archived.is_not(True))
            return query.order_by(func.lower(Customer.full_name).asc()).all()

    def find_by(self, business_id: str, field: str,
                value: str) -> Optional[Customer]:
        """按单个字段（phone / email）查找客户，返回最早创建的一条。"""
        with self._get_session() as session:
            return session.query(Customer).filter(
                Customer.business_id == business_id,
                getattr(Customer, field) == value,
            ).order_by(Customer.id.asc()).first()

    def find_duplicate(self, business_id: str, phone: Optional[str] = None,
                       email: Optional[str] = None,
                       exclude_id: Optional[int] = None) -> Optional[Customer]:
        """查找电话或邮箱相同的其他客户。"""
        conditions = []
        if phone:
            conditions.append(Customer.phone == phone)
        if email:
            conditions.append(Customer.email == email)
        if not conditions:
            return None
        with self._get_session() as session:
            query = session.query(Customer).filter(
                Customer.business_id == business_id, or_(*conditions)
            )
            if exclude_id is not None:
                query = query.filter(Customer.id != exclude_id)
            return query.first()
