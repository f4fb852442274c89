"""商家子集合服务：服务、员工、作品集、评价

列表操作出错时记录日志并返回 []；新增 / 更新 / 删除出错时继续抛出。
更新或删除不存在的条目抛出 NotFoundError。
"""
from typing import Any, Dict, List, Union

from loguru import logger

from business.exceptions import NotFoundError, ValidationError
from business.plans import effective_team_limit
from business.schemas import (
    EmployeeInput, EmployeeUpdate, PortfolioInput, ReviewInput,
    ServiceInput, ServiceUpdate, parse,
)
from database.base_crud import BaseCRUD

MAX_SERVICE_IMAGES = 10
MIN_REVIEW_COMMENT = 10


def _to_dicts(items) -> List[Dict[str, Any]]:
    return [BaseCRUD._to_dict(item) for item in items]


class ServicesService:
    """商家服务"""

    def __init__(self, db_manager):
        self.db = db_manager

    def get_services(self, business_id: str, active_only: bool = False) -> List[Dict[str, Any]]:
        try:
            return _to_dicts(self.db.services.get_services(business_id, active_only=active_only))
        except Exception as e:
            logger.error(f"读取服务列表失败 [{business_id}]: {e}")
            return []

    @staticmethod
    def _check_images(images) -> None:
        if images and len(images) > MAX_SERVICE_IMAGES:
            raise ValidationError(f"Máximo {MAX_SERVICE_IMAGES} imágenes por servicio.")

    def add_service(self, business_id: str,
                    data: Union[ServiceInput, Dict[str, Any]]) -> int:
        data = parse(ServiceInput, data)
        self._check_images(data.images)
        try:
            service_id = self.db.services.add(business_id, data.model_dump())
        except Exception as e:
            logger.error(f"新增服务失败 [{business_id}]: {e}")
            raise
        logger.info(f"服务已新增: {business_id}/{service_id} {data.name}")
        return service_id

    def update_service(self, business_id: str, service_id: int,
                       data: Union[ServiceUpdate, Dict[str, Any]]) -> Dict[str, Any]:
        data = parse(ServiceUpdate, data)
        changes = data.changes()
        self._check_images(changes.get("images"))
        try:
            updated = self.db.services.update_for(business_id, service_id, changes)
        except Exception as e:
            logger.error(f"更新服务失败 [{business_id}/{service_id}]: {e}")
            raise
        if updated is None:
            raise NotFoundError(f"Servicio no encontrado: {service_id}")
        return BaseCRUD._to_dict(updated)

    def delete_service(self, business_id: str, service_id: int) -> None:
        try:
            deleted = self.db.services.delete_for(business_id, service_id)
        except Exception as e:
            logger.error(f"删除服务失败 [{business_id}/{service_id}]: {e}")
            raise
        if not deleted:
            raise NotFoundError(f"Servicio no encontrado: {service_id}")


class EmployeeService:
    """商家员工

    Args:
        enforce_plan_limits: 为 True 时新增员工受套餐团队人数上限约束
    """

    def __init__(self, db_manager, enforce_plan_limits: bool = False):
        self.db = db_manager
        self.enforce_plan_limits = enforce_plan_limits

    def get_employees(self, business_id: str) -> List[Dict[str, Any]]:
        """员工列表（按创建时间升序）"""
        try:
            return _to_dicts(self.db.employees.get_employees(business_id))
        except Exception as e:
            logger.error(f"读取员工列表失败 [{business_id}]: {e}")
            return []

    def add_employee(self, business_id: str,
                     data: Union[EmployeeInput, Dict[str, Any]]) -> int:
        data = parse(EmployeeInput, data)
        if not data.name.strip():
            raise ValidationError("El nombre del empleado es obligatorio.")
        if self.enforce_plan_limits:
            limit = effective_team_limit(self.db.get_account(business_id))
            if self.db.employees.count(business_id) >= limit:
                raise ValidationError(
                    f"Tu plan permite un máximo de {limit} miembros del equipo."
                )
        try:
            employee_id = self.db.employees.add(business_id, data.model_dump())
        except Exception as e:
            logger.error(f"新增员工失败 [{business_id}]: {e}")
            raise
        logger.info(f"员工已新增: {business_id}/{employee_id} {data.name}")
        return employee_id

    def update_employee(self, business_id: str, employee_id: int,
                        data: Union[EmployeeUpdate, Dict[str, Any]]) -> Dict[str, Any]:
        data = parse(EmployeeUpdate, data)
        try:
            updated = self.db.employees.update_for(business_id, employee_id, data.changes())
        except Exception as e:
            logger.error(f"更新员工失败 [{business_id}/{employee_id}]: {e}")
            raise
        if updated is None:
            raise NotFoundError(f"Empleado no encontrado: {employee_id}")
        return BaseCRUD._to_dict(updated)

    def delete_employee(self, business_id: str, employee_id: int) -> None:
        try:
            deleted = self.db.employees.delete_for(business_id, employee_id)
        except Exception as e:
            logger.error(f"删除员工失败 [{business_id}/{employee_id}]: {e}")
            raise
        if not deleted:
            raise NotFoundError(f"Empleado no encontrado: {employee_id}")


class PortfolioService:
    """作品集"""

    def __init__(self, db_manager):
        self.db = db_manager

    def get_posts(self, business_id: str) -> List[Dict[str, Any]]:
        try:
            return _to_dicts(self.db.portfolio.get_posts(business_id))
        except Exception as e:
            logger.error(f"读取作品集失败 [{business_id}]: {e}")
            return []

    def add_post(self, business_id: str,
                 data: Union[PortfolioInput, Dict[str, Any]]) -> int:
        data = parse(PortfolioInput, data)
        try:
            return self.db.portfolio.add(business_id, data.model_dump())
        except Exception as e:
            logger.error(f"新增作品失败 [{business_id}]: {e}")
            raise

    def delete_post(self, business_id: str, post_id: int) -> None:
        try:
            deleted = self.db.portfolio.delete_for(business_id, post_id)
        except Exception as e:
            logger.error(f"删除作品失败 [{business_id}/{post_id}]: {e}")
            raise
        if not deleted:
            raise NotFoundError(f"Publicación no encontrada: {post_id}")


class ReviewsService:
    """评价

    新增评价与商家评分聚合在同一事务中更新：
        新评分 = round(((当前评分 * 当前数量) + 新评分) / (当前数量 + 1) * 10) / 10
    """

    def __init__(self, db_manager):
        self.db = db_manager

    def get_reviews(self, business_id: str) -> List[Dict[str, Any]]:
        try:
            return _to_dicts(self.db.reviews.get_reviews(business_id))
        except Exception as e:
            logger.error(f"读取评价失败 [{business_id}]: {e}")
            return []

    def add_review(self, business_id: str,
                   data: Union[ReviewInput, Dict[str, Any]]) -> Dict[str, Any]:
        data = parse(ReviewInput, data)
        if not 1 <= data.rating <= 5:
            raise ValidationError("La calificación debe estar entre 1 y 5.")
        if len(data.comment.strip()) < MIN_REVIEW_COMMENT:
            raise ValidationError(
                f"El comentario debe tener al menos {MIN_REVIEW_COMMENT} caracteres."
            )

        try:
            result = self.db.reviews.add_with_aggregate(business_id, data.model_dump())
        except Exception as e:
            logger.error(f"新增评价失败 [{business_id}]: {e}")
            raise
        if result is None:
            raise NotFoundError(f"Negocio no encontrado: {business_id}")

        review_id, rating, review_count = result
        logger.info(f"评价已新增: {business_id} -> {rating} ({review_count})")
        return {"id": review_id, "rating": rating, "review_count": review_count}


def new_rating(current_rating: float, current_count: int, rating: int) -> float:
    """评分聚合的纯函数版本，与数据库 UPDATE 表达式一致"""
    value = ((current_rating * current_count) + rating) / (current_count + 1)
    return int(value * 10 + 0.5) / 10
