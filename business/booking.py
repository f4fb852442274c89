"""预约与客户管理（CRM）

- AppointmentService：预约的增删改查，按时间范围 / 员工 / 客户查询
- CustomerService：客户档案，同一商家内电话或邮箱不可重复，支持归档（软删除）

预约时间统一按 UTC 存储（不带时区）。
列表操作出错时记录日志并返回 []；新增 / 更新 / 删除出错时继续抛出。
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from business.exceptions import DuplicateCustomerError, NotFoundError, ValidationError
from business.schemas import (
    AppointmentInput, AppointmentUpdate, CustomerInput, CustomerUpdate, parse,
)
from database.base_crud import BaseCRUD


def _to_dicts(items) -> List[Dict[str, Any]]:
    return [BaseCRUD._to_dict(item) for item in items]


def to_utc_naive(value: datetime) -> datetime:
    """带时区的时间转为 UTC 并去掉时区；不带时区的视为 UTC"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CustomerService:
    """商家客户"""

    def __init__(self, db_manager):
        self.db = db_manager

    def get_customers(self, business_id: str,
                      include_archived: bool = False) -> List[Dict[str, Any]]:
        """客户列表（按姓名排序，默认不含已归档）"""
        try:
            return _to_dicts(self.db.customers.get_customers(
                business_id, include_archived=include_archived,
            ))
        except Exception as e:
            logger.error(f"读取客户列表失败 [{business_id}]: {e}")
            return []

    def get_customer(self, business_id: str, customer_id: int) -> Optional[Dict[str, Any]]:
        try:
            return BaseCRUD._to_dict(self.db.customers.get_for(business_id, customer_id))
        except Exception as e:
            logger.error(f"读取客户失败 [{business_id}/{customer_id}]: {e}")
            return None

    def check_duplicate(self, business_id: str, phone: Optional[str] = None,
                        email: Optional[str] = None,
                        exclude_id: Optional[int] = None) -> bool:
        """同一商家内是否已有相同电话或邮箱的客户（可排除自身）"""
        if not phone and not email:
            return False
        return self.db.customers.find_duplicate(
            business_id, phone=phone, email=email, exclude_id=exclude_id,
        ) is not None

    def create_customer(self, business_id: str,
                        data: Union[CustomerInput, Dict[str, Any]]) -> int:
        """新增客户

        Raises:
            ValidationError: 缺少姓名
            DuplicateCustomerError: 电话或邮箱已被其他客户使用
        """
        data = parse(CustomerInput, data)
        if not data.full_name.strip():
            raise ValidationError("El nombre del cliente es obligatorio.")
        if self.check_duplicate(business_id, data.phone, data.email):
            raise DuplicateCustomerError()
        try:
            customer_id = self.db.customers.add(business_id, data.model_dump())
        except Exception as e:
            logger.error(f"新增客户失败 [{business_id}]: {e}")
            raise
        logger.info(f"客户已新增: {business_id}/{customer_id} {data.full_name}")
        return customer_id

    def update_customer(self, business_id: str, customer_id: int,
                        data: Union[CustomerUpdate, Dict[str, Any]]) -> Dict[str, Any]:
        data = parse(CustomerUpdate, data)
        changes = data.changes()
        if changes.get("phone") or changes.get("email"):
            if self.check_duplicate(business_id, changes.get("phone"),
                                    changes.get("email"), exclude_id=customer_id):
                raise DuplicateCustomerError()
        try:
            updated = self.db.customers.update_for(business_id, customer_id, changes)
        except Exception as e:
            logger.error(f"更新客户失败 [{business_id}/{customer_id}]: {e}")
            raise
        if updated is None:
            raise NotFoundError(f"Cliente no encontrado: {customer_id}")
        return BaseCRUD._to_dict(updated)

    def archive_customer(self, business_id: str, customer_id: int) -> Dict[str, Any]:
        """归档客户：列表中隐藏，保留数据和预约历史"""
        try:
            updated = self.db.customers.update_for(business_id, customer_id,
                                                   {"archived": True})
        except Exception as e:
            logger.error(f"归档客户失败 [{business_id}/{customer_id}]: {e}")
            raise
        if updated is None:
            raise NotFoundError(f"Cliente no encontrado: {customer_id}")
        logger.info(f"客户已归档: {business_id}/{customer_id}")
        return BaseCRUD._to_dict(updated)

    def delete_customer(self, business_id: str, customer_id: int) -> None:
        try:
            deleted = self.db.customers.delete_for(business_id, customer_id)
        except Exception as e:
            logger.error(f"删除客户失败 [{business_id}/{customer_id}]: {e}")
            raise
        if not deleted:
            raise NotFoundError(f"Cliente no encontrado: {customer_id}")

    def upsert_from_appointment(self, business_id: str, full_name: str,
                                email: Optional[str] = None,
                                phone: Optional[str] = None) -> int:
        """根据预约信息查找或创建客户，返回客户ID

        先按邮箱查找，再按电话查找；找到时刷新 last_interaction_at，
        并补全对方缺少的电话 / 邮箱。都找不到时新建客户。
        """
        now = datetime.utcnow()
        lookups = (
            ("email", email, "phone", phone),
            ("phone", phone, "email", email),
        )
        for field, value, other_field, other_value in lookups:
            if not value:
                continue
            existing = self.db.customers.find_by(business_id, field, value)
            if existing is None:
                continue
            changes = {"last_interaction_at": now}
            if other_value and not getattr(existing, other_field):
                changes[other_field] = other_value
            self.db.customers.update_for(business_id, existing.id, changes)
            return existing.id

        customer_id = self.db.customers.add(business_id, {
            "full_name": full_name,
            "email": email or "",
            "phone": phone or "",
            "archived": False,
            "last_interaction_at": now,
        })
        logger.info(f"由预约创建客户: {business_id}/{customer_id} {full_name}")
        return customer_id


class AppointmentService:
    """商家预约

    Args:
        customers: CustomerService，提供时新预约自动关联（或创建）客户档案
    """

    def __init__(self, db_manager, customers: Optional[CustomerService] = None):
        self.db = db_manager
        self.customers = customers

    def create_appointment(self, business_id: str,
                           data: Union[AppointmentInput, Dict[str, Any]]) -> Dict[str, Any]:
        """新增预约

        指定了 service_id 时校验服务存在，并补全 service_name / service_duration；
        指定了 employee_id 时校验员工属于该商家。

        Raises:
            ValidationError: 缺少客户姓名
            NotFoundError: 服务或员工不存在
        """
        data = parse(AppointmentInput, data)
        if not data.customer_name.strip():
            raise ValidationError("El nombre del cliente es obligatorio.")

        fields = data.model_dump()
        fields["date"] = to_utc_naive(data.date)

        if data.service_id is not None:
            service = self.db.services.get_for(business_id, data.service_id)
            if service is None:
                raise NotFoundError(f"Servicio no encontrado: {data.service_id}")
            fields["service_name"] = data.service_name or service.name
            if data.service_duration is None:
                fields["service_duration"] = service.duration_minutes
        if data.employee_id is not None:
            if self.db.employees.get_for(business_id, data.employee_id) is None:
                raise NotFoundError(f"Empleado no encontrado: {data.employee_id}")

        if (fields["customer_id"] is None and self.customers is not None
                and (data.customer_email or data.customer_phone)):
            try:
                fields["customer_id"] = self.customers.upsert_from_appointment(
                    business_id, data.customer_name,
                    email=data.customer_email, phone=data.customer_phone,
                )
            except Exception as e:
                logger.warning(f"预约关联客户失败 [{business_id}]: {e}")

        try:
            appointment_id = self.db.appointments.add(business_id, fields)
        except Exception as e:
            logger.error(f"新增预约失败 [{business_id}]: {e}")
            raise
        logger.info(f"预约已新增: {business_id}/{appointment_id} {fields['date']}")
        return BaseCRUD._to_dict(self.db.appointments.get_for(business_id, appointment_id))

    def get_appointments(self, business_id: str, start: datetime,
                         end: datetime) -> List[Dict[str, Any]]:
        """时间范围内的预约（包含两端）"""
        start, end = to_utc_naive(start), to_utc_naive(end)
        if start > end:
            raise ValidationError("La fecha de inicio debe ser anterior a la fecha final.")
        try:
            return _to_dicts(self.db.appointments.get_in_range(business_id, start, end))
        except Exception as e:
            logger.error(f"读取预约失败 [{business_id}]: {e}")
            return []

    def get_appointments_by_employee(self, business_id: str,
                                     employee_id: int) -> List[Dict[str, Any]]:
        """员工工作量视图（最新在前）"""
        try:
            return _to_dicts(self.db.appointments.get_by_employee(business_id, employee_id))
        except Exception as e:
            logger.error(f"读取员工预约失败 [{business_id}/{employee_id}]: {e}")
            return []

    def get_appointments_by_customer(self, business_id: str,
                                     customer_id: int) -> List[Dict[str, Any]]:
        try:
            return _to_dicts(self.db.appointments.get_by_customer(business_id, customer_id))
        except Exception as e:
            logger.error(f"读取客户预约失败 [{business_id}/{customer_id}]: {e}")
            return []

    def update_appointment(self, business_id: str, appointment_id: int,
                           data: Union[AppointmentUpdate, Dict[str, Any]]) -> Dict[str, Any]:
        data = parse(AppointmentUpdate, data)
        changes = data.changes()
        if "date" in changes:
            if changes["date"] is None:
                raise ValidationError("La fecha de la cita es obligatoria.")
            changes["date"] = to_utc_naive(changes["date"])
        try:
            updated = self.db.appointments.update_for(business_id, appointment_id, changes)
        except Exception as e:
            logger.error(f"更新预约失败 [{business_id}/{appointment_id}]: {e}")
            raise
        if updated is None:
            raise NotFoundError(f"Cita no encontrada: {appointment_id}")
        return BaseCRUD._to_dict(updated)

    def delete_appointment(self, business_id: str, appointment_id: int) -> None:
        try:
            deleted = self.db.appointments.delete_for(business_id, appointment_id)
        except Exception as e:
            logger.error(f"删除预约失败 [{business_id}/{appointment_id}]: {e}")
            raise
        if not deleted:
            raise NotFoundError(f"Cita no encontrada: {appointment_id}")
