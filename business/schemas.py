"""业务数据结构（pydantic 模型）

创建类模型（*Input）描述一次完整写入；更新类模型（*Update）所有字段可选，
只有调用方显式设置过的字段才会被写入（``model_dump(exclude_unset=True)``）。
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from business.exceptions import ValidationError

Modality = Literal["local", "home", "both"]
RoleType = Literal[
    "manager", "reception", "customer_service", "sales_marketing",
    "technician", "assistant", "other",
]
Plan = Literal["free", "premium", "plus_team", "vip"]
AppointmentStatus = Literal["confirmed", "pending", "cancelled", "completed", "no-show"]


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def changes(self) -> Dict[str, Any]:
        """只返回显式设置过的字段。"""
        return self.model_dump(exclude_unset=True)


ModelT = TypeVar("ModelT", bound=_Model)


def parse(model: Type[ModelT], data: Union[ModelT, Dict[str, Any]]) -> ModelT:
    """dict → 模型；校验失败转为业务 ValidationError，消息列出出错字段"""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        fields = sorted({
            ".".join(str(part) for part in error["loc"]) or "datos"
            for error in e.errors()
        })
        raise ValidationError(f"Datos inválidos: {', '.join(fields)}.") from e


# ========== 嵌套结构 ==========

class GeoPoint(_Model):
    lat: float
    lng: float


class SocialMedia(_Model):
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None


class DaySchedule(_Model):
    """单日营业时间，open / close 为 HH:MM"""
    open: str = "09:00"
    close: str = "18:00"
    closed: bool = False


class WeeklySchedule(_Model):
    monday: Optional[DaySchedule] = None
    tuesday: Optional[DaySchedule] = None
    wednesday: Optional[DaySchedule] = None
    thursday: Optional[DaySchedule] = None
    friday: Optional[DaySchedule] = None
    saturday: Optional[DaySchedule] = None
    sunday: Optional[DaySchedule] = None


class PaymentSettings(_Model):
    accepts_cash: bool = True
    accepts_card: bool = False
    accepts_transfer: bool = False
    bank_name: Optional[str] = None
    account_holder: Optional[str] = None
    account_number: Optional[str] = None


class PlanData(_Model):
    plan: Plan = "premium"
    plan_status: str = "trial"
    plan_source: str = "trial"
    team_member_limit: int = 5
    overridden_by_crm: bool = False
    trial_start_date: Optional[str] = None
    trial_end_date: Optional[str] = None
    activated_at: Optional[str] = None


class ShiftAvailability(_Model):
    enabled: bool = False
    start: str = "09:00"
    end: str = "17:00"


# ========== 商家资料 ==========

class BusinessProfileInput(_Model):
    """创建商家资料的输入。

    必填项（名称、分类、服务方式）由服务层校验，以便返回统一的提示语。
    """
    business_name: str = ""
    category: str = ""
    modality: Optional[str] = None
    description: str = ""
    subcategory: Optional[str] = None
    subcategories: List[str] = Field(default_factory=list)
    additional_categories: List[str] = Field(default_factory=list)
    specialties: List[str] = Field(default_factory=list)
    city: str = ""
    department: str = ""
    country: str = ""
    address: Optional[str] = None
    location: Optional[GeoPoint] = None
    images: List[str] = Field(default_factory=list)
    logo_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[SocialMedia] = None
    opening_hours: Optional[WeeklySchedule] = None
    payment_settings: Optional[PaymentSettings] = None
    plan_data: Optional[PlanData] = None


class BusinessProfileUpdate(_Model):
    """商家资料的部分更新，所有字段可选。"""
    business_name: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    subcategories: Optional[List[str]] = None
    additional_categories: Optional[List[str]] = None
    specialties: Optional[List[str]] = None
    modality: Optional[Modality] = None
    city: Optional[str] = None
    department: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    location: Optional[GeoPoint] = None
    cover_image: Optional[str] = None
    logo_url: Optional[str] = None
    opening_hours: Optional[WeeklySchedule] = None
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[SocialMedia] = None
    images: Optional[List[str]] = None
    payment_settings: Optional[PaymentSettings] = None


# ========== 子集合 ==========

class ServiceInput(_Model):
    name: str
    name_i18n: Optional[Dict[str, str]] = None
    description: Optional[str] = None
    price: float = 0.0
    currency: str = "HNL"
    duration_minutes: int = 60
    category: Optional[str] = None
    is_active: bool = True
    is_extra: bool = False
    is_variable_price: bool = False
    images: List[str] = Field(default_factory=list)


class ServiceUpdate(_Model):
    name: Optional[str] = None
    name_i18n: Optional[Dict[str, str]] = None
    description: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    duration_minutes: Optional[int] = None
    category: Optional[str] = None
    is_active: Optional[bool] = None
    is_extra: Optional[bool] = None
    is_variable_price: Optional[bool] = None
    images: Optional[List[str]] = None


class EmployeeInput(_Model):
    name: str
    role: Optional[str] = None
    role_type: RoleType = "technician"
    role_custom: Optional[str] = None
    photo_url: Optional[str] = None
    active: bool = True
    service_ids: List[int] = Field(default_factory=list)
    availability_weekly: Optional[Dict[str, ShiftAvailability]] = None


class EmployeeUpdate(_Model):
    name: Optional[str] = None
    role: Optional[str] = None
    role_type: Optional[RoleType] = None
    role_custom: Optional[str] = None
    photo_url: Optional[str] = None
    active: Optional[bool] = None
    service_ids: Optional[List[int]] = None
    availability_weekly: Optional[Dict[str, ShiftAvailability]] = None


class PortfolioInput(_Model):
    image_url: str
    caption: Optional[str] = None
    service_id: Optional[int] = None


class ReviewInput(_Model):
    """评价输入；评分范围和评论长度由服务层校验。"""
    user_id: str
    user_name: Optional[str] = None
    user_avatar: Optional[str] = None
    rating: int
    comment: str


# ========== 预约与客户 ==========

class AppointmentInput(_Model):
    """预约输入；service_name / service_duration 为空时由服务层按 service_id 补全。"""
    date: datetime
    customer_name: str
    employee_id: Optional[int] = None
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    service_duration: Optional[int] = None
    customer_id: Optional[int] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    status: AppointmentStatus = "pending"
    notes: Optional[str] = None


class AppointmentUpdate(_Model):
    date: Optional[datetime] = None
    employee_id: Optional[int] = None
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    service_duration: Optional[int] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None


class CustomerInput(_Model):
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class CustomerUpdate(_Model):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
