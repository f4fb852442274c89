"""SQLAlchemy ORM 模型定义。

本模块定义了本地服务市场的所有数据表，包括：
- 用户（客户 / 服务商角色）
- 商家资料：公开部分、私密部分、账户（套餐 / 试用期）
- 商家子集合：服务、员工、作品集、评价
- 预约与客户（CRM）
- 辅助数据：收藏、潜在客户（lead）、审计日志

商家 ID 与所属用户 ID 相同（字符串）；子集合条目使用自增整数 ID。
列表 / 嵌套结构统一存放在 JSON 列中，写入时整体赋值。
"""
from typing import Dict, Any, List, Optional
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Float, JSON,
    UniqueConstraint, Index
)
from sqlalchemy.orm import declarative_base
from datetime import datetime

# SQLAlchemy declarative base，所有模型都继承自此类
Base = declarative_base()

# 允许使用旧式类型注解
Base.__allow_unmapped__ = True


class User(Base):
    """用户表模型。

    同一个用户可以在客户（client）和服务商（provider）角色之间切换，
    创建商家资料后 is_provider 置为 True，business_profile_id 指向商家 ID。
    """
    __tablename__ = "users"

    id: str = Column(String(128), primary_key=True)
    email: Optional[str] = Column(String(255))
    display_name: Optional[str] = Column(String(255))
    country_code: Optional[str] = Column(String(2))
    locale: str = Column(String(5), default="es")
    is_provider: bool = Column(Boolean, default=False)
    current_role: str = Column(String(20), default="client")  # client / provider
    provider_since: Optional[datetime] = Column(DateTime)
    business_profile_id: Optional[str] = Column(String(128))
    created_at: datetime = Column(DateTime, default=datetime.utcnow)


class BusinessPublic(Base):
    """商家公开资料表模型。

    所有访客可读的字段：名称、分类、位置、评分聚合、封面等。

    Attributes:
        id: 商家 ID（等于所属用户 ID）。
        country: 旧数据可能是完整国家名，也可能是 ISO2 代码。
        country_code: 归一化后的 ISO2 代码，带索引，用于按国家筛选。
        modality: 服务方式，local（到店）/ home（上门）/ both。
        status: draft / pending_review / active / suspended。
        rating: 平均评分（保留一位小数）。
        review_count: 评价数量。
        opening_hours: 每周营业时间 {"monday": {"open", "close", "closed"}, ...}。
    """
    __tablename__ = "businesses_public"

    id: str = Column(String(128), primary_key=True)
    business_name: str = Column(String(200), nullable=False)
    category: str = Column(String(100), nullable=False)
    subcategory: Optional[str] = Column(String(100))
    subcategories: List[str] = Column(JSON, default=list)
    additional_categories: List[str] = Column(JSON, default=list)
    specialties: List[str] = Column(JSON, default=list)
    city: Optional[str] = Column(String(100))
    department: Optional[str] = Column(String(100))
    country: Optional[str] = Column(String(100))
    country_code: Optional[str] = Column(String(2), index=True)
    lat: Optional[float] = Column(Float)
    lng: Optional[float] = Column(Float)
    modality: str = Column(String(10), nullable=False)
    status: str = Column(String(20), default="active")
    rating: float = Column(Float, default=0.0, nullable=False)
    review_count: int = Column(Integer, default=0, nullable=False)
    cover_image: Optional[str] = Column(String(1000))
    logo_url: Optional[str] = Column(String(1000))
    opening_hours: Optional[Dict[str, Any]] = Column(JSON)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow)


class BusinessPrivate(Base):
    """商家私密资料表模型（联系方式、详细地址、图库、收款设置）。"""
    __tablename__ = "businesses_private"

    id: str = Column(String(128), primary_key=True)
    description: Optional[str] = Column(Text)
    email: Optional[str] = Column(String(255))
    phone: Optional[str] = Column(String(50))
    website: Optional[str] = Column(String(500))
    social_media: Dict[str, Any] = Column(JSON, default=dict)
    address: Optional[str] = Column(String(500))
    images: List[str] = Column(JSON, default=list)
    payment_settings: Optional[Dict[str, Any]] = Column(JSON)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow)


class BusinessAccount(Base):
    """商家账户表模型（套餐与试用期数据）。

    plan_data 结构：plan / plan_status / plan_source / team_member_limit /
    overridden_by_crm / trial_start_date / trial_end_date / activated_at。
    """
    __tablename__ = "businesses"

    id: str = Column(String(128), primary_key=True)
    owner_uid: str = Column(String(128), nullable=False)
    plan_data: Dict[str, Any] = Column(JSON, default=dict)
    collaborator_data: Optional[Dict[str, Any]] = Column(JSON)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow)


class Service(Base):
    """商家服务表模型。"""
    __tablename__ = "services"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    business_id: str = Column(String(128), nullable=False, index=True)
    name: str = Column(String(200), nullable=False)
    name_i18n: Optional[Dict[str, str]] = Column(JSON)  # {"es", "en", "pt"}
    description: Optional[str] = Column(Text)
    price: float = Column(Float, default=0.0)
    currency: str = Column(String(3), default="HNL")
    duration_minutes: int = Column(Integer, default=60)
    category: Optional[str] = Column(String(100))
    is_active: bool = Column(Boolean, default=True)
    is_extra: bool = Column(Boolean, default=False)
    is_variable_price: bool = Column(Boolean, default=False)
    images: List[str] = Column(JSON, default=list)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow)


class Employee(Base):
    """商家员工表模型。

    role 为自由填写的职位名；role_type 为固定分类
    （manager / reception / customer_service / sales_marketing /
    technician / assistant / other）。
    availability_weekly: {"mon": {"enabled", "start", "end"}, ...}
    """
    __tablename__ = "employees"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    business_id: str = Column(String(128), nullable=False, index=True)
    name: str = Column(String(100), nullable=False)
    role: Optional[str] = Column(String(100))
    role_type: str = Column(String(30), default="technician")
    role_custom: Optional[str] = Column(String(100))
    photo_url: Optional[str] = Column(String(1000))
    active: bool = Column(Boolean, default=True)
    service_ids: List[int] = Column(JSON, default=list)
    availability_weekly: Optional[Dict[str, Any]] = Column(JSON)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow)


class PortfolioPost(Base):
    """作品集帖子表模型。"""
    __tablename__ = "portfolio_posts"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    business_id: str = Column(String(128), nullable=False, index=True)
    image_url: str = Column(String(1000), nullable=False)
    caption: Optional[str] = Column(Text)
    service_id: Optional[int] = Column(Integer)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)


class Review(Base):
    """评价表模型（rating 1-5，comment 至少 10 个字符）。"""
    __tablename__ = "reviews"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    business_id: str = Column(String(128), nullable=False, index=True)
    user_id: str = Column(String(128), nullable=False)
    user_name: Optional[str] = Column(String(255))
    user_avatar: Optional[str] = Column(String(1000))
    rating: int = Column(Integer, nullable=False)
    comment: str = Column(Text, nullable=False)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)


class Appointment(Base):
    """预约表模型。

    status: confirmed / pending / cancelled / completed / no-show
    service_name / service_duration 为冗余字段，列表展示时不必再查服务表。
    """
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_business_date", "business_id", "date"),
    )

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    business_id: str = Column(String(128), nullable=False, index=True)
    employee_id: Optional[int] = Column(Integer, index=True)
    service_id: Optional[int] = Column(Integer)
    service_name: Optional[str] = Column(String(200))
    service_duration: Optional[int] = Column(Integer)
    customer_id: Optional[int] = Column(Integer, index=True)
    customer_name: str = Column(String(255), nullable=False)
    customer_email: Optional[str] = Column(String(255))
    customer_phone: Optional[str] = Column(String(50))
    date: datetime = Column(DateTime, nullable=False)
    status: str = Column(String(20), default="pending")
    notes: Optional[str] = Column(Text)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow)


class Customer(Base):
    """商家客户表模型（CRM）。

    archived 为软删除标记：列表中隐藏，但保留数据和预约历史。
    """
    __tablename__ = "customers"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    business_id: str = Column(String(128), nullable=False, index=True)
    full_name: str = Column(String(255), nullable=False)
    phone: Optional[str] = Column(String(50))
    email: Optional[str] = Column(String(255))
    address: Optional[str] = Column(String(500))
    notes: Optional[str] = Column(Text)
    tags: List[str] = Column(JSON, default=list)
    archived: bool = Column(Boolean, default=False)
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
    updated_at: datetime = Column(DateTime, default=datetime.utcnow)
    last_interaction_at: datetime = Column(DateTime, default=datetime.utcnow)


class Favorite(Base):
    """用户收藏表模型（每个用户对每个商家最多一条）。"""
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "business_id", name="uq_favorite_user_business"),
    )

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    user_id: str = Column(String(128), nullable=False, index=True)
    business_id: str = Column(String(128), nullable=False)
    business_name: Optional[str] = Column(String(200))
    category: Optional[str] = Column(String(100))
    cover_image: Optional[str] = Column(String(1000))
    created_at: datetime = Column(DateTime, default=datetime.utcnow)


class Lead(Base):
    """潜在客户表模型（用户收藏商家时生成）。"""
    __tablename__ = "leads"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    business_id: str = Column(String(128), nullable=False, index=True)
    user_id: str = Column(String(128), nullable=False)
    user_name: Optional[str] = Column(String(255))
    user_email: Optional[str] = Column(String(255))
    source: str = Column(String(30), default="favorite")
    created_at: datetime = Column(DateTime, default=datetime.utcnow)


class AuditEntry(Base):
    """审计日志表模型（只追加，不修改不删除）。"""
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_created_at", "created_at"),
    )

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    action: str = Column(String(50), nullable=False)
    actor_uid: str = Column(String(128), nullable=False)
    actor_name: Optional[str] = Column(String(255))
    target_id: Optional[str] = Column(String(128))
    target_name: Optional[str] = Column(String(255))
    target_type: Optional[str] = Column(String(30))  # user / business / collaborator / plan / system
    before: Optional[Dict[str, Any]] = Column(JSON)
    after: Optional[Dict[str, Any]] = Column(JSON)
    meta: Optional[Dict[str, Any]] = Column(JSON)
    country: Optional[str] = Column(String(2))
    ip_address: Optional[str] = Column(String(64))
    created_at: datetime = Column(DateTime, default=datetime.utcnow)
