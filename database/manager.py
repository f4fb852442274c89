"""数据库管理器：统一门面（Facade）。

DatabaseManager 是 database 模块的统一入口，组合了所有子仓库，
提供两套 API：

1. **子仓库访问**（细粒度）：
   通过 ``db.profiles``、``db.services`` 等属性直接访问子仓库，
   返回 ORM 对象，适合需要精细控制的场景。

2. **便捷方法**（粗粒度）：
   提供扁平化的方法（如 ``get_public_business()``、``get_account()``），
   返回字典，适合上层业务代码和 API 调用。
"""
from typing import Optional, List, Dict, Any
from sqlalchemy.orm import Session

from .connection import DatabaseConnection
from .profile_repos import UserRepository, BusinessProfileRepository
from .catalog_repos import (
    ServiceRepository, EmployeeRepository,
    PortfolioRepository, ReviewRepository,
    AppointmentRepository, CustomerRepository
)
from .system_repos import (
    AuditLogRepository, FavoriteRepository, LeadRepository
)
from .base_crud import BaseCRUD
from .models import User


class DatabaseManager:
    """数据库管理器：统一门面。

    Attributes:
        conn: 数据库连接管理器。
        users: 用户仓库。
        profiles: 商家资料仓库（公开 / 私密 / 账户）。
        services: 服务仓库。
        employees: 员工仓库。
        portfolio: 作品集仓库。
        reviews: 评价仓库。
        appointments: 预约仓库。
        customers: 客户仓库（CRM）。
        audit_log: 审计日志仓库。
        favorites: 收藏仓库。
        leads: 潜在客户仓库。

    Example::

        db = DatabaseManager("sqlite:///data/marketplace.db")
        db.create_tables()

        # 通过子仓库访问（返回 ORM 对象）
        public = db.profiles.get_public("uid-123")

        # 通过便捷方法访问（返回字典）
        business = db.get_public_business("uid-123")
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """初始化数据库管理器。

        Args:
            database_url: 数据库连接URL。如果为None则使用settings配置。
        """
        # 基础设施层
        self.conn = DatabaseConnection(database_url)

        # 用户与商家资料
        self.users = UserRepository(self.conn)
        self.profiles = BusinessProfileRepository(self.conn, self.users)

        # 商家子集合
        self.services = ServiceRepository(self.conn)
        self.employees = EmployeeRepository(self.conn)
        self.portfolio = PortfolioRepository(self.conn)
        self.reviews = ReviewRepository(self.conn)

        # 预约与客户
        self.appointments = AppointmentRepository(self.conn)
        self.customers = CustomerRepository(self.conn)

        # 系统数据
        self.audit_log = AuditLogRepository(self.conn)
        self.favorites = FavoriteRepository(self.conn)
        self.leads = LeadRepository(self.conn)

    # ================================================================
    # 基础设施方法
    # ================================================================

    def create_tables(self) -> None:
        """创建所有数据库表（幂等操作）。"""
        self.conn.create_tables()

    def get_session(self) -> Session:
        """获取数据库会话。"""
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        """数据库连接URL。"""
        return self.conn.database_url

    @property
    def engine(self):
        """SQLAlchemy 引擎对象。"""
        return self.conn.engine

    def close(self) -> None:
        """关闭数据库连接，释放所有资源。"""
        self.conn.close()

    # ================================================================
    # 便捷查询方法（返回字典）
    # ================================================================

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return BaseCRUD._to_dict(self.users.get_by_id(User, user_id))

    def get_public_business(self, business_id: str) -> Optional[Dict[str, Any]]:
        """获取商家公开资料。"""
        return BaseCRUD._to_dict(self.profiles.get_public(business_id))

    def get_private_business(self, business_id: str) -> Optional[Dict[str, Any]]:
        """获取商家私密资料。"""
        return BaseCRUD._to_dict(self.profiles.get_private(business_id))

    def get_account(self, business_id: str) -> Optional[Dict[str, Any]]:
        """获取商家账户（含 plan_data）。"""
        return BaseCRUD._to_dict(self.profiles.get_account(business_id))

    def list_public_businesses(self, country_code: Optional[str] = None
                               ) -> List[Dict[str, Any]]:
        """获取商家公开资料列表（最新在前）。"""
        return [
            BaseCRUD._to_dict(b)
            for b in self.profiles.list_public(country_code)
        ]
