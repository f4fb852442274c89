"""数据库模块：本地服务市场的数据持久化层。

模块结构：
- connection: 数据库连接与会话管理
- models: ORM 模型定义
- base_crud: 通用 CRUD 基类
- profile_repos: 用户与商家资料仓库
- catalog_repos: 服务、员工、作品集、评价仓库
- system_repos: 审计日志、收藏、潜在客户仓库
- manager: DatabaseManager 统一门面

使用示例：
    ```python
    from database import DatabaseManager

    db = DatabaseManager("sqlite:///data/marketplace.db")
    db.create_tables()
    ```
"""
from .manager import DatabaseManager
from .connection import DatabaseConnection

__all__ = ["DatabaseManager", "DatabaseConnection"]
