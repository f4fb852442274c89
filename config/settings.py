"""全局配置管理

所有用户可配置项均通过 .env 文件设置，运行时自动加载到此处。

使用方式：
    1. 运行 python scripts/setup_env.py 生成 .env 文件
    2. 或手动创建 .env 文件（参考 scripts/setup_env.py 中的配置项）
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置 - 所有字段均可通过 .env 或环境变量覆盖"""

    # ========== 数据库 ==========
    database_url: str = "sqlite:///data/marketplace.db"

    # ========== Web API 配置 ==========
    web_host: str = "0.0.0.0"
    web_port: int = 8080
    web_api_token: str = ""  # 为空时不校验 Bearer token

    # ========== 地理编码（Nominatim） ==========
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "Pro247Marketplace/1.0"
    geocoding_timeout: float = 10.0

    # ========== 对象存储（S3 兼容） ==========
    storage_endpoint_url: str = ""
    storage_access_key: str = ""
    storage_secret_key: str = ""
    storage_bucket: str = ""
    storage_public_base_url: str = ""
    storage_signed_url_expiry: int = 3600

    # ========== 管理员通知 ==========
    notify_admin_url: str = ""
    admin_email: str = ""

    # ========== 业务规则 ==========
    trial_days: int = 7
    default_country: str = "HN"

    # ========== 日志 ==========
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# 全局配置实例
settings = Settings()
