"""初始化数据库

使用方式：
    python scripts/init_db.py            # 只建表
    python scripts/init_db.py --demo     # 建表并写入一个示例商家
"""
import argparse
import os
import sys

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from loguru import logger

from business.notifications import AdminNotifier
from business.profile_service import BusinessProfileService
from business.catalog_service import ServicesService
from database import DatabaseManager

DEMO_USER_ID = "demo-business"


class _OfflineGeocoder:
    """示例数据不访问外部地理编码服务"""

    def resolve(self, city, department, country, address=None):
        from config.locations import get_location_fallback
        return {**get_location_fallback(city, department, country), "source": "fallback"}


def seed_demo(db: DatabaseManager):
    """写入示例商家和两个服务（已存在时跳过）"""
    if db.profiles.exists(DEMO_USER_ID):
        logger.info(f"示例商家已存在: {DEMO_USER_ID}")
        return

    profiles = BusinessProfileService(
        db, geocoder=_OfflineGeocoder(), notifier=AdminNotifier(url=""),
    )
    profiles.create_profile(DEMO_USER_ID, {
        "business_name": "Barbería El Centro",
        "category": "beauty_wellness",
        "subcategory": "hair",
        "subcategories": ["hair"],
        "specialties": ["Corte de Caballero (Barbería)"],
        "modality": "local",
        "country": "HN",
        "department": "Francisco Morazán",
        "city": "Tegucigalpa",
        "description": "Cortes clásicos y modernos en el centro de la ciudad.",
        "email": "demo@example.com",
        "phone": "+504 9999-0000",
    })

    services = ServicesService(db)
    services.add_service(DEMO_USER_ID, {"name": "Corte clásico", "price": 150, "duration_minutes": 30})
    services.add_service(DEMO_USER_ID, {"name": "Corte y barba", "price": 250,
                                        "duration_minutes": 45, "is_variable_price": True})
    logger.info(f"示例商家已创建: {DEMO_USER_ID}")


def init_database(database_url=None, demo=False):
    """初始化数据库（可选写入示例数据）"""
    logger.info("Initializing database...")

    db = DatabaseManager(database_url)

    logger.info("Creating tables...")
    db.create_tables()

    if demo:
        logger.info("Inserting demo data...")
        seed_demo(db)

    db.close()
    logger.info("Database initialization completed!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="初始化数据库")
    parser.add_argument("--db", default=None, help="数据库连接 URL")
    parser.add_argument("--demo", action="store_true", help="写入示例商家")
    args = parser.parse_args()
    init_database(args.db, demo=args.demo)
