#!/usr/bin/env python3
"""Marketplace - Web API 入口

使用方式：
    python app.py

    # 指定端口
    python app.py --port 8080

    # 指定数据库
    python app.py --db sqlite:///data/marketplace.db

环境变量（在 .env 文件中配置，运行 python scripts/setup_env.py 生成）：
    DATABASE_URL        数据库连接地址
    WEB_HOST / WEB_PORT 监听地址和端口
    WEB_API_TOKEN       API Bearer token（为空时不校验）
    NOMINATIM_BASE_URL  地理编码服务地址
    STORAGE_*           S3 兼容对象存储
    NOTIFY_ADMIN_URL    管理员通知接口
    LOG_LEVEL           日志级别
"""
import argparse
import sys

import uvicorn
from loguru import logger

from config.settings import settings


def _cleanup(db):
    """关闭数据库连接（释放连接池）"""
    logger.info("正在清理资源...")
    if db is not None:
        try:
            db.close()
        except Exception as e:
            logger.warning(f"关闭数据库连接时出错: {e}")
    logger.info("服务已停止")


def main():
    parser = argparse.ArgumentParser(description="Marketplace Web API")
    parser.add_argument("--host", default=settings.web_host,
                        help=f"监听地址 (默认: {settings.web_host})")
    parser.add_argument("--port", type=int, default=settings.web_port,
                        help=f"监听端口 (默认: {settings.web_port})")
    parser.add_argument("--db", default=None, help="数据库连接 URL")
    args = parser.parse_args()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())

    db = None
    try:
        from database import DatabaseManager
        from interface.web.app import create_app

        db = DatabaseManager(args.db)
        db.create_tables()
        logger.info(f"数据库已连接: {db.database_url}")

        app = create_app(db)

        print()
        print("=" * 60)
        print("  Marketplace API 已启动!")
        print(f"  访问地址: http://localhost:{args.port}")
        print(f"  接口文档: http://localhost:{args.port}/docs")
        print(f"  数据库: {db.database_url}")
        print(f"  认证: {'Bearer token' if settings.web_api_token else '未启用'}")
        print("=" * 60)
        print("  按 Ctrl+C 停止服务")
        print()

        uvicorn.run(app, host=args.host, port=args.port, log_level="warning")
    except KeyboardInterrupt:
        logger.info("收到键盘中断信号")
    finally:
        _cleanup(db)


if __name__ == "__main__":
    main()
