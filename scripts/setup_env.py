#!/usr/bin/env python3
"""交互式生成 .env 配置文件

使用方式：
    python scripts/setup_env.py

会引导用户填写配置项，生成 .env 文件。
"""
import os

# 项目根目录
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_FILE = os.path.join(PROJECT_ROOT, ".env")


# 配置项定义：(env_key, 描述, 默认值, 是否必填)
CONFIG_ITEMS = [
    # === 数据库 ===
    ("DATABASE_URL", "数据库连接地址", "sqlite:///data/marketplace.db", False),

    # === Web API ===
    ("WEB_HOST", "Web 监听地址", "0.0.0.0", False),
    ("WEB_PORT", "Web 监听端口", "8080", False),
    ("WEB_API_TOKEN", "API Bearer token（为空时不校验）", "", False),

    # === 地理编码 ===
    ("NOMINATIM_BASE_URL", "Nominatim 地址", "https://nominatim.openstreetmap.org", False),
    ("NOMINATIM_USER_AGENT", "Nominatim User-Agent", "Pro247Marketplace/1.0", False),

    # === 对象存储 ===
    ("STORAGE_ENDPOINT_URL", "S3 兼容存储地址（R2 / MinIO）", "", False),
    ("STORAGE_ACCESS_KEY", "存储 Access Key", "", False),
    ("STORAGE_SECRET_KEY", "存储 Secret Key", "", False),
    ("STORAGE_BUCKET", "存储桶名称", "", False),
    ("STORAGE_PUBLIC_BASE_URL", "图片公开访问前缀", "", False),

    # === 管理员通知 ===
    ("NOTIFY_ADMIN_URL", "管理员通知接口地址（为空时不发送）", "", False),
    ("ADMIN_EMAIL", "管理员邮箱", "", False),

    # === 日志 ===
    ("LOG_LEVEL", "日志级别", "INFO", False),
]

SECTION_NAMES = {
    "DATABASE": "# === 数据库配置 ===",
    "WEB": "# === Web API 配置 ===",
    "NOMINATIM": "# === 地理编码配置 ===",
    "STORAGE": "# === 对象存储配置 ===",
    "NOTIFY": "# === 管理员通知配置 ===",
    "ADMIN": "# === 管理员通知配置 ===",
    "LOG": "# === 日志配置 ===",
}


def main():
    print()
    print("=" * 60)
    print("  Marketplace 配置向导")
    print("  生成 .env 配置文件")
    print("=" * 60)
    print()

    # 检查是否已存在 .env
    if os.path.exists(ENV_FILE):
        print(f"检测到已有 .env 文件: {ENV_FILE}")
        choice = input("是否覆盖？(y/N): ").strip().lower()
        if choice != "y":
            print("已取消。")
            return
        print()

    env_lines = ["# Marketplace 配置文件", "# 由 scripts/setup_env.py 自动生成"]

    for key, desc, default, required in CONFIG_ITEMS:
        header = SECTION_NAMES.get(key.split("_")[0], "# === 其他配置 ===")
        if header not in env_lines:
            env_lines.append("")
            env_lines.append(header)

        req_tag = " [必填]" if required else ""
        default_hint = f" (默认: {default})" if default else ""
        print(f"{desc}{req_tag}")

        while True:
            value = input(f"  {key}={default_hint}: ").strip()
            if not value:
                value = default
            if required and not value:
                print(f"  {key} 是必填项，请输入值。")
                continue
            break

        env_lines.append(f"{key}={value}")
        print()

    with open(ENV_FILE, "w", encoding="utf-8") as f:
        f.write("\n".join(env_lines) + "\n")

    print("=" * 60)
    print(f"  配置文件已生成: {ENV_FILE}")
    print()
    print("  初始化数据库：")
    print("    python scripts/init_db.py --demo")
    print("  启动服务：")
    print("    python app.py")
    print("=" * 60)


if __name__ == "__main__":
    main()
