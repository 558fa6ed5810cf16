#!/usr/bin/env python
"""
招聘管理系统后端启动脚本

用法:
    python run.py                    # 默认 127.0.0.1:8000
    python run.py -p 8080 --reload   # 指定端口并开启热重载
    python run.py --host 0.0.0.0     # 允许外网访问
    python run.py --init-db          # 只建表，不启动服务
"""
import argparse
import asyncio
import shutil
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).parent
sys.path.insert(0, str(ROOT_DIR))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="招聘管理系统后端")
    parser.add_argument("-p", "--port", type=int, default=8000, help="服务端口 (默认: 8000)")
    parser.add_argument("--host", default="127.0.0.1", help="监听地址 (默认: 127.0.0.1)")
    parser.add_argument("--reload", action="store_true", help="开启热重载")
    parser.add_argument("--workers", type=int, default=1, help="工作进程数，热重载时固定为 1")
    parser.add_argument("--init-db", action="store_true", help="创建数据表后退出")
    return parser.parse_args()


def prepare_environment() -> None:
    """缺少 .env 时从 .env.example 复制一份"""
    env_file = ROOT_DIR / ".env"
    env_example = ROOT_DIR / ".env.example"
    if not env_file.exists() and env_example.exists():
        shutil.copy(env_example, env_file)
        print("已从 .env.example 创建 .env，请按需填写 SMTP 与模型密钥")


def main() -> int:
    args = parse_args()
    prepare_environment()

    # .env 就绪后再加载配置
    from app.core.config import settings
    from app.main import integration_status

    (ROOT_DIR / "data").mkdir(exist_ok=True)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    if args.init_db:
        from app.core.database import init_db, close_db

        async def create_tables():
            await init_db()
            await close_db()

        asyncio.run(create_tables())
        print(f"数据表已创建: {settings.database_url}")
        return 0

    print(f"{settings.app_name} -> http://{args.host}:{args.port}")
    if settings.debug:
        print(f"接口文档: http://{args.host}:{args.port}/docs")
    missing = [name for name, ok in integration_status().items() if not ok]
    if missing:
        print(f"未配置的集成: {', '.join(missing)}")

    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1 if args.reload else args.workers,
        log_level="info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
