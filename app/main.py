"""
FastAPI 应用入口

招聘管理（ATS）系统后端：岗位、候选人、应聘流程、面试与招聘会
"""
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.core.config import settings, BASE_DIR
from app.core.database import init_db, close_db
from app.core.response import success_response, DictResponse
from app.core.exceptions import register_exception_handlers
from app.api import api_router, webhook_router

APP_VERSION = "1.0.0"


def integration_status() -> dict:
    """外部集成是否已配置（Claude 密钥也可能保存在组织设置中，此处只看环境配置）"""
    return {
        "smtp": settings.smtp_configured,
        "llm": bool(settings.llm_api_key),
        "claude": bool(settings.anthropic_api_key),
        "ai_interview": bool(settings.ai_interview_base_url),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("启动应用: {} ({}), debug={}", settings.app_name, settings.app_env, settings.debug)

    (BASE_DIR / "data").mkdir(parents=True, exist_ok=True)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    for name, configured in integration_status().items():
        if not configured:
            logger.warning("{} 未配置，相关功能将降级运行", name)

    await init_db()
    logger.info("数据库初始化完成: {}", settings.database_url)

    yield

    await close_db()
    logger.info("应用已关闭")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description="招聘管理（ATS）系统 API",
        version=APP_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        # operationId 直接使用路由函数名
        generate_unique_id_function=lambda route: route.name,
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(webhook_router, prefix="/webhook")

    @app.get("/health", tags=["系统"], response_model=DictResponse)
    async def health_check():
        return success_response(data={"status": "healthy", "integrations": integration_status()})

    @app.get("/", tags=["系统"], response_model=DictResponse)
    async def root():
        return success_response(data={
            "name": settings.app_name,
            "version": APP_VERSION,
            "docs": "/docs" if settings.debug else None,
        })

    # 最后添加的中间件最先执行
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="127.0.0.1", port=8000, reload=settings.debug)
