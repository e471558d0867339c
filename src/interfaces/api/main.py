"""FastAPI 应用入口"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.config import settings
from src.infrastructure.database.schema import ensure_sqlite_schema
from src.interfaces.api.container import build_container
from src.interfaces.api.routes import campaigns, flows, health, templates

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _get_display_host() -> str:
    """Return a host suitable for displaying in links."""
    if settings.host in {"0.0.0.0", "::"}:
        return "127.0.0.1"
    return settings.host


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    display_host = _get_display_host()
    logger.info(f"{settings.app_name} v{settings.app_version} 启动中...")
    logger.info(f"环境: {settings.env}")
    logger.info(f"数据库: {settings.database_url}")
    logger.info(f"API 文档: http://{display_host}:{settings.port}/docs")

    try:
        ensure_sqlite_schema()
    except SQLAlchemyError as exc:
        logger.error(f"数据库初始化失败（请运行 Alembic 迁移）: {exc}")

    if not settings.whatsapp_phone_number_id or not settings.whatsapp_access_token:
        logger.warning("WhatsApp 凭据未配置，发送将失败")

    # 测试可以预先注入 container（测试替身 sender）
    if getattr(app.state, "container", None) is None:
        app.state.container = build_container()

    try:
        yield
    finally:
        logger.info(f"{settings.app_name} 关闭中...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="WhatsApp 会话流程编辑与模板群发服务",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
async def health_check() -> JSONResponse:
    return JSONResponse(
        content={
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.app_version,
            "env": settings.env,
        }
    )


app.include_router(flows.router, prefix="/api", tags=["Flows"])
app.include_router(templates.router, prefix="/api", tags=["Templates"])
app.include_router(campaigns.router, prefix="/api", tags=["Campaigns"])
app.include_router(health.router, prefix="/api", tags=["Health"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.interfaces.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
