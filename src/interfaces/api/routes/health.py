"""健康检查端点"""

from fastapi import APIRouter

from src.config import settings

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/")
async def health_check() -> dict[str, str]:
    """基本健康检查"""
    return {
        "status": "healthy",
        "service": settings.app_name,
    }


@router.get("/version")
async def version_info() -> dict[str, str]:
    """版本信息"""
    return {
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.env,
        "whatsapp_api_version": settings.whatsapp_api_version,
    }
