"""数据库基础设施 - SQLAlchemy 配置和会话管理

导出：
- Base：ORM 模型基类
- sync_engine / get_sync_engine：同步引擎
- get_db_session：FastAPI 依赖注入使用的会话生成器
"""

from src.infrastructure.database.base import Base
from src.infrastructure.database.engine import get_db_session, get_sync_engine, sync_engine

__all__ = [
    "Base",
    "sync_engine",
    "get_sync_engine",
    "get_db_session",
]
