"""SQLite 建表辅助

生产数据库使用 Alembic 迁移；本地 SQLite 开发环境在启动时补建缺失的表。
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, inspect

from src.infrastructure.database.base import Base
from src.infrastructure.database.engine import sync_engine

logger = logging.getLogger(__name__)


def ensure_sqlite_schema(engine: Engine | None = None) -> list[str]:
    """为 SQLite 补建缺失的表

    参数：
        engine: 目标引擎（默认全局同步引擎）

    返回：
        本次新建的表名（非 SQLite 数据库返回空列表）
    """
    # 导入模型，确保它们注册到 Base.metadata
    from src.infrastructure.database import models as _models  # noqa: F401

    engine = engine or sync_engine
    if not str(engine.url).startswith("sqlite"):
        return []

    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    created = [name for name in Base.metadata.tables if name not in existing]
    if created:
        logger.info(f"已创建数据表: {', '.join(created)}")
    return created
