"""数据库引擎配置

设计说明：
- Repository 是同步的，使用 create_engine 创建同步引擎
- settings.database_url 使用 aiosqlite 驱动（Alembic 迁移走异步引擎），
  这里去掉 +aiosqlite 后缀得到同步 URL
- SQLite 连接允许跨线程使用（FastAPI 在线程池中运行同步路由）
"""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.config import settings


def get_sync_engine(database_url: str | None = None) -> Engine:
    """创建同步数据库引擎

    参数：
        database_url: 数据库 URL（默认读取配置）

    返回：
        Engine: 同步数据库引擎
    """
    # sqlite+aiosqlite:///... → sqlite:///...
    sync_url = (database_url or settings.database_url).replace("+aiosqlite", "")

    if sync_url.startswith("sqlite"):
        return create_engine(
            sync_url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        sync_url,
        echo=settings.debug,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


# 全局同步引擎实例
sync_engine = get_sync_engine()

# 创建 Session 工厂
SessionLocal = sessionmaker(
    bind=sync_engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db_session() -> Generator[Session, None, None]:
    """获取数据库会话（FastAPI 依赖注入）

    使用示例：
    >>> @router.get("/api/flows/{flow_id}")
    >>> def get_flow(flow_id: str, session: Session = Depends(get_db_session)):
    >>>     return SQLAlchemyFlowRepository(session).get_by_id(flow_id)

    Yields:
        Session: 数据库会话（请求结束后关闭）
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
