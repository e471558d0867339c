"""API 路由测试共享 fixture

- 请求 Session 替换为内存 SQLite（db_session）
- container 使用测试替身 sender
- 不进入 lifespan（不使用 with TestClient(...)）
"""

import pytest
from fastapi.testclient import TestClient

from src.infrastructure.database.engine import get_db_session
from src.interfaces.api.container import build_container
from src.interfaces.api.dependencies import get_container
from src.interfaces.api.main import app


@pytest.fixture
def api_container(fake_sender):
    return build_container(sender=fake_sender)


@pytest.fixture
def client(db_session, api_container):
    app.dependency_overrides[get_db_session] = lambda: db_session
    app.dependency_overrides[get_container] = lambda: api_container
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
