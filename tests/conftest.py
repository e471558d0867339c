"""Pytest 配置文件 - 全局 fixtures"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from src.domain.ports.message_sender import SendResult
from src.infrastructure.database import models as _models  # noqa: F401
from src.infrastructure.database.base import Base


class FakeSender:
    """MessageSender 测试替身

    - payloads: 按顺序记录的请求体
    - results: 预设的返回值队列（SendResult 或异常）；为空时返回成功
    """

    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []
        self.results: list[SendResult | Exception] = []

    async def send(self, payload: dict[str, Any]) -> SendResult:
        self.payloads.append(payload)
        if self.results:
            result = self.results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return SendResult.ok(f"wamid.{len(self.payloads)}")


@pytest.fixture
def fake_sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def db_engine():
    """内存数据库引擎（StaticPool：TestClient 线程池与测试共用同一个连接）"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = Session(bind=db_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def mock_external_http_calls(request):
    """自动Mock外部HTTP调用（仅单元测试）

    - 单元测试隔离 httpx.AsyncClient，不访问真实承运方
    - 需要精确响应的测试自行 monkeypatch httpx.AsyncClient
    """
    test_path = str(request.fspath)
    is_unit_test = "tests/unit" in test_path or "tests\\unit" in test_path

    if not is_unit_test:
        yield
        return

    with patch("httpx.AsyncClient") as mock_httpx_client:
        mock_httpx_response = MagicMock()
        mock_httpx_response.status_code = 200
        mock_httpx_response.json = MagicMock(return_value={"messages": [{"id": "wamid.mocked"}]})

        mock_client_instance = MagicMock()
        mock_client_instance.post = AsyncMock(return_value=mock_httpx_response)

        mock_httpx_client.return_value.__aenter__.return_value = mock_client_instance
        mock_httpx_client.return_value.__aexit__.return_value = AsyncMock()

        yield
