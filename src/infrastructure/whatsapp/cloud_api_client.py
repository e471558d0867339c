"""WhatsApp Cloud API 客户端

Infrastructure 层：实现 MessageSender 端口

请求：
    POST https://graph.facebook.com/{version}/{phone_number_id}/messages
    Authorization: Bearer <access_token>

成功条件：HTTP 2xx 且响应包含 messages[0].id
失败：error.code + 可读信息，规范化为 "(#<code>) <message>"
网络错误：httpx.RequestError → "Network error: <detail>"

每次调用只发一次请求，不重试。
"""

import logging
from typing import Any

import httpx

from src.domain.ports.message_sender import SendResult
from src.infrastructure.whatsapp.errors import format_carrier_error, friendly_error_message

logger = logging.getLogger(__name__)

GRAPH_API_BASE_URL = "https://graph.facebook.com"
DEFAULT_API_VERSION = "v24.0"


class WhatsAppCloudClient:
    """WhatsApp Cloud API 发送客户端"""

    def __init__(
        self,
        phone_number_id: str,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        base_url: str = GRAPH_API_BASE_URL,
    ):
        self.phone_number_id = phone_number_id
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/{self.api_version}/{self.phone_number_id}/messages"

    async def send(self, payload: dict[str, Any]) -> SendResult:
        """发送一条消息

        参数：
            payload: 完整请求体（messaging_product、to、type……）

        返回：
            SendResult
        """
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.messages_url, headers=headers, json=payload)
        except httpx.RequestError as e:
            logger.warning(f"承运方请求网络错误: to={payload.get('to')}, error={e}")
            return SendResult.fail(f"Network error: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if 200 <= response.status_code < 300:
            messages = data.get("messages") or []
            message_id = messages[0].get("id") if messages and isinstance(messages[0], dict) else None
            if message_id:
                return SendResult.ok(message_id)
            logger.warning(f"承运方响应缺少消息 ID: status={response.status_code}")
            return SendResult.fail("承运方响应缺少消息 ID")

        error = data.get("error")
        if isinstance(error, dict):
            code = error.get("code") if isinstance(error.get("code"), int) else None
            raw_message = error.get("message")
        else:
            code = None
            raw_message = error if isinstance(error, str) else None
        message = friendly_error_message(code, raw_message or f"HTTP {response.status_code}")
        logger.warning(
            f"承运方拒绝请求: to={payload.get('to')}, status={response.status_code}, code={code}"
        )
        return SendResult.fail(format_carrier_error(code, message), error_code=code)
