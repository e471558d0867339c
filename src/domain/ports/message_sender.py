"""MessageSender Port（承运方发送端口）

把"发送一条承运方 API 请求"抽象为一次网络调用：
    send(payload) -> SendResult(success, message_id | error_message)

约束：
- 每次调用最多发送一次（at-most-once），不在内部重试
- 重试由调用方决定（群发的"重发"流程或人工操作）
"""

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class SendResult:
    """发送结果

    属性：
        success: 是否成功（承运方返回了消息 ID）
        message_id: 承运方消息 ID
        error_message: 规范化后的错误信息，如 "(#131026) 消息无法送达"
        error_code: 承运方错误码（网络错误时为 None）
    """

    success: bool
    message_id: str | None = None
    error_message: str | None = None
    error_code: int | None = None

    @classmethod
    def ok(cls, message_id: str) -> "SendResult":
        return cls(success=True, message_id=message_id)

    @classmethod
    def fail(cls, error_message: str, error_code: int | None = None) -> "SendResult":
        return cls(success=False, error_message=error_message, error_code=error_code)


class MessageSender(Protocol):
    """承运方消息发送接口

    payload 是完整的请求体（包含 messaging_product、to、type）。
    """

    async def send(self, payload: dict[str, Any]) -> SendResult: ...
