"""WhatsApp Cloud API 适配器

- WhatsAppCloudClient: MessageSender 端口的 httpx 实现
- message_builder: 文本、媒体、交互消息请求体
- errors: 承运方错误码到可读信息的映射
"""

from src.infrastructure.whatsapp.cloud_api_client import WhatsAppCloudClient
from src.infrastructure.whatsapp.errors import format_carrier_error, friendly_error_message

__all__ = ["WhatsAppCloudClient", "format_carrier_error", "friendly_error_message"]
