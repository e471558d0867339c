"""应用配置模块 - 使用 Pydantic Settings 管理环境变量"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="WhatsApp Flow Dispatch", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")
    env: Literal["development", "production", "test"] = Field(
        default="development", description="运行环境"
    )
    debug: bool = Field(default=False, description="调试模式")
    log_level: str = Field(default="INFO", description="日志级别")

    # Server
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=8000, description="服务器端口")
    reload: bool = Field(default=False, description="热重载")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./flow_dispatch.db",
        description="数据库连接 URL",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="允许的跨域源",
    )

    # WhatsApp Cloud API
    whatsapp_api_version: str = Field(default="v24.0", description="Graph API 版本")
    whatsapp_phone_number_id: str = Field(default="", description="发送号码 ID")
    whatsapp_access_token: str = Field(default="", description="访问令牌")
    whatsapp_request_timeout: float = Field(default=30.0, description="承运方请求超时时间（秒）")

    # Campaign Dispatch
    dispatch_batch_size: int = Field(default=40, description="群发批次大小")
    dispatch_send_delay_ms: int = Field(default=15, description="每次发送后的间隔（毫秒）")
    default_template_language: str = Field(default="pt_BR", description="模板默认语言")
    default_country_code: str = Field(default="55", description="电话号码默认国家码")

    # Flow Engine
    flow_max_steps: int = Field(default=100, description="单次流程运行的最大步数")


# 全局配置实例
settings = Settings()
