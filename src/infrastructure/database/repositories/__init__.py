"""Repository 实现 - 数据访问层

- 实现领域层定义的 Port 接口（Protocol）
- 在 Assembler 方法中完成 ORM 模型 ⇄ 领域实体转换
- 事务边界由调用者控制
"""

from src.infrastructure.database.repositories.campaign_contact_repository import (
    SQLAlchemyCampaignContactRepository,
)
from src.infrastructure.database.repositories.campaign_repository import (
    SQLAlchemyCampaignRepository,
)
from src.infrastructure.database.repositories.flow_repository import SQLAlchemyFlowRepository
from src.infrastructure.database.repositories.message_template_repository import (
    SQLAlchemyMessageTemplateRepository,
)

__all__ = [
    "SQLAlchemyFlowRepository",
    "SQLAlchemyCampaignRepository",
    "SQLAlchemyCampaignContactRepository",
    "SQLAlchemyMessageTemplateRepository",
]
