"""领域层 Ports - 定义领域层需要的外部依赖接口

设计原则：
- 仓储使用 Protocol 定义接口（结构化子类型）
- 节点执行器使用 ABC（执行器需要显式实现 execute）
- 方法签名使用领域对象（Entity、Value Object）
- 不依赖任何框架（纯 Python）
"""

from src.domain.ports.campaign_contact_repository import CampaignContactRepository
from src.domain.ports.campaign_repository import CampaignRepository
from src.domain.ports.flow_repository import FlowRepository
from src.domain.ports.message_sender import MessageSender, SendResult
from src.domain.ports.message_template_repository import MessageTemplateRepository
from src.domain.ports.node_executor import ExecutionContext, NodeExecutionResult, NodeExecutor

__all__ = [
    "CampaignContactRepository",
    "CampaignRepository",
    "ExecutionContext",
    "FlowRepository",
    "MessageSender",
    "MessageTemplateRepository",
    "NodeExecutionResult",
    "NodeExecutor",
    "SendResult",
]
