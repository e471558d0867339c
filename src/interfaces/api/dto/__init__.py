"""API DTO（Data Transfer Objects）

DTO 职责：
1. 数据验证：使用 Pydantic 验证请求数据
2. 数据序列化：将 Domain 实体转换为 JSON
3. 数据转换：DTO ⇄ Domain Entity / Application Input
"""

from src.interfaces.api.dto.campaign_dto import (
    CampaignResponse,
    ContactDTO,
    CreateCampaignRequest,
    DispatchResponse,
    ResendSkippedResponse,
)
from src.interfaces.api.dto.flow_dto import (
    FlowGraphRequest,
    FlowResponse,
    FlowTestRequest,
    SaveFlowRequest,
)
from src.interfaces.api.dto.template_dto import RegisterTemplateRequest, TemplateSpecResponse

__all__ = [
    "CampaignResponse",
    "ContactDTO",
    "CreateCampaignRequest",
    "DispatchResponse",
    "ResendSkippedResponse",
    "FlowGraphRequest",
    "FlowResponse",
    "FlowTestRequest",
    "SaveFlowRequest",
    "RegisterTemplateRequest",
    "TemplateSpecResponse",
]
