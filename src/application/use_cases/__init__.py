"""Application 层用例 - 业务逻辑编排

设计原则：
- 单一职责：每个 Use Case 只做一件事
- 依赖倒置：依赖 Port 接口，不依赖具体实现
- 可测试性：使用内存 SQLite 或测试替身进行单元测试
"""

from src.application.use_cases.control_campaign import CampaignAction, ControlCampaignUseCase
from src.application.use_cases.create_campaign import CreateCampaignInput, CreateCampaignUseCase
from src.application.use_cases.dispatch_campaign import (
    DispatchCampaignInput,
    DispatchCampaignOutput,
    DispatchCampaignUseCase,
)
from src.application.use_cases.register_template import (
    GetTemplateSpecUseCase,
    RegisterTemplateInput,
    RegisterTemplateUseCase,
)
from src.application.use_cases.resend_skipped import ResendSkippedOutput, ResendSkippedUseCase
from src.application.use_cases.run_flow_test import RunFlowTestInput, RunFlowTestUseCase
from src.application.use_cases.save_flow import (
    ActivateFlowOutput,
    ActivateFlowUseCase,
    SaveFlowInput,
    SaveFlowUseCase,
)
from src.application.use_cases.validate_flow import ValidateFlowInput, ValidateFlowUseCase

__all__ = [
    "ActivateFlowOutput",
    "ActivateFlowUseCase",
    "CampaignAction",
    "ControlCampaignUseCase",
    "CreateCampaignInput",
    "CreateCampaignUseCase",
    "DispatchCampaignInput",
    "DispatchCampaignOutput",
    "DispatchCampaignUseCase",
    "GetTemplateSpecUseCase",
    "RegisterTemplateInput",
    "RegisterTemplateUseCase",
    "ResendSkippedOutput",
    "ResendSkippedUseCase",
    "RunFlowTestInput",
    "RunFlowTestUseCase",
    "SaveFlowInput",
    "SaveFlowUseCase",
    "ValidateFlowInput",
    "ValidateFlowUseCase",
]
