"""应用层 - 用例编排、事务边界

Application 层职责：
1. 用例编排：协调 Domain 实体、Repository、Domain Service
2. 事务边界：群发在批次边界提交（检查点）
3. 输入输出转换：接收输入参数，返回结果

已实现的用例：
- ValidateFlowUseCase / SaveFlowUseCase / ActivateFlowUseCase: 流程校验、保存、发布
- RunFlowTestUseCase: 交互式测试运行
- RegisterTemplateUseCase: 模板登记（编译契约后入库）
- CreateCampaignUseCase / DispatchCampaignUseCase: 创建与执行群发
- ResendSkippedUseCase / ControlCampaignUseCase: 重新校验跳过的联系人、暂停/恢复/取消

使用示例：
>>> from src.application import DispatchCampaignUseCase, DispatchCampaignInput
>>> use_case = DispatchCampaignUseCase(
...     campaign_repository=campaign_repo,
...     contact_repository=contact_repo,
...     template_repository=template_repo,
...     sender=WhatsAppCloudClient(phone_number_id, access_token),
...     transaction_manager=SQLAlchemyTransactionManager(session),
... )
>>> output = await use_case.execute(DispatchCampaignInput(campaign_id="..."))
"""

from src.application.use_cases import (
    ActivateFlowUseCase,
    CampaignAction,
    ControlCampaignUseCase,
    CreateCampaignInput,
    CreateCampaignUseCase,
    DispatchCampaignInput,
    DispatchCampaignOutput,
    DispatchCampaignUseCase,
    GetTemplateSpecUseCase,
    RegisterTemplateInput,
    RegisterTemplateUseCase,
    ResendSkippedUseCase,
    RunFlowTestInput,
    RunFlowTestUseCase,
    SaveFlowInput,
    SaveFlowUseCase,
    ValidateFlowInput,
    ValidateFlowUseCase,
)

__all__ = [
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
    "ResendSkippedUseCase",
    "RunFlowTestInput",
    "RunFlowTestUseCase",
    "SaveFlowInput",
    "SaveFlowUseCase",
    "ValidateFlowInput",
    "ValidateFlowUseCase",
]
