"""SaveFlowUseCase / ActivateFlowUseCase - 流程保存与发布

业务场景：
- 编辑器保存整张图（新建或覆盖已有流程，节点和连线整体替换）
- 发布（activate）前必须通过校验：有任何 error 级别问题时拒绝
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities.flow import Flow
from src.domain.exceptions import DomainError
from src.domain.ports.flow_repository import FlowRepository
from src.domain.services.flow_validator import FlowValidator
from src.domain.value_objects.validation_error import ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class SaveFlowInput:
    """保存流程的输入参数

    属性说明：
    - name: 流程名称（必填）
    - nodes / edges: 编辑器 JSON
    - flow_id: 覆盖已有流程时传入
    """

    name: str
    nodes: list[dict[str, Any]] = field(default_factory=list)
    edges: list[dict[str, Any]] = field(default_factory=list)
    flow_id: str | None = None


class SaveFlowUseCase:
    def __init__(self, flow_repository: FlowRepository):
        self.flow_repository = flow_repository

    def execute(self, input_data: SaveFlowInput) -> Flow:
        """保存流程

        抛出：
            DomainError: 名称为空、节点类型未知或节点 ID 重复
        """
        flow = Flow.from_graph(input_data.nodes, input_data.edges, name=input_data.name)

        if input_data.flow_id:
            existing = self.flow_repository.find_by_id(input_data.flow_id)
            flow.id = input_data.flow_id
            if existing is not None:
                flow.created_at = existing.created_at
                flow.status = existing.status

        self.flow_repository.save(flow)
        logger.info(f"流程已保存: flow={flow.id}, nodes={len(flow.nodes)}, edges={len(flow.edges)}")
        return flow


@dataclass
class ActivateFlowOutput:
    flow: Flow
    validation: ValidationResult


class ActivateFlowUseCase:
    """发布流程（只有 can_publish 为真时才发布）"""

    def __init__(self, flow_repository: FlowRepository, validator: FlowValidator):
        self.flow_repository = flow_repository
        self.validator = validator

    def execute(self, flow_id: str) -> ActivateFlowOutput:
        """发布

        抛出：
            NotFoundError: 流程不存在
            DomainError: 校验存在 error 级别问题
        """
        flow = self.flow_repository.get_by_id(flow_id)
        result = self.validator.validate(flow.nodes, flow.edges)

        if not result.can_publish:
            messages = "; ".join(e.message for e in result.errors)
            raise DomainError(f"流程存在校验错误，不能发布: {messages}")

        flow.activate()
        self.flow_repository.save(flow)
        logger.info(f"流程已发布: flow={flow.id}")
        return ActivateFlowOutput(flow=flow, validation=result)
