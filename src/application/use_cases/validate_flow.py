"""ValidateFlowUseCase - 流程校验用例

业务场景：
- 编辑器每次保存前调用，把问题高亮到对应的节点和连线上
- 可以校验未保存的图（nodes/edges），也可以校验已保存的流程（flow_id）

校验是纯函数：同一张图多次校验结果相同，不修改图本身。
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from src.domain.ports.flow_repository import FlowRepository
from src.domain.services.flow_validator import FlowValidator
from src.domain.value_objects.validation_error import ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class ValidateFlowInput:
    """校验输入

    属性说明：
    - flow_id: 已保存流程的 ID（与 nodes/edges 二选一）
    - nodes / edges: 编辑器 JSON
    """

    flow_id: str | None = None
    nodes: list[dict[str, Any]] = field(default_factory=list)
    edges: list[dict[str, Any]] = field(default_factory=list)


class ValidateFlowUseCase:
    def __init__(self, validator: FlowValidator, flow_repository: FlowRepository | None = None):
        self.validator = validator
        self.flow_repository = flow_repository

    def execute(self, input_data: ValidateFlowInput) -> ValidationResult:
        """执行校验

        抛出：
            NotFoundError: flow_id 对应的流程不存在
        """
        if input_data.flow_id and self.flow_repository is not None:
            flow = self.flow_repository.get_by_id(input_data.flow_id)
            result = self.validator.validate(flow.nodes, flow.edges)
        else:
            result = self.validator.validate_graph(input_data.nodes, input_data.edges)

        logger.debug(
            f"流程校验完成: errors={len(result.errors)}, warnings={len(result.warnings)}"
        )
        return result
