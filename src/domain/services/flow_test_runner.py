"""交互式测试运行 (Flow Test Runner)

在编辑器里"试运行"一个流程：
- 发送到测试联系人，延时节点零等待
- 在第一个挂起点（菜单、按钮、列表、输入……）停下并报告部分执行结果
- 同一次运行内重复访问节点时停止
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities.flow import Flow
from src.domain.events.flow_progress_events import FlowProgressEvent
from src.domain.exceptions import DomainError
from src.domain.ports.node_executor import ExecutionContext
from src.domain.services.flow_execution_engine import FlowExecutionEngine
from src.domain.value_objects.flow_run_status import FlowRunStatus

logger = logging.getLogger(__name__)


async def _no_wait(seconds: float) -> None:
    return None


@dataclass
class FlowTestReport:
    """测试运行报告"""

    success: bool
    status: FlowRunStatus
    nodes_executed: int = 0
    messages_sent: int = 0
    stopped_at: str | None = None
    events: list[FlowProgressEvent] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status.value,
            "nodesExecuted": self.nodes_executed,
            "messagesSent": self.messages_sent,
            "stoppedAt": self.stopped_at,
            "events": [event.to_dict() for event in self.events],
            "errors": list(self.errors),
        }


class FlowTestRunner:
    def __init__(self, engine: FlowExecutionEngine):
        self.engine = engine

    async def run(
        self,
        flow: Flow,
        test_phone: str,
        contact_name: str = "Teste",
        user_input: str | None = None,
    ) -> FlowTestReport:
        """试运行流程

        抛出：
            DomainError: 流程为空或没有 start 节点
        """
        if not flow.nodes:
            raise DomainError("流程为空")

        start = flow.start_node()
        if start is None:
            raise DomainError("流程没有 start 节点")

        recipient = test_phone.strip().lstrip("+")
        context = ExecutionContext(
            recipient=recipient,
            variables={"contactName": contact_name, "contactPhone": recipient},
            user_input=user_input,
            sleep=_no_wait,
        )
        events: list[FlowProgressEvent] = []

        logger.info(f"开始测试运行: flow={flow.id}, to={recipient}")
        outcome = await self.engine.run(
            flow,
            start_node_id=start.id,
            writer=events.append,
            context=context,
            stop_at_suspend=True,
        )

        errors = [outcome.error] if outcome.error else []
        if outcome.status == FlowRunStatus.CYCLE:
            errors.append(f"检测到循环，停止于节点 {outcome.last_node_id}")

        return FlowTestReport(
            success=outcome.succeeded,
            status=outcome.status,
            nodes_executed=outcome.nodes_executed,
            messages_sent=outcome.messages_sent,
            stopped_at=outcome.last_node_id,
            events=events,
            errors=errors,
        )
