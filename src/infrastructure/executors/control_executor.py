"""Control Executors（控制执行器）

Infrastructure 层：不发送消息的控制节点执行器

包括：
- ConditionExecutor: 按运行变量求值，选择 true/false 出口
- DelayExecutor: 等待配置的时长（测试运行注入零等待）
"""

import asyncio

from src.domain.entities.flow import Flow
from src.domain.entities.flow_node import FlowNode
from src.domain.events.flow_progress_events import StreamWriter
from src.domain.exceptions import FlowExecutionError
from src.domain.ports.node_executor import ExecutionContext, NodeExecutionResult, NodeExecutor
from src.domain.services.condition_evaluator import evaluate_condition
from src.domain.services.edge_router import (
    default_next_node_id,
    find_edge_by_handles,
    find_unlabelled_edge,
)
from src.domain.services.node_validators import DELAY_UNITS, delay_seconds
from src.domain.value_objects.node_run_status import NodeRunStatus
from src.infrastructure.executors.base_executor import emit_status

TRUE_HANDLES = ("true", "yes", "sim")
FALSE_HANDLES = ("false", "no", "nao")

DELAY_UNIT_LABELS = {"seconds": "segundos", "minutes": "minutos", "hours": "horas"}


class ConditionExecutor(NodeExecutor):
    """条件节点执行器

    配置参数：
        variable: 运行变量名
        operator: equals / not_equals / contains / not_contains / greater / less / exists / not_exists
        value: 比较值

    出口选择：true/false → yes/no → sim/nao → 没有 handle 的出边
    """

    async def execute(
        self, node: FlowNode, flow: Flow, writer: StreamWriter, context: ExecutionContext
    ) -> NodeExecutionResult:
        emit_status(writer, node, NodeRunStatus.PROCESSING)

        try:
            outcome = evaluate_condition(
                node.data.get("variable") or "",
                node.data.get("operator") or "",
                node.data.get("value"),
                context.variables,
            )
        except ValueError as exc:
            emit_status(writer, node, NodeRunStatus.ERROR, str(exc))
            raise FlowExecutionError(node.id, str(exc)) from exc

        handles = TRUE_HANDLES if outcome else FALSE_HANDLES
        edge = find_edge_by_handles(flow, node.id, handles) or find_unlabelled_edge(flow, node.id)

        emit_status(writer, node, NodeRunStatus.SUCCESS)
        return NodeExecutionResult(
            result={"result": outcome},
            next_node_id=edge.target if edge else None,
        )


class DelayExecutor(NodeExecutor):
    """延时节点执行器

    配置参数：
        delaySeconds: 数量（整数，至少 1）
        delayType: seconds / minutes / hours
    """

    async def execute(
        self, node: FlowNode, flow: Flow, writer: StreamWriter, context: ExecutionContext
    ) -> NodeExecutionResult:
        emit_status(writer, node, NodeRunStatus.PROCESSING)

        total = delay_seconds(node)
        if total is None or total < 1:
            message = "延时配置无效"
            emit_status(writer, node, NodeRunStatus.ERROR, message)
            raise FlowExecutionError(node.id, message)

        sleep = context.sleep or asyncio.sleep
        await sleep(total)

        unit = node.data.get("delayType") or "seconds"
        amount = total // DELAY_UNITS[unit]
        emit_status(writer, node, NodeRunStatus.SUCCESS)
        return NodeExecutionResult(
            result={"text": f"[Aguardou {amount} {DELAY_UNIT_LABELS[unit]}]"},
            next_node_id=default_next_node_id(flow, node.id),
        )
