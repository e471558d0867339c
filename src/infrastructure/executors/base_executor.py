"""Base Executor（基础执行器）

Infrastructure 层：基础节点执行器和发送类执行器的公共基类

包括：
- StartExecutor: 开始节点（不输出事件，沿默认出边前进）
- EndExecutor: 结束节点（输出 finish，终止运行，不覆盖上一个节点的结果）
- NoteExecutor: 注释节点（直接通过）
- SendingExecutor: 通过 MessageSender 发送消息的执行器基类
"""

import logging
from typing import Any

from src.domain.entities.flow import Flow
from src.domain.entities.flow_node import FlowNode
from src.domain.events.flow_progress_events import FlowProgressEvent, StreamWriter
from src.domain.exceptions import FlowExecutionError
from src.domain.ports.message_sender import MessageSender
from src.domain.ports.node_executor import ExecutionContext, NodeExecutionResult, NodeExecutor
from src.domain.services.edge_router import default_next_node_id
from src.domain.value_objects.node_run_status import NodeRunStatus

logger = logging.getLogger(__name__)


def emit_status(
    writer: StreamWriter, node: FlowNode, status: NodeRunStatus, error: str | None = None
) -> None:
    writer(FlowProgressEvent.node_status(node.id, node.type.value, status, error))


class StartExecutor(NodeExecutor):
    """Start 节点执行器"""

    async def execute(
        self, node: FlowNode, flow: Flow, writer: StreamWriter, context: ExecutionContext
    ) -> NodeExecutionResult:
        return NodeExecutionResult(result=None, next_node_id=default_next_node_id(flow, node.id))


class EndExecutor(NodeExecutor):
    """End 节点执行器"""

    async def execute(
        self, node: FlowNode, flow: Flow, writer: StreamWriter, context: ExecutionContext
    ) -> NodeExecutionResult:
        writer(FlowProgressEvent.finish(node.id))
        return NodeExecutionResult(result=None, next_node_id=None)


class NoteExecutor(NodeExecutor):
    """Note 节点执行器（画布注释，不产生副作用）"""

    async def execute(
        self, node: FlowNode, flow: Flow, writer: StreamWriter, context: ExecutionContext
    ) -> NodeExecutionResult:
        return NodeExecutionResult(result=None, next_node_id=default_next_node_id(flow, node.id))


class SendingExecutor(NodeExecutor):
    """发送类执行器基类

    子类实现 build_payload() 和 route()；基类负责：
    - 输出 processing / success / error 事件
    - 调用 MessageSender（每步最多一次，不重试）
    - 统计 context.messages_sent
    """

    def __init__(self, sender: MessageSender):
        self.sender = sender

    def build_payload(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        raise NotImplementedError

    def describe(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        """节点结果（发送成功后返回给引擎）"""
        return {}

    def route(self, node: FlowNode, flow: Flow, context: ExecutionContext) -> str | None:
        return default_next_node_id(flow, node.id)

    async def execute(
        self, node: FlowNode, flow: Flow, writer: StreamWriter, context: ExecutionContext
    ) -> NodeExecutionResult:
        emit_status(writer, node, NodeRunStatus.PROCESSING)

        try:
            payload = self.build_payload(node, context)
            result = await self.sender.send(payload)
        except FlowExecutionError as exc:
            emit_status(writer, node, NodeRunStatus.ERROR, str(exc))
            raise

        if not result.success:
            message = result.error_message or "发送失败"
            logger.warning(f"节点发送失败: node={node.id}, error={message}")
            emit_status(writer, node, NodeRunStatus.ERROR, message)
            raise FlowExecutionError(node.id, message)

        context.messages_sent += 1
        outcome = {**self.describe(node, context), "messageId": result.message_id}
        next_node_id = self.route(node, flow, context)

        emit_status(writer, node, NodeRunStatus.SUCCESS)
        return NodeExecutionResult(result=outcome, next_node_id=next_node_id)
