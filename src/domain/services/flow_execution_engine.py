"""流程执行引擎 (Flow Execution Engine)

业务定义：
- 从给定节点开始，每次执行一个节点，沿执行器选中的出边前进
- 执行器通过 StreamWriter 输出进度事件（processing / success / error / finish）
- 节点运行状态保存在引擎的旁路表中，不写回流程图

停止条件：
- 执行器返回 next_node_id = None：end 节点为 COMPLETED，其他节点为 DEAD_END
- stop_at_suspend=True 且当前节点是挂起点、并且没有消费外部输入：SUSPENDED
  （user_input 已被该节点用掉时继续前进）
- 同一次运行重复访问某个节点：CYCLE（安全网）
- 执行器抛出异常或节点类型未注册：FAILED
- 超过 max_steps：MAX_STEPS

发送是"每步最多一次"，引擎内部不重试。
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities.flow import Flow
from src.domain.entities.flow_node import FlowNode
from src.domain.events.flow_progress_events import FlowProgressEvent, StreamWriter
from src.domain.exceptions import FlowExecutionError
from src.domain.ports.node_executor import ExecutionContext, NodeExecutionResult
from src.domain.services.node_type_registry import NodeTypeRegistry
from src.domain.value_objects.flow_run_status import FlowRunStatus
from src.domain.value_objects.node_run_status import NodeRunStatus
from src.domain.value_objects.node_type import FlowNodeType

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100


@dataclass
class FlowRunResult:
    """一次运行的结果

    属性：
        status: 结束原因
        final_result: 最后一个执行成功的节点的结果
        last_node_id: 最后访问的节点
        nodes_executed: 执行成功的节点数
        messages_sent: 发送的消息数
        node_statuses: node_id → 运行状态（旁路表）
        executed_node_ids: 按顺序执行过的节点
        error: 错误信息（FAILED 时）
    """

    status: FlowRunStatus
    final_result: dict[str, Any] | None = None
    last_node_id: str | None = None
    nodes_executed: int = 0
    messages_sent: int = 0
    node_statuses: dict[str, NodeRunStatus] = field(default_factory=dict)
    executed_node_ids: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in (
            FlowRunStatus.COMPLETED,
            FlowRunStatus.SUSPENDED,
            FlowRunStatus.DEAD_END,
        )


def _discard(event: FlowProgressEvent) -> None:
    pass


class FlowExecutionEngine:
    """流程执行引擎

    使用示例：
        engine = FlowExecutionEngine(registry)
        result = await engine.run(flow, writer=events.append)
    """

    def __init__(self, registry: NodeTypeRegistry, max_steps: int = DEFAULT_MAX_STEPS):
        self.registry = registry
        self.max_steps = max_steps

    async def run(
        self,
        flow: Flow,
        start_node_id: str | None = None,
        writer: StreamWriter | None = None,
        context: ExecutionContext | None = None,
        stop_at_suspend: bool = False,
    ) -> FlowRunResult:
        """运行流程

        参数：
            flow: 流程
            start_node_id: 起始节点（默认 start 节点；恢复运行时传入挂起节点之后的节点）
            writer: 进度事件输出
            context: 执行上下文
            stop_at_suspend: 是否在挂起点停下（交互式测试运行）

        返回：
            FlowRunResult

        异常：
            FlowExecutionError: 流程没有 start 节点且未指定起始节点
        """
        context = context or ExecutionContext()
        result = FlowRunResult(status=FlowRunStatus.COMPLETED)
        emit = self._tracking_writer(writer or _discard, result)

        current_id = start_node_id
        if current_id is None:
            start = flow.start_node()
            if start is None:
                raise FlowExecutionError("", "流程没有 start 节点")
            current_id = start.id

        visited: set[str] = set()

        while current_id is not None:
            if current_id in visited:
                logger.warning(f"检测到重复访问节点，停止运行: {current_id}")
                result.status = FlowRunStatus.CYCLE
                break

            if len(visited) >= self.max_steps:
                logger.warning(f"超过最大步数 {self.max_steps}，停止运行")
                result.status = FlowRunStatus.MAX_STEPS
                break

            node = flow.get_node(current_id)
            if node is None:
                result.status = FlowRunStatus.FAILED
                result.error = f"节点不存在: {current_id}"
                break

            visited.add(current_id)
            result.last_node_id = node.id

            had_input = context.user_input is not None
            outcome = await self._execute_node(node, flow, emit, context, result)
            if outcome is None:
                result.status = FlowRunStatus.FAILED
                break

            result.nodes_executed += 1
            result.executed_node_ids.append(node.id)
            if outcome.result is not None:
                result.final_result = outcome.result

            consumed_input = had_input and context.user_input is None
            if stop_at_suspend and not consumed_input and self.registry.is_suspend_point(node):
                result.status = FlowRunStatus.SUSPENDED
                break

            if outcome.next_node_id is None:
                result.status = (
                    FlowRunStatus.COMPLETED if node.type == FlowNodeType.END else FlowRunStatus.DEAD_END
                )
                break

            current_id = outcome.next_node_id

        result.messages_sent = context.messages_sent
        logger.info(
            f"流程运行结束: flow={flow.id}, status={result.status.value}, "
            f"nodes={result.nodes_executed}, messages={result.messages_sent}"
        )
        return result

    async def _execute_node(
        self,
        node: FlowNode,
        flow: Flow,
        emit: StreamWriter,
        context: ExecutionContext,
        result: FlowRunResult,
    ) -> NodeExecutionResult | None:
        definition = self.registry.get(node.type)
        if definition is None:
            result.error = f"未注册的节点类型: {node.type.value}"
            emit(
                FlowProgressEvent.node_status(
                    node.id, node.type.value, NodeRunStatus.ERROR, result.error
                )
            )
            return None

        try:
            return await definition.executor.execute(node, flow, emit, context)
        except FlowExecutionError as exc:
            result.error = str(exc)
            if result.node_statuses.get(node.id) != NodeRunStatus.ERROR:
                emit(
                    FlowProgressEvent.node_status(
                        node.id, node.type.value, NodeRunStatus.ERROR, result.error
                    )
                )
            return None
        except Exception as exc:
            logger.exception(f"节点执行异常: {node.id}")
            result.error = str(exc)
            emit(
                FlowProgressEvent.node_status(
                    node.id, node.type.value, NodeRunStatus.ERROR, result.error
                )
            )
            return None

    @staticmethod
    def _tracking_writer(writer: StreamWriter, result: FlowRunResult) -> StreamWriter:
        """包装 writer：转发事件的同时维护 node_statuses 旁路表"""

        def emit(event: FlowProgressEvent) -> None:
            if event.status is not None:
                result.node_statuses[event.node_id] = event.status
            writer(event)

        return emit
