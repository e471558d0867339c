"""NodeExecutor Port（节点执行器端口）

Domain 层端口：定义节点执行器接口

为什么是 Port？
- 节点执行需要外部依赖（承运方 API 客户端）
- Domain 层不能直接依赖这些实现
- 通过 Port 定义接口，Infrastructure 层实现
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities.flow import Flow
from src.domain.entities.flow_node import FlowNode
from src.domain.events.flow_progress_events import StreamWriter


@dataclass
class ExecutionContext:
    """单次运行的执行上下文

    属性：
        recipient: 收件人电话（纯数字）
        variables: 运行变量（contactName、contactPhone、input 节点收集的值……）
        user_input: 外部输入（菜单/按钮选择的选项 ID 或 input 节点的回答）
        sleep: 延时函数（测试运行时注入零等待）
        messages_sent: 本次运行已发送的消息数
    """

    recipient: str = ""
    variables: dict[str, str] = field(default_factory=dict)
    user_input: str | None = None
    sleep: Callable[[float], Awaitable[None]] | None = None
    messages_sent: int = 0


@dataclass(frozen=True)
class NodeExecutionResult:
    """节点执行结果

    属性：
        result: 节点结果（如 {"text": "Oi"}）
        next_node_id: 下一个节点 ID；None 表示终止或没有匹配的出边
    """

    result: dict[str, Any] | None = None
    next_node_id: str | None = None


class NodeExecutor(ABC):
    """节点执行器接口

    每种节点类型都有对应的执行器实现。执行器自己输出进度事件，
    并通过 edge_router 把决策（出口 handle）转换成下一个节点。
    """

    @abstractmethod
    async def execute(
        self,
        node: FlowNode,
        flow: Flow,
        writer: StreamWriter,
        context: ExecutionContext,
    ) -> NodeExecutionResult:
        """执行节点

        参数：
            node: 节点实体
            flow: 所属流程（用于查找出边）
            writer: 进度事件输出
            context: 执行上下文

        返回：
            NodeExecutionResult

        异常：
            FlowExecutionError: 执行失败（如消息发送失败）
        """
        pass
