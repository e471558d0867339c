"""节点类型注册中心 (Node Type Registry)

业务定义：
- 每种节点类型对应一个 NodeTypeDefinition：校验规则、执行器、是否挂起
- 注册中心在进程启动时由 Infrastructure 层一次性填充
  （create_node_type_registry()），之后只读
- 校验引擎和执行引擎都通过注册中心按类型标签分发

核心概念：
- ValidationContext：校验时可见的整张图（节点 + 连线）
- NodeTypeDefinition：一种节点类型的全部能力
- NodeTypeRegistry：type → definition 映射
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from src.domain.entities.flow_edge import FlowEdge
from src.domain.entities.flow_node import FlowNode
from src.domain.ports.node_executor import NodeExecutor
from src.domain.value_objects.node_type import FlowNodeType
from src.domain.value_objects.validation_error import FlowValidationError


@dataclass(frozen=True)
class ValidationContext:
    """节点校验上下文"""

    nodes: tuple[FlowNode, ...] = ()
    edges: tuple[FlowEdge, ...] = ()

    def outgoing_edges(self, node_id: str) -> list[FlowEdge]:
        return [edge for edge in self.edges if edge.source == node_id]

    def incoming_edges(self, node_id: str) -> list[FlowEdge]:
        return [edge for edge in self.edges if edge.target == node_id]


NodeValidator = Callable[[FlowNode, ValidationContext], list[FlowValidationError]]
SuspendPredicate = Callable[[FlowNode], bool]


def _never(node: FlowNode) -> bool:
    return False


def _no_rules(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    return []


@dataclass(frozen=True)
class NodeTypeDefinition:
    """节点类型定义

    属性：
        type: 节点类型标签
        executor: 执行器
        validate: 节点级校验函数（默认没有规则）
        suspends: 是否在该节点挂起等待外部输入（交互式测试运行在此停下）
    """

    type: FlowNodeType
    executor: NodeExecutor
    validate: NodeValidator = field(default=_no_rules)
    suspends: SuspendPredicate = field(default=_never)


class NodeTypeRegistry:
    """节点类型注册中心

    使用示例：
        registry = NodeTypeRegistry()
        registry.register(NodeTypeDefinition(FlowNodeType.MESSAGE, MessageNodeExecutor(sender)))
        definition = registry.get("message")
    """

    def __init__(self) -> None:
        self._definitions: dict[FlowNodeType, NodeTypeDefinition] = {}

    def register(self, definition: NodeTypeDefinition) -> None:
        """注册节点类型（同一类型重复注册时覆盖）"""
        self._definitions[definition.type] = definition

    def get(self, node_type: FlowNodeType | str) -> NodeTypeDefinition | None:
        try:
            key = FlowNodeType(node_type)
        except ValueError:
            return None
        return self._definitions.get(key)

    def has(self, node_type: FlowNodeType | str) -> bool:
        return self.get(node_type) is not None

    def types(self) -> list[FlowNodeType]:
        return list(self._definitions)

    def is_suspend_point(self, node: FlowNode) -> bool:
        definition = self.get(node.type)
        return definition is not None and definition.suspends(node)


def always_suspends(node: FlowNode) -> bool:
    return True


def template_suspends(node: FlowNode) -> bool:
    """模板节点带 QUICK_REPLY 按钮时需要等待用户点击"""
    for button in node.data.get("buttons") or []:
        if str(button.get("type", "")).upper() == "QUICK_REPLY":
            return True
    return False
