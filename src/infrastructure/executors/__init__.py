"""Executors（执行器）

Infrastructure 层：节点执行器实现

导出所有执行器和注册中心工厂函数
"""

from src.domain.ports.message_sender import MessageSender
from src.domain.services import node_validators as rules
from src.domain.services.node_type_registry import (
    NodeTypeDefinition,
    NodeTypeRegistry,
    always_suspends,
    template_suspends,
)
from src.domain.value_objects.node_type import FlowNodeType
from src.infrastructure.executors.base_executor import EndExecutor, NoteExecutor, StartExecutor
from src.infrastructure.executors.control_executor import ConditionExecutor, DelayExecutor
from src.infrastructure.executors.interactive_executor import (
    ButtonsExecutor,
    InputExecutor,
    ListExecutor,
    MenuExecutor,
)
from src.infrastructure.executors.message_executor import (
    MediaExecutor,
    MessageExecutor,
    TemplateExecutor,
)

__all__ = [
    "StartExecutor",
    "EndExecutor",
    "NoteExecutor",
    "MessageExecutor",
    "MediaExecutor",
    "TemplateExecutor",
    "ButtonsExecutor",
    "ListExecutor",
    "MenuExecutor",
    "InputExecutor",
    "ConditionExecutor",
    "DelayExecutor",
    "create_node_type_registry",
]


def create_node_type_registry(sender: MessageSender) -> NodeTypeRegistry:
    """创建节点类型注册中心

    参数：
        sender: 承运方发送端口（WhatsAppCloudClient 或测试替身）

    返回：
        注册了全部节点类型的注册中心
    """
    registry = NodeTypeRegistry()

    # 控制节点
    registry.register(NodeTypeDefinition(FlowNodeType.START, StartExecutor()))
    registry.register(NodeTypeDefinition(FlowNodeType.END, EndExecutor()))
    registry.register(NodeTypeDefinition(FlowNodeType.NOTE, NoteExecutor()))
    registry.register(
        NodeTypeDefinition(
            FlowNodeType.CONDITION, ConditionExecutor(), validate=rules.validate_condition_node
        )
    )
    registry.register(
        NodeTypeDefinition(FlowNodeType.DELAY, DelayExecutor(), validate=rules.validate_delay_node)
    )

    # 消息节点
    registry.register(
        NodeTypeDefinition(
            FlowNodeType.MESSAGE, MessageExecutor(sender), validate=rules.validate_message_node
        )
    )
    media = MediaExecutor(sender)
    for media_type in FlowNodeType.media_types():
        registry.register(NodeTypeDefinition(media_type, media, validate=rules.validate_media_node))
    registry.register(
        NodeTypeDefinition(
            FlowNodeType.TEMPLATE,
            TemplateExecutor(sender),
            validate=rules.validate_template_node,
            suspends=template_suspends,
        )
    )

    # 交互节点（挂起点）
    registry.register(
        NodeTypeDefinition(
            FlowNodeType.BUTTONS,
            ButtonsExecutor(sender),
            validate=rules.validate_buttons_node,
            suspends=always_suspends,
        )
    )
    registry.register(
        NodeTypeDefinition(
            FlowNodeType.LIST,
            ListExecutor(sender),
            validate=rules.validate_list_node,
            suspends=always_suspends,
        )
    )
    registry.register(
        NodeTypeDefinition(
            FlowNodeType.MENU,
            MenuExecutor(sender),
            validate=rules.validate_menu_node,
            suspends=always_suspends,
        )
    )
    registry.register(
        NodeTypeDefinition(
            FlowNodeType.INPUT,
            InputExecutor(sender),
            validate=rules.validate_input_node,
            suspends=always_suspends,
        )
    )

    return registry
