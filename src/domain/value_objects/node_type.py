"""FlowNodeType 枚举 - 流程节点类型

业务定义：
- FlowNodeType 是节点的判别标签（discriminated tag）
- 每种类型在 NodeTypeRegistry 中对应一组能力：校验规则、执行器、是否挂起

设计原则：
- 使用枚举确保类型安全
- 继承 str 方便序列化（编辑器 JSON 中直接是字符串）
"""

from enum import Enum


class FlowNodeType(str, Enum):
    """流程节点类型枚举

    节点分组：
    - 控制节点：START、END、CONDITION、DELAY、NOTE
    - 消息节点：MESSAGE、IMAGE、VIDEO、AUDIO、DOCUMENT、TEMPLATE
    - 交互节点（等待用户输入）：BUTTONS、LIST、MENU、INPUT
    """

    # 控制节点
    START = "start"
    END = "end"
    CONDITION = "condition"
    DELAY = "delay"
    NOTE = "note"

    # 消息节点
    MESSAGE = "message"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    DOCUMENT = "document"
    TEMPLATE = "template"

    # 交互节点
    BUTTONS = "buttons"
    LIST = "list"
    MENU = "menu"
    INPUT = "input"

    @classmethod
    def media_types(cls) -> frozenset["FlowNodeType"]:
        """媒体消息节点类型"""
        return frozenset({cls.IMAGE, cls.VIDEO, cls.AUDIO, cls.DOCUMENT})
