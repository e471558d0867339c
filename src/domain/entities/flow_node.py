"""FlowNode 实体 - 流程图中的节点

业务定义：
- FlowNode 是会话流程中的一个步骤（发消息、判断条件、等待输入……）
- type 是判别标签，data 是该类型专属的配置
- data 里可能带有 status / validationErrors，它们只是展示用的旁路数据，
  校验和执行都不读取

设计原则：
- 纯 Python 实现，不依赖任何框架（DDD 要求）
- 使用 dataclass 简化样板代码
- 通过工厂方法 create() 封装创建逻辑
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError
from src.domain.value_objects.node_type import FlowNodeType
from src.domain.value_objects.position import Position

# data 中只用于展示的键，不参与校验和执行
TRANSIENT_DATA_KEYS = frozenset({"status", "validationErrors"})


@dataclass
class FlowNode:
    """FlowNode 实体

    属性说明：
    - id: 唯一标识符（在同一个流程内唯一）
    - type: 节点类型标签
    - data: 节点配置（不同类型结构不同）
    - position: 画布坐标（核心逻辑忽略）
    """

    id: str
    type: FlowNodeType
    data: dict[str, Any] = field(default_factory=dict)
    position: Position = field(default_factory=Position)

    @classmethod
    def create(
        cls,
        type: FlowNodeType | str,
        data: dict[str, Any] | None = None,
        position: Position | None = None,
        node_id: str | None = None,
    ) -> "FlowNode":
        """创建 FlowNode 的工厂方法

        参数：
            type: 节点类型（枚举或字符串）
            data: 节点配置
            position: 画布坐标
            node_id: 指定 ID（编辑器已生成 ID 时使用）

        返回：
            FlowNode 实例

        抛出：
            DomainError: 节点类型未知或 node_id 为空白字符串时
        """
        node_type = cls._parse_type(type)

        if node_id is not None and not node_id.strip():
            raise DomainError("node_id 不能为空")

        return cls(
            id=node_id.strip() if node_id else f"node_{uuid4().hex[:8]}",
            type=node_type,
            data=dict(data or {}),
            position=position or Position(),
        )

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FlowNode":
        """从编辑器 JSON 创建节点（{id, type, position, data}）"""
        return cls.create(
            type=raw.get("type", ""),
            data=raw.get("data") or {},
            position=Position.from_dict(raw.get("position")),
            node_id=raw.get("id"),
        )

    @staticmethod
    def _parse_type(value: FlowNodeType | str) -> FlowNodeType:
        if isinstance(value, FlowNodeType):
            return value
        try:
            return FlowNodeType(value)
        except ValueError as exc:
            raise DomainError(f"未知的节点类型: {value}") from exc

    @property
    def label(self) -> str:
        """展示名称：data.label，没有时退回节点 ID"""
        return str(self.data.get("label") or self.id)

    def structural_data(self) -> dict[str, Any]:
        """去掉展示用旁路数据后的配置"""
        return {k: v for k, v in self.data.items() if k not in TRANSIENT_DATA_KEYS}

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "position": self.position.to_dict(),
            "data": dict(self.data),
        }
