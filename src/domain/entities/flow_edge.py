"""FlowEdge 实体 - 流程图中的连线

业务定义：
- FlowEdge 连接两个节点，决定执行顺序
- source_handle 区分同一个节点的多个出口（每个按钮/菜单选项一个出口，
  条件节点的 true/false 出口）
- 运行时每一步最多选中一条出边
"""

from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError


@dataclass
class FlowEdge:
    """FlowEdge 实体

    属性说明：
    - id: 唯一标识符
    - source: 源节点 ID
    - target: 目标节点 ID
    - source_handle: 源节点出口标识（可选）
    """

    id: str
    source: str
    target: str
    source_handle: str | None = None

    @classmethod
    def create(
        cls,
        source: str,
        target: str,
        source_handle: str | None = None,
        edge_id: str | None = None,
    ) -> "FlowEdge":
        """创建 FlowEdge 的工厂方法

        抛出：
            DomainError: 当节点 ID 为空时
        """
        # 验证业务规则
        if not source or not source.strip():
            raise DomainError("source 不能为空")

        if not target or not target.strip():
            raise DomainError("target 不能为空")

        handle = source_handle.strip() if source_handle and source_handle.strip() else None

        return cls(
            id=edge_id or f"edge_{uuid4().hex[:8]}",
            source=source.strip(),
            target=target.strip(),
            source_handle=handle,
        )

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FlowEdge":
        """从编辑器 JSON 创建连线（{id, source, target, sourceHandle}）"""
        return cls.create(
            source=raw.get("source", ""),
            target=raw.get("target", ""),
            source_handle=raw.get("sourceHandle", raw.get("source_handle")),
            edge_id=raw.get("id"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "source": self.source, "target": self.target}
        if self.source_handle:
            data["sourceHandle"] = self.source_handle
        return data
