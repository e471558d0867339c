"""Flow 实体 - 会话流程聚合根

业务定义：
- Flow 是由 FlowNode 和 FlowEdge 组成的有向图
- 恰好一个 start 节点（由校验引擎检查，不在构造时强制）
- start 节点不可删除
- 支持编辑器的增删改（结构性修改后需要重新校验）

设计原则：
- 纯 Python 实现，不依赖任何框架（DDD 要求）
- 通过工厂方法 create() 封装创建逻辑
- 维护聚合根不变式（节点 ID 唯一、连线引用的节点存在）
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.entities.flow_edge import FlowEdge
from src.domain.entities.flow_node import FlowNode
from src.domain.exceptions import DomainError
from src.domain.value_objects.flow_status import FlowStatus
from src.domain.value_objects.node_type import FlowNodeType


@dataclass
class Flow:
    """Flow 实体（聚合根）

    属性说明：
    - id: 唯一标识符（flow_ 前缀）
    - name: 流程名称
    - nodes: 有序节点列表
    - edges: 连线列表
    - status: 流程状态（DRAFT/ACTIVE/INACTIVE）
    - created_at / updated_at: 时间戳
    """

    id: str
    name: str
    nodes: list[FlowNode] = field(default_factory=list)
    edges: list[FlowEdge] = field(default_factory=list)
    status: FlowStatus = FlowStatus.DRAFT
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        name: str,
        nodes: list[FlowNode] | None = None,
        edges: list[FlowEdge] | None = None,
    ) -> "Flow":
        """创建 Flow 的工厂方法

        参数：
            name: 流程名称（必需）
            nodes: 节点列表
            edges: 连线列表

        返回：
            Flow 实例

        抛出：
            DomainError: name 为空或节点 ID 重复时
        """
        # 验证业务规则
        if not name or not name.strip():
            raise DomainError("name 不能为空")

        nodes = list(nodes or [])
        seen: set[str] = set()
        for node in nodes:
            if node.id in seen:
                raise DomainError(f"节点 ID 重复: {node.id}")
            seen.add(node.id)

        return cls(
            id=f"flow_{uuid4().hex[:8]}",
            name=name.strip(),
            nodes=nodes,
            edges=list(edges or []),
        )

    @classmethod
    def from_graph(
        cls,
        nodes: list[dict[str, Any]],
        edges: list[dict[str, Any]],
        name: str = "Fluxo",
    ) -> "Flow":
        """从编辑器 JSON（nodes/edges 列表）构造流程"""
        return cls.create(
            name=name,
            nodes=[FlowNode.from_dict(n) for n in nodes],
            edges=[FlowEdge.from_dict(e) for e in edges],
        )

    # ==================== 查询 ====================

    def get_node(self, node_id: str) -> FlowNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)

    def start_nodes(self) -> list[FlowNode]:
        return [node for node in self.nodes if node.type == FlowNodeType.START]

    def start_node(self) -> FlowNode | None:
        """返回唯一的 start 节点（没有时返回 None）"""
        starts = self.start_nodes()
        return starts[0] if starts else None

    def outgoing_edges(self, node_id: str) -> list[FlowEdge]:
        return [edge for edge in self.edges if edge.source == node_id]

    def incoming_edges(self, node_id: str) -> list[FlowEdge]:
        return [edge for edge in self.edges if edge.target == node_id]

    # ==================== 编辑 ====================

    def add_node(self, node: FlowNode) -> None:
        """添加节点

        抛出：
            DomainError: 节点 ID 已存在时
        """
        if self.get_node(node.id) is not None:
            raise DomainError(f"节点 ID 重复: {node.id}")
        self.nodes.append(node)
        self.updated_at = datetime.now(UTC)

    def remove_node(self, node_id: str) -> None:
        """删除节点及其相关连线

        抛出：
            DomainError: 删除 start 节点时
        """
        node = self.get_node(node_id)
        if node is None:
            return
        if node.type == FlowNodeType.START:
            raise DomainError("start 节点不能删除")

        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]
        self.updated_at = datetime.now(UTC)

    def update_node_data(self, node_id: str, data: dict[str, Any]) -> None:
        """更新节点配置

        抛出：
            DomainError: 节点不存在时
        """
        node = self.get_node(node_id)
        if node is None:
            raise DomainError(f"节点不存在: {node_id}")
        node.data = dict(data)
        self.updated_at = datetime.now(UTC)

    def add_edge(self, edge: FlowEdge) -> None:
        """添加连线

        抛出：
            DomainError: 连线引用的节点不存在时
        """
        if self.get_node(edge.source) is None:
            raise DomainError(f"节点不存在: {edge.source}")
        if self.get_node(edge.target) is None:
            raise DomainError(f"节点不存在: {edge.target}")

        self.edges.append(edge)
        self.updated_at = datetime.now(UTC)

    def remove_edge(self, edge_id: str) -> None:
        self.edges = [edge for edge in self.edges if edge.id != edge_id]
        self.updated_at = datetime.now(UTC)

    def activate(self) -> None:
        self.status = FlowStatus.ACTIVE
        self.updated_at = datetime.now(UTC)

    def deactivate(self) -> None:
        self.status = FlowStatus.INACTIVE
        self.updated_at = datetime.now(UTC)

    def to_graph(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
