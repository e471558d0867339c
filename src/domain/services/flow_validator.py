"""流程校验引擎 (Flow Validator)

业务定义：
- 中心校验：start 节点数量与连线、孤立节点、无效连线、缺少 end、无等待节点的环
- 节点级校验：通过 NodeTypeRegistry 分发给各类型的校验函数
- 结果：ValidationResult(errors, warnings)，valid = can_publish = 没有 error

设计原则：
- 纯函数：只依赖节点/连线的结构数据，重复调用结果相同
- 忽略 position、status、validationErrors 等展示数据
"""

import logging
from typing import Any

from src.domain.entities.flow_edge import FlowEdge
from src.domain.entities.flow_node import FlowNode
from src.domain.exceptions import DomainError
from src.domain.services.node_type_registry import NodeTypeRegistry, ValidationContext
from src.domain.value_objects.node_type import FlowNodeType
from src.domain.value_objects.validation_error import FlowValidationError, ValidationResult

logger = logging.getLogger(__name__)

# 环中至少包含一个这些类型的节点，才不会构成死循环
WAITING_NODE_TYPES = frozenset(
    {
        FlowNodeType.MENU,
        FlowNodeType.INPUT,
        FlowNodeType.BUTTONS,
        FlowNodeType.LIST,
        FlowNodeType.DELAY,
    }
)


class FlowValidator:
    """流程校验器

    使用示例：
        validator = FlowValidator(registry)
        result = validator.validate(flow.nodes, flow.edges)
        if not result.can_publish:
            ...
    """

    def __init__(self, registry: NodeTypeRegistry):
        self.registry = registry

    def validate(self, nodes: list[FlowNode], edges: list[FlowEdge]) -> ValidationResult:
        """校验整张图

        参数：
            nodes: 节点列表
            edges: 连线列表

        返回：
            ValidationResult
        """
        problems: list[FlowValidationError] = []
        problems.extend(self._check_structure(nodes, edges))
        problems.extend(self._check_nodes(nodes, edges))
        problems.extend(self._check_loops(nodes, edges))
        return self._result(problems)

    def validate_graph(
        self, raw_nodes: list[dict[str, Any]], raw_edges: list[dict[str, Any]]
    ) -> ValidationResult:
        """校验编辑器 JSON

        无法识别的节点类型作为 unknown-node-type 错误报告，其余节点照常校验。
        """
        unknown: list[FlowValidationError] = []
        nodes: list[FlowNode] = []
        for raw in raw_nodes:
            try:
                nodes.append(FlowNode.from_dict(raw))
            except DomainError as exc:
                unknown.append(
                    FlowValidationError.error("unknown-node-type", str(exc), node_id=raw.get("id"))
                )

        edges: list[FlowEdge] = []
        for raw in raw_edges:
            try:
                edges.append(FlowEdge.from_dict(raw))
            except DomainError as exc:
                unknown.append(
                    FlowValidationError.error("invalid-edge", str(exc), edge_id=raw.get("id"))
                )

        result = self.validate(nodes, edges)
        return self._result([*unknown, *result.errors, *result.warnings])

    # ==================== 中心校验 ====================

    def _check_structure(
        self, nodes: list[FlowNode], edges: list[FlowEdge]
    ) -> list[FlowValidationError]:
        problems: list[FlowValidationError] = []
        node_ids = {node.id for node in nodes}
        starts = [node for node in nodes if node.type == FlowNodeType.START]

        if not starts:
            problems.append(
                FlowValidationError.error("missing-start-node", "流程必须有一个 start 节点")
            )
        elif len(starts) > 1:
            for extra in starts[1:]:
                problems.append(
                    FlowValidationError.error(
                        "multiple-start-nodes", "流程只能有一个 start 节点", node_id=extra.id
                    )
                )

        for start in starts:
            if not any(edge.source == start.id for edge in edges):
                problems.append(
                    FlowValidationError.error(
                        "invalid-node-config", "start 节点必须连接到下一个节点", node_id=start.id
                    )
                )
            for edge in edges:
                if edge.target == start.id:
                    problems.append(
                        FlowValidationError.error(
                            "invalid-node-config",
                            "start 节点不能有入边",
                            node_id=start.id,
                            edge_id=edge.id,
                        )
                    )

        for edge in edges:
            if edge.source not in node_ids or edge.target not in node_ids:
                problems.append(
                    FlowValidationError.error(
                        "invalid-edge", "连线引用了不存在的节点", edge_id=edge.id
                    )
                )

        targets = {edge.target for edge in edges}
        for node in nodes:
            if node.type in (FlowNodeType.START, FlowNodeType.NOTE):
                continue
            if node.id not in targets:
                problems.append(
                    FlowValidationError.warning(
                        "disconnected-node", f"节点 \"{node.label}\" 没有入边", node_id=node.id
                    )
                )

        if nodes and not any(node.type == FlowNodeType.END for node in nodes):
            problems.append(
                FlowValidationError.warning("missing-end-node", "流程没有 end 节点")
            )

        return problems

    def _check_nodes(
        self, nodes: list[FlowNode], edges: list[FlowEdge]
    ) -> list[FlowValidationError]:
        context = ValidationContext(nodes=tuple(nodes), edges=tuple(edges))
        problems: list[FlowValidationError] = []

        for node in nodes:
            definition = self.registry.get(node.type)
            if definition is None:
                problems.append(
                    FlowValidationError.error(
                        "unknown-node-type", f"未注册的节点类型: {node.type.value}", node_id=node.id
                    )
                )
                continue
            problems.extend(definition.validate(node, context))

        return problems

    def _check_loops(
        self, nodes: list[FlowNode], edges: list[FlowEdge]
    ) -> list[FlowValidationError]:
        """从 start 深度优先搜索，报告不包含等待节点的环"""
        by_id = {node.id: node for node in nodes}
        start = next((node for node in nodes if node.type == FlowNodeType.START), None)
        if start is None:
            return []

        adjacency: dict[str, list[FlowEdge]] = {}
        for edge in edges:
            if edge.source in by_id and edge.target in by_id:
                adjacency.setdefault(edge.source, []).append(edge)

        problems: list[FlowValidationError] = []
        reported: set[str] = set()
        finished: set[str] = set()
        path: list[str] = []
        on_path: set[str] = set()

        def visit(node_id: str) -> None:
            path.append(node_id)
            on_path.add(node_id)

            for edge in adjacency.get(node_id, []):
                if edge.target in on_path:
                    cycle = path[path.index(edge.target):]
                    waits = any(by_id[n].type in WAITING_NODE_TYPES for n in cycle)
                    if not waits and edge.id not in reported:
                        reported.add(edge.id)
                        problems.append(
                            FlowValidationError.error(
                                "infinite-loop",
                                "检测到没有等待节点的循环，会导致无限执行",
                                node_id=edge.target,
                                edge_id=edge.id,
                            )
                        )
                elif edge.target not in finished:
                    visit(edge.target)

            path.pop()
            on_path.discard(node_id)
            finished.add(node_id)

        visit(start.id)
        return problems

    @staticmethod
    def _result(problems: list[FlowValidationError]) -> ValidationResult:
        errors = tuple(p for p in problems if p.is_error)
        warnings = tuple(p for p in problems if not p.is_error)
        logger.debug(f"流程校验完成: errors={len(errors)}, warnings={len(warnings)}")
        return ValidationResult(errors=errors, warnings=warnings)
