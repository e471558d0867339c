"""连线路由 (Edge Router)

把节点的决策（出口 handle）转换成下一个节点 ID。
执行器只调用这里的查找函数，不自己遍历图。
"""

from src.domain.entities.flow import Flow
from src.domain.entities.flow_edge import FlowEdge

DEFAULT_HANDLE = "output"


def find_default_edge(flow: Flow, node_id: str) -> FlowEdge | None:
    """默认出边：handle=output → 没有 handle → 任意一条"""
    edges = flow.outgoing_edges(node_id)
    if not edges:
        return None

    for edge in edges:
        if edge.source_handle == DEFAULT_HANDLE:
            return edge
    for edge in edges:
        if not edge.source_handle:
            return edge
    return edges[0]


def find_edge_by_handle(flow: Flow, node_id: str, handle: str) -> FlowEdge | None:
    return next(
        (edge for edge in flow.outgoing_edges(node_id) if edge.source_handle == handle),
        None,
    )


def find_edge_by_handles(flow: Flow, node_id: str, handles: tuple[str, ...]) -> FlowEdge | None:
    """按候选 handle 顺序查找，第一个命中的出边"""
    for handle in handles:
        edge = find_edge_by_handle(flow, node_id, handle)
        if edge is not None:
            return edge
    return None


def find_unlabelled_edge(flow: Flow, node_id: str) -> FlowEdge | None:
    return next((edge for edge in flow.outgoing_edges(node_id) if not edge.source_handle), None)


def default_next_node_id(flow: Flow, node_id: str) -> str | None:
    edge = find_default_edge(flow, node_id)
    return edge.target if edge else None


def next_node_id_for_handle(flow: Flow, node_id: str, handle: str | None) -> str | None:
    """选中某个出口后的下一个节点（没有匹配的出边时返回 None）"""
    if not handle:
        return None
    edge = find_edge_by_handle(flow, node_id, handle)
    return edge.target if edge else None
