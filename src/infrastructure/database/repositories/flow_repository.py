"""SQLAlchemy Flow Repository 实现

职责：
1. 转换：领域实体 ⇄ ORM 模型（Assembler 方法）
2. 持久化：保存、查询、删除
3. 聚合根管理：级联保存/加载 FlowNode 和 FlowEdge
"""

from datetime import UTC

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.entities.flow import Flow
from src.domain.entities.flow_edge import FlowEdge
from src.domain.entities.flow_node import FlowNode
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.flow_status import FlowStatus
from src.domain.value_objects.node_type import FlowNodeType
from src.domain.value_objects.position import Position
from src.infrastructure.database.models import FlowEdgeModel, FlowModel, FlowNodeModel


class SQLAlchemyFlowRepository:
    """SQLAlchemy Flow Repository 实现

    实现领域层定义的 FlowRepository Port 接口（Protocol，不显式继承）。
    事务边界由调用者控制（session.commit()）。
    """

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: FlowModel) -> Flow:
        nodes = [
            FlowNode(
                id=node_model.id,
                type=FlowNodeType(node_model.type),
                data=dict(node_model.data or {}),
                position=Position(x=node_model.position_x, y=node_model.position_y),
            )
            for node_model in model.nodes
        ]

        edges = [
            FlowEdge(
                id=edge_model.id,
                source=edge_model.source,
                target=edge_model.target,
                source_handle=edge_model.source_handle,
            )
            for edge_model in model.edges
        ]

        return Flow(
            id=model.id,
            name=model.name,
            nodes=nodes,
            edges=edges,
            status=FlowStatus(model.status),
            created_at=model.created_at.replace(tzinfo=UTC),
            updated_at=model.updated_at.replace(tzinfo=UTC),
        )

    def _to_model(self, entity: Flow) -> FlowModel:
        model = FlowModel(
            id=entity.id,
            name=entity.name,
            status=entity.status.value,
            created_at=entity.created_at.replace(tzinfo=None),
            updated_at=entity.updated_at.replace(tzinfo=None),
        )

        model.nodes = [
            FlowNodeModel(
                flow_id=entity.id,
                id=node.id,
                type=node.type.value,
                data=node.structural_data(),
                position_x=node.position.x,
                position_y=node.position.y,
                position_index=index,
            )
            for index, node in enumerate(entity.nodes)
        ]

        model.edges = [
            FlowEdgeModel(
                flow_id=entity.id,
                id=edge.id,
                source=edge.source,
                target=edge.target,
                source_handle=edge.source_handle,
                position_index=index,
            )
            for index, edge in enumerate(entity.edges)
        ]

        return model

    # ==================== Repository 方法 ====================

    def save(self, flow: Flow) -> None:
        """保存 Flow（新增或更新）

        使用 merge()：节点和连线整体替换（delete-orphan 删除不再存在的行）。
        运行状态等展示数据不持久化。
        """
        self.session.merge(self._to_model(flow))

    def get_by_id(self, flow_id: str) -> Flow:
        """根据 ID 获取 Flow

        抛出：
            NotFoundError: 当 Flow 不存在时
        """
        flow = self.find_by_id(flow_id)
        if flow is None:
            raise NotFoundError(entity_type="Flow", entity_id=flow_id)
        return flow

    def find_by_id(self, flow_id: str) -> Flow | None:
        stmt = select(FlowModel).where(FlowModel.id == flow_id)
        model = self.session.scalars(stmt).first()
        return self._to_entity(model) if model is not None else None

    def find_all(self) -> list[Flow]:
        stmt = select(FlowModel).order_by(FlowModel.created_at.desc())
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def delete(self, flow_id: str) -> None:
        """删除 Flow（幂等，节点和连线级联删除）"""
        model = self.session.get(FlowModel, flow_id)
        if model is not None:
            self.session.delete(model)
