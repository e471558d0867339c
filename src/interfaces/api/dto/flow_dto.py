"""Flow DTO - 流程编辑器数据传输对象

节点和连线保持编辑器 JSON 原样（camelCase、sourceHandle），
由领域层 FlowNode.from_dict() / FlowEdge.from_dict() 解析。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities.flow import Flow


class FlowGraphRequest(BaseModel):
    """未保存的图（校验、测试运行使用）"""

    nodes: list[dict[str, Any]] = Field(default_factory=list, description="节点列表")
    edges: list[dict[str, Any]] = Field(default_factory=list, description="连线列表")


class SaveFlowRequest(FlowGraphRequest):
    name: str = Field(..., description="流程名称", min_length=1, max_length=255)
    id: str | None = Field(default=None, description="覆盖已有流程时传入")


class FlowTestRequest(FlowGraphRequest):
    """交互式测试运行请求"""

    test_phone: str = Field(..., alias="testPhone", min_length=1, description="测试号码")
    flow_id: str | None = Field(default=None, alias="flowId", description="已保存流程 ID")
    contact_name: str = Field(default="Teste", alias="contactName", description="测试联系人名称")
    user_input: str | None = Field(default=None, alias="userInput", description="模拟的用户回复")

    model_config = ConfigDict(populate_by_name=True)


class FlowResponse(BaseModel):
    id: str
    name: str
    status: str
    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, flow: Flow) -> "FlowResponse":
        graph = flow.to_graph()
        return cls(
            id=flow.id,
            name=flow.name,
            status=flow.status.value,
            nodes=graph["nodes"],
            edges=graph["edges"],
            created_at=flow.created_at,
            updated_at=flow.updated_at,
        )
