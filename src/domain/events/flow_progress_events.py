"""流程进度事件 (Flow Progress Events)

执行引擎通过 StreamWriter 输出的有序事件序列，供 UI 或日志消费：
- 节点状态事件：{nodeId, nodeType, status: processing|success|error, error?}
- 结束事件：到达 end 节点时输出一次 finish
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.domain.value_objects.node_run_status import NodeRunStatus

NODE_STATUS_EVENT = "node-status"
FINISH_EVENT = "finish"


@dataclass(frozen=True)
class FlowProgressEvent:
    """流程进度事件

    属性：
        type: node-status / finish
        node_id: 节点 ID
        node_type: 节点类型
        status: 节点状态（finish 事件为 None）
        error: 错误信息（status=error 时）
    """

    type: str
    node_id: str
    node_type: str
    status: NodeRunStatus | None = None
    error: str | None = None

    @classmethod
    def node_status(
        cls, node_id: str, node_type: str, status: NodeRunStatus, error: str | None = None
    ) -> "FlowProgressEvent":
        return cls(NODE_STATUS_EVENT, node_id, node_type, status, error)

    @classmethod
    def finish(cls, node_id: str) -> "FlowProgressEvent":
        return cls(FINISH_EVENT, node_id, "end")

    @property
    def label(self) -> str:
        """简短标签，如 message:processing、finish"""
        if self.type == FINISH_EVENT:
            return FINISH_EVENT
        return f"{self.node_type}:{self.status.value if self.status else ''}"

    def to_dict(self) -> dict[str, Any]:
        if self.type == FINISH_EVENT:
            return {"type": FINISH_EVENT, "nodeId": self.node_id}
        data: dict[str, Any] = {
            "type": self.type,
            "nodeId": self.node_id,
            "nodeType": self.node_type,
            "status": self.status.value if self.status else None,
        }
        if self.error:
            data["error"] = self.error
        return data


StreamWriter = Callable[[FlowProgressEvent], None]
