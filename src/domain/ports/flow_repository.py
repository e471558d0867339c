"""FlowRepository Port - 定义 Flow 聚合的持久化接口

设计原则：
- 使用 Protocol（结构化子类型，不需要显式继承）
- 只定义领域层需要的方法
"""

from typing import Protocol

from src.domain.entities.flow import Flow


class FlowRepository(Protocol):
    """Flow 仓储接口

    方法命名规范：
    - get_by_id(): 不存在抛 NotFoundError
    - find_by_id(): 不存在返回 None
    """

    def save(self, flow: Flow) -> None:
        """保存 Flow（新增或更新，节点和连线整体替换）"""
        ...

    def get_by_id(self, flow_id: str) -> Flow:
        """根据 ID 获取 Flow

        抛出：
            NotFoundError: 当 Flow 不存在时
        """
        ...

    def find_by_id(self, flow_id: str) -> Flow | None: ...

    def find_all(self) -> list[Flow]: ...

    def delete(self, flow_id: str) -> None: ...
