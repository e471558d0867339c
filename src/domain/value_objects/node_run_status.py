"""NodeRunStatus 枚举 - 节点运行状态

业务定义：
- 单次运行中节点的瞬时状态，只用于进度展示
- 由执行引擎维护在 node_id → status 的旁路表中，不写回流程图
"""

from enum import Enum


class NodeRunStatus(str, Enum):
    """节点运行状态枚举"""

    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"
