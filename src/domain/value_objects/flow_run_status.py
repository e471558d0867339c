"""FlowRunStatus 枚举 - 单次流程运行的结束原因"""

from enum import Enum


class FlowRunStatus(str, Enum):
    """流程运行结束原因

    - COMPLETED: 到达 end 节点
    - SUSPENDED: 交互式测试运行停在等待外部输入的节点
    - DEAD_END: 没有匹配的出边（不是错误）
    - FAILED: 执行器出错或节点类型未注册
    - CYCLE: 同一次运行中重复访问了某个节点
    - MAX_STEPS: 超过最大步数
    """

    COMPLETED = "completed"
    SUSPENDED = "suspended"
    DEAD_END = "dead_end"
    FAILED = "failed"
    CYCLE = "cycle"
    MAX_STEPS = "max_steps"
