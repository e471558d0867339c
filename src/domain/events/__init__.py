"""Domain Events

流程执行引擎通过 StreamWriter 输出的进度事件。
"""

from .flow_progress_events import FINISH_EVENT, NODE_STATUS_EVENT, FlowProgressEvent, StreamWriter

__all__ = [
    "FINISH_EVENT",
    "NODE_STATUS_EVENT",
    "FlowProgressEvent",
    "StreamWriter",
]
