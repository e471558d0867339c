"""FlowStatus 枚举 - 流程状态

状态转换：
DRAFT → ACTIVE（仅当校验结果 can_publish 为 True）
ACTIVE → INACTIVE → ACTIVE
"""

from enum import Enum


class FlowStatus(str, Enum):
    """流程状态枚举

    状态说明：
    - DRAFT: 草稿（可编辑，不响应入站事件）
    - ACTIVE: 已激活（响应入站事件）
    - INACTIVE: 已停用
    """

    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
