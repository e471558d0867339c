"""CampaignStatus 枚举 - 群发活动状态

状态转换：
    DRAFT / SCHEDULED → SENDING → COMPLETED | FAILED
    SENDING ⇄ PAUSED
    DRAFT / SCHEDULED / SENDING / PAUSED → CANCELLED
"""

from enum import Enum


class CampaignStatus(str, Enum):
    """群发活动状态枚举

    状态说明：
    - SENDING: 正在分批发送
    - PAUSED / CANCELLED: 协作式停止标志，群发循环在批次之间和联系人之间检查
    - FAILED: 所有收件人都失败或被跳过
    """

    DRAFT = "draft"
    SCHEDULED = "scheduled"
    SENDING = "sending"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def halts_dispatch(self) -> bool:
        return self in (CampaignStatus.PAUSED, CampaignStatus.CANCELLED)
