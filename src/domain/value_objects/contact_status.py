"""ContactStatus 枚举 - 群发联系人行状态

状态转换（单调）：
    pending → sending → sent | failed
    pending → skipped

DELIVERED / READ 由承运方回执（webhook）写入，不在本核心内产生，
但群发循环必须把它们视为终态，避免重复发送。
"""

from enum import Enum


class ContactStatus(str, Enum):
    """群发联系人状态枚举"""

    PENDING = "pending"
    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        """终态：已经处理过，不能再次处理"""
        return self in TERMINAL_CONTACT_STATUSES

    @property
    def is_processed(self) -> bool:
        """群发循环的幂等守卫：终态或正被其他 worker 持有"""
        return self.is_terminal or self is ContactStatus.SENDING


TERMINAL_CONTACT_STATUSES = frozenset(
    {
        ContactStatus.SENT,
        ContactStatus.DELIVERED,
        ContactStatus.READ,
        ContactStatus.FAILED,
        ContactStatus.SKIPPED,
    }
)
