"""CampaignContactRepository Port - 群发联系人行的持久化接口

并发控制：
- claim_pending() 是唯一的并发控制原语
- 必须在存储层原子完成：只有当前状态恰好是 pending 时更新才成功
  （compare-and-swap 语义），否则返回 False
- 其他终态写入（mark_skipped）同样是条件更新，保证状态单调
"""

from datetime import datetime
from typing import Protocol

from src.domain.entities.campaign_contact import CampaignContact
from src.domain.value_objects.contact_status import ContactStatus
from src.domain.value_objects.skip_code import SkipCode


class CampaignContactRepository(Protocol):
    """CampaignContact 仓储接口"""

    def add_all(self, rows: list[CampaignContact]) -> None: ...

    def list_by_campaign(self, campaign_id: str) -> list[CampaignContact]:
        """按插入顺序列出活动的所有行"""
        ...

    def list_by_status(self, campaign_id: str, status: ContactStatus) -> list[CampaignContact]: ...

    def get_status(self, campaign_id: str, phone: str) -> ContactStatus | None: ...

    def count_by_status(self, campaign_id: str, status: ContactStatus) -> int: ...

    def claim_pending(self, campaign_id: str, phone: str) -> bool:
        """原子认领：pending → sending

        返回：
            True 表示本调用方取得了该行；False 表示该行已不是 pending
        """
        ...

    def mark_skipped(
        self, campaign_id: str, phone: str, skip_code: SkipCode, skip_reason: str
    ) -> bool:
        """条件更新：pending → skipped"""
        ...

    def mark_sent(self, campaign_id: str, phone: str, message_id: str) -> None:
        """sending → sent"""
        ...

    def mark_failed(self, campaign_id: str, phone: str, error: str) -> None:
        """sending → failed"""
        ...

    def requeue_skipped(self, row_id: str, normalized_phone: str) -> bool:
        """重发：skipped → pending，清空跳过/错误字段"""
        ...

    def update_skip(self, row_id: str, skip_code: SkipCode, skip_reason: str) -> None: ...

    def find_stale_sending(self, campaign_id: str, older_than: datetime) -> list[CampaignContact]:
        """列出 sending_at 早于 older_than 的行（worker 崩溃遗留，供外部编排器处理）"""
        ...
