"""CampaignRepository Port - 定义 Campaign 实体的持久化接口"""

from typing import Protocol

from src.domain.entities.campaign import Campaign
from src.domain.value_objects.campaign_status import CampaignStatus


class CampaignRepository(Protocol):
    """Campaign 仓储接口

    get_status() 是群发循环的协作式取消检查点，只读取状态列，
    不覆盖内存中的计数器。
    """

    def save(self, campaign: Campaign) -> None: ...

    def get_by_id(self, campaign_id: str) -> Campaign:
        """根据 ID 获取 Campaign

        抛出：
            NotFoundError: 当 Campaign 不存在时
        """
        ...

    def get_status(self, campaign_id: str) -> CampaignStatus | None: ...

    def add_counters(self, campaign_id: str, sent: int, failed: int, skipped: int) -> None:
        """原子累加计数器（UPDATE ... SET sent = sent + :n）"""
        ...

    def set_skipped(self, campaign_id: str, skipped: int) -> None: ...
