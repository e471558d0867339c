"""ControlCampaignUseCase - 暂停 / 恢复 / 取消群发

暂停和取消只修改活动状态；正在运行的群发循环在下一个联系人之前读到新状态后停止。
恢复把状态改回 sending，之后重新调用群发用例处理剩余的 pending 行。
"""

import logging
from enum import Enum

from src.application.ports.transaction_manager import TransactionManager
from src.domain.entities.campaign import Campaign
from src.domain.ports.campaign_repository import CampaignRepository

logger = logging.getLogger(__name__)


class CampaignAction(str, Enum):
    PAUSE = "pause"
    RESUME = "resume"
    CANCEL = "cancel"


class ControlCampaignUseCase:
    def __init__(
        self,
        campaign_repository: CampaignRepository,
        transaction_manager: TransactionManager,
    ):
        self.campaign_repository = campaign_repository
        self.transaction_manager = transaction_manager

    def execute(self, campaign_id: str, action: CampaignAction) -> Campaign:
        """执行控制动作

        抛出：
            NotFoundError: 活动不存在
            DomainError: 当前状态不允许该动作
        """
        campaign = self.campaign_repository.get_by_id(campaign_id)

        if action == CampaignAction.PAUSE:
            campaign.pause()
        elif action == CampaignAction.RESUME:
            campaign.resume()
        else:
            campaign.cancel()

        self.campaign_repository.save(campaign)
        self.transaction_manager.commit()
        logger.info(f"活动状态已变更: campaign={campaign_id}, action={action.value}, status={campaign.status.value}")
        return campaign
