"""ResendSkippedUseCase - 重新校验被跳过的联系人

业务场景：
操作员修正了联系人数据（或模板变量）之后，把 skipped 的联系人重新放回队列。

执行流程：
1. 列出活动中所有 skipped 行；没有时返回 nothing
2. 只重新执行 precheck（不发送）
   - 通过：行回到 pending，电话号码写入规范化形式，清空跳过/错误字段
   - 不通过：更新为新的 skip_code / skip_reason
3. 活动的 skipped 计数器按行重新统计
4. 有行回到 pending 时返回 queued（已结束的活动回到 scheduled），否则返回 skipped

回到 pending 的行由下一次 DispatchCampaignUseCase 发送。
"""

import logging
from dataclasses import dataclass

from src.application.ports.transaction_manager import TransactionManager
from src.application.use_cases.dispatch_campaign import resolve_campaign_template
from src.domain.ports.campaign_contact_repository import CampaignContactRepository
from src.domain.ports.campaign_repository import CampaignRepository
from src.domain.ports.message_template_repository import MessageTemplateRepository
from src.domain.services.template_contract import TemplateSpecCache, precheck_contact
from src.domain.value_objects.contact_status import ContactStatus

logger = logging.getLogger(__name__)


@dataclass
class ResendSkippedOutput:
    """重发结果

    属性说明：
    - status: nothing（没有 skipped 行）/ skipped（全部仍然无效）/ queued（有行回到 pending）
    - resent: 回到 pending 的行数
    - still_skipped: 仍然被跳过的行数
    """

    status: str
    resent: int
    still_skipped: int

    def to_dict(self) -> dict:
        return {"status": self.status, "resent": self.resent, "stillSkipped": self.still_skipped}


class ResendSkippedUseCase:
    def __init__(
        self,
        campaign_repository: CampaignRepository,
        contact_repository: CampaignContactRepository,
        template_repository: MessageTemplateRepository,
        transaction_manager: TransactionManager,
        spec_cache: TemplateSpecCache | None = None,
        default_country_code: str = "55",
    ):
        self.campaign_repository = campaign_repository
        self.contact_repository = contact_repository
        self.template_repository = template_repository
        self.transaction_manager = transaction_manager
        self.spec_cache = spec_cache or TemplateSpecCache()
        self.default_country_code = default_country_code

    def execute(self, campaign_id: str) -> ResendSkippedOutput:
        """重新校验

        抛出：
            NotFoundError: 活动不存在
            TemplateContractError: 模板不存在或契约无效
        """
        campaign = self.campaign_repository.get_by_id(campaign_id)

        rows = self.contact_repository.list_by_status(campaign_id, ContactStatus.SKIPPED)
        if not rows:
            return ResendSkippedOutput(status="nothing", resent=0, still_skipped=0)

        template = resolve_campaign_template(campaign, self.template_repository)
        spec = self.spec_cache.get_or_compile(template)

        resent = 0
        for row in rows:
            result = precheck_contact(
                row.to_contact(), spec, campaign.template_variables, self.default_country_code
            )
            if result.ok:
                if self.contact_repository.requeue_skipped(row.id, result.normalized_phone):
                    resent += 1
            else:
                self.contact_repository.update_skip(row.id, result.skip_code, result.reason)

        still_skipped = self.contact_repository.count_by_status(campaign_id, ContactStatus.SKIPPED)
        self.campaign_repository.set_skipped(campaign_id, still_skipped)
        if resent:
            campaign = self.campaign_repository.get_by_id(campaign_id)
            campaign.reopen()
            self.campaign_repository.save(campaign)
        self.transaction_manager.commit()

        logger.info(
            f"重新校验完成: campaign={campaign_id}, resent={resent}, still_skipped={still_skipped}"
        )
        return ResendSkippedOutput(
            status="queued" if resent else "skipped",
            resent=resent,
            still_skipped=still_skipped,
        )
