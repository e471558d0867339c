"""CreateCampaignUseCase - 创建群发活动

业务场景：
操作员选择模板、填写变量、导入联系人列表，创建一个 draft 活动。

业务规则：
- 每个联系人一行 pending 记录
- 同一活动内重复的电话号码（规范化后相同）只保留第一行
- recipients = 行数
- 模板已在模板库中时保存一份快照，之后模板库的修改不影响该活动
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from src.application.ports.transaction_manager import TransactionManager
from src.domain.entities.campaign import Campaign
from src.domain.entities.campaign_contact import CampaignContact
from src.domain.ports.campaign_contact_repository import CampaignContactRepository
from src.domain.ports.campaign_repository import CampaignRepository
from src.domain.ports.message_template_repository import MessageTemplateRepository
from src.domain.services.phone import validate_phone_number
from src.domain.value_objects.contact import Contact

logger = logging.getLogger(__name__)


@dataclass
class CreateCampaignInput:
    """创建活动输入

    属性说明：
    - name: 活动名称（必填）
    - template_name: 模板名称（必填）
    - contacts: 联系人列表
    - template_variables: 变量（header/body 为列表或 {"1": ...}，按钮为 button_<i>_<n>）
    """

    name: str
    template_name: str
    contacts: list[Contact] = field(default_factory=list)
    template_variables: dict[str, Any] = field(default_factory=dict)


class CreateCampaignUseCase:
    def __init__(
        self,
        campaign_repository: CampaignRepository,
        contact_repository: CampaignContactRepository,
        template_repository: MessageTemplateRepository,
        transaction_manager: TransactionManager,
        default_country_code: str = "55",
    ):
        self.campaign_repository = campaign_repository
        self.contact_repository = contact_repository
        self.template_repository = template_repository
        self.transaction_manager = transaction_manager
        self.default_country_code = default_country_code

    def execute(self, input_data: CreateCampaignInput) -> Campaign:
        """创建活动

        抛出：
            DomainError: 名称或模板名为空
        """
        template = self.template_repository.find_by_name(input_data.template_name.strip())
        campaign = Campaign.create(
            name=input_data.name,
            template_name=input_data.template_name,
            template_variables=input_data.template_variables,
            template_snapshot=template.to_dict() if template is not None else None,
        )

        rows: list[CampaignContact] = []
        seen: set[str] = set()
        for contact in input_data.contacts:
            if not contact.phone or not contact.phone.strip():
                continue
            key = self._dedupe_key(contact.phone)
            if key in seen:
                continue
            seen.add(key)
            rows.append(CampaignContact.create(campaign.id, contact))

        campaign.recipients = len(rows)
        self.campaign_repository.save(campaign)
        self.contact_repository.add_all(rows)
        self.transaction_manager.commit()

        duplicates = len(input_data.contacts) - len(rows)
        logger.info(
            f"活动已创建: campaign={campaign.id}, recipients={len(rows)}, dropped={duplicates}"
        )
        return campaign

    def _dedupe_key(self, phone: str) -> str:
        validation = validate_phone_number(phone, self.default_country_code)
        return validation.normalized if validation.is_valid else phone.strip()
