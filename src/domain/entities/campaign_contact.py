"""CampaignContact 实体 - 群发活动中的一个联系人行

业务定义：
- 每个 (campaign, phone) 一行，记录该联系人的发送结果
- 状态转换单调：pending → sending → sent|failed，或 pending → skipped
- sending 是认领状态，只能由一个 worker 通过条件更新取得
  （认领本身在 Repository 中原子完成，不在实体上做）
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError
from src.domain.value_objects.contact import Contact
from src.domain.value_objects.contact_status import ContactStatus
from src.domain.value_objects.skip_code import SkipCode


@dataclass
class CampaignContact:
    """CampaignContact 实体

    属性说明：
    - id: 行 ID
    - campaign_id: 所属活动
    - phone: 电话号码（活动内唯一）
    - contact_id / name / email / custom_fields: 联系人快照
    - status: 行状态
    - message_id: 承运方返回的消息 ID（sent 时）
    - error: 规范化的失败原因（failed 时）
    - skip_code / skip_reason: 跳过原因（skipped 时）
    """

    id: str
    campaign_id: str
    phone: str
    name: str = ""
    email: str | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict)
    contact_id: str | None = None
    status: ContactStatus = ContactStatus.PENDING
    message_id: str | None = None
    error: str | None = None
    skip_code: SkipCode | None = None
    skip_reason: str | None = None
    sending_at: datetime | None = None
    sent_at: datetime | None = None
    failed_at: datetime | None = None
    skipped_at: datetime | None = None

    @classmethod
    def create(cls, campaign_id: str, contact: Contact) -> "CampaignContact":
        """创建 pending 行

        抛出：
            DomainError: campaign_id 或 phone 为空时
        """
        if not campaign_id or not campaign_id.strip():
            raise DomainError("campaign_id 不能为空")

        if not contact.phone or not contact.phone.strip():
            raise DomainError("phone 不能为空")

        return cls(
            id=str(uuid4()),
            campaign_id=campaign_id,
            phone=contact.phone.strip(),
            name=contact.name or "",
            email=contact.email,
            custom_fields=dict(contact.custom_fields or {}),
            contact_id=contact.contact_id,
        )

    def to_contact(self) -> Contact:
        """转换为 precheck 使用的 Contact 值对象"""
        return Contact(
            phone=self.phone,
            name=self.name,
            email=self.email,
            custom_fields=dict(self.custom_fields or {}),
            contact_id=self.contact_id,
        )
