"""Campaign DTO - 群发活动数据传输对象"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.domain.entities.campaign import Campaign
from src.domain.value_objects.contact import Contact


class ContactDTO(BaseModel):
    phone: str = Field(..., min_length=1, description="电话号码")
    name: str = Field(default="", description="联系人名称")
    email: str | None = Field(default=None, description="邮箱")
    custom_fields: dict[str, Any] = Field(default_factory=dict, description="自定义字段")
    contact_id: str | None = Field(default=None, description="联系人 ID（没有时不会被发送）")

    def to_contact(self) -> Contact:
        return Contact(
            phone=self.phone,
            name=self.name,
            email=self.email,
            custom_fields=dict(self.custom_fields),
            contact_id=self.contact_id,
        )


class CreateCampaignRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="活动名称")
    template_name: str = Field(..., min_length=1, description="模板名称")
    template_variables: dict[str, Any] = Field(default_factory=dict, description="模板变量")
    contacts: list[ContactDTO] = Field(default_factory=list, description="联系人列表")


class CampaignResponse(BaseModel):
    id: str
    name: str
    template_name: str
    status: str
    recipients: int
    sent: int
    failed: int
    skipped: int
    processed: int
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, campaign: Campaign) -> "CampaignResponse":
        return cls(
            id=campaign.id,
            name=campaign.name,
            template_name=campaign.template_name,
            status=campaign.status.value,
            recipients=campaign.recipients,
            sent=campaign.sent,
            failed=campaign.failed,
            skipped=campaign.skipped,
            processed=campaign.processed,
            started_at=campaign.started_at,
            completed_at=campaign.completed_at,
            created_at=campaign.created_at,
        )


class DispatchResponse(BaseModel):
    campaign_id: str
    status: str
    batches: int
    sent: int
    failed: int
    skipped: int
    stopped: bool


class ResendSkippedResponse(BaseModel):
    status: str
    resent: int
    still_skipped: int
