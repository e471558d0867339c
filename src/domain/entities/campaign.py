"""Campaign 实体 - 模板群发活动

业务定义：
- Campaign 是一次面向联系人列表的模板消息群发
- 计数器（sent/failed/skipped）在每个批次结束后持久化，作为检查点
- 暂停/取消通过状态标志实现，群发循环在批次之间协作式检查

设计原则：
- 纯 Python 实现，不依赖任何框架（DDD 要求）
- 通过状态转换方法维护状态机不变式
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError
from src.domain.value_objects.campaign_status import CampaignStatus


@dataclass
class Campaign:
    """Campaign 实体

    属性说明：
    - id: 唯一标识符（UUID）
    - name: 活动名称
    - template_name: 使用的模板名称
    - template_snapshot: 创建活动时的模板快照（可选，优先于模板库）
    - template_variables: 操作员填写的变量（header/body/buttons）
    - status: 活动状态
    - recipients: 收件人数（联系人行数）
    - sent / failed / skipped: 结果计数器
    - started_at / completed_at: 开始与结束时间
    """

    id: str
    name: str
    template_name: str
    status: CampaignStatus = CampaignStatus.DRAFT
    template_snapshot: dict[str, Any] | None = None
    template_variables: dict[str, Any] = field(default_factory=dict)
    recipients: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        name: str,
        template_name: str,
        template_variables: dict[str, Any] | None = None,
        template_snapshot: dict[str, Any] | None = None,
    ) -> "Campaign":
        """创建 Campaign 的工厂方法

        抛出：
            DomainError: name 或 template_name 为空时
        """
        # 验证业务规则
        if not name or not name.strip():
            raise DomainError("name 不能为空")

        if not template_name or not template_name.strip():
            raise DomainError("template_name 不能为空")

        return cls(
            id=str(uuid4()),
            name=name.strip(),
            template_name=template_name.strip(),
            template_variables=dict(template_variables or {}),
            template_snapshot=template_snapshot,
        )

    @property
    def processed(self) -> int:
        return self.sent + self.failed + self.skipped

    def start_sending(self) -> None:
        """进入发送状态（重复启动时保留最初的 started_at）

        抛出：
            DomainError: 已取消或已结束的活动不能再次发送
        """
        if self.status in (CampaignStatus.CANCELLED, CampaignStatus.COMPLETED, CampaignStatus.FAILED):
            raise DomainError(f"活动已结束，当前状态：{self.status.value}")

        self.status = CampaignStatus.SENDING
        self.started_at = self.started_at or datetime.now(UTC)
        self.completed_at = None
        self.updated_at = datetime.now(UTC)

    def pause(self) -> None:
        if self.status != CampaignStatus.SENDING:
            raise DomainError(f"只能暂停发送中的活动，当前状态：{self.status.value}")
        self.status = CampaignStatus.PAUSED
        self.updated_at = datetime.now(UTC)

    def resume(self) -> None:
        if self.status != CampaignStatus.PAUSED:
            raise DomainError(f"只能恢复已暂停的活动，当前状态：{self.status.value}")
        self.status = CampaignStatus.SENDING
        self.updated_at = datetime.now(UTC)

    def cancel(self) -> None:
        if self.status in (CampaignStatus.COMPLETED, CampaignStatus.FAILED):
            raise DomainError(f"活动已结束，不能取消，当前状态：{self.status.value}")
        self.status = CampaignStatus.CANCELLED
        self.updated_at = datetime.now(UTC)

    def reopen(self) -> None:
        """重新校验后有行回到 pending：已结束（completed / failed）的活动回到 scheduled"""
        if self.status in (CampaignStatus.COMPLETED, CampaignStatus.FAILED):
            self.status = CampaignStatus.SCHEDULED
            self.completed_at = None
            self.updated_at = datetime.now(UTC)

    def complete(self) -> None:
        """结束发送

        业务规则：
        - 所有收件人都失败或被跳过（且收件人数 > 0）→ FAILED
        - 否则 → COMPLETED
        """
        if self.recipients > 0 and self.failed + self.skipped == self.recipients:
            self.status = CampaignStatus.FAILED
        else:
            self.status = CampaignStatus.COMPLETED
        self.completed_at = datetime.now(UTC)
        self.updated_at = self.completed_at
