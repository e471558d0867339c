"""SQLAlchemy CampaignContact Repository 实现

并发控制：
- 所有状态推进都是条件 UPDATE（WHERE status = <期望的当前状态>）
- claim_pending() 依赖 rowcount == 1 判断是否认领成功（compare-and-swap）
- 多个 worker 同时处理同一批次时，同一行最多被认领一次
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from src.domain.entities.campaign_contact import CampaignContact
from src.domain.value_objects.contact_status import ContactStatus
from src.domain.value_objects.skip_code import SkipCode
from src.infrastructure.database.models import CampaignContactModel

logger = logging.getLogger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    return value.replace(tzinfo=UTC) if value is not None else None


def _utcnow() -> datetime:
    # 数据库存储不带时区的 UTC 时间
    return datetime.now(UTC).replace(tzinfo=None)


class SQLAlchemyCampaignContactRepository:
    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: CampaignContactModel) -> CampaignContact:
        return CampaignContact(
            id=model.id,
            campaign_id=model.campaign_id,
            phone=model.phone,
            name=model.name or "",
            email=model.email,
            custom_fields=dict(model.custom_fields or {}),
            contact_id=model.contact_id,
            status=ContactStatus(model.status),
            message_id=model.message_id,
            error=model.error,
            skip_code=SkipCode(model.skip_code) if model.skip_code else None,
            skip_reason=model.skip_reason,
            sending_at=_aware(model.sending_at),
            sent_at=_aware(model.sent_at),
            failed_at=_aware(model.failed_at),
            skipped_at=_aware(model.skipped_at),
        )

    def _to_model(self, entity: CampaignContact, seq: int) -> CampaignContactModel:
        return CampaignContactModel(
            id=entity.id,
            campaign_id=entity.campaign_id,
            seq=seq,
            contact_id=entity.contact_id,
            phone=entity.phone,
            name=entity.name,
            email=entity.email,
            custom_fields=dict(entity.custom_fields),
            status=entity.status.value,
            message_id=entity.message_id,
            error=entity.error,
            skip_code=entity.skip_code.value if entity.skip_code else None,
            skip_reason=entity.skip_reason,
        )

    def _transition(self, *conditions, **values) -> int:
        stmt = (
            update(CampaignContactModel)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount

    # ==================== 写入 ====================

    def add_all(self, rows: list[CampaignContact]) -> None:
        """批量插入（seq 记录插入顺序）"""
        if not rows:
            return
        campaign_id = rows[0].campaign_id
        start = self.session.scalar(
            select(func.coalesce(func.max(CampaignContactModel.seq), -1)).where(
                CampaignContactModel.campaign_id == campaign_id
            )
        )
        self.session.add_all(
            [self._to_model(row, seq=start + 1 + index) for index, row in enumerate(rows)]
        )
        self.session.flush()

    def claim_pending(self, campaign_id: str, phone: str) -> bool:
        """原子认领：pending → sending

        返回：
            True 表示认领成功；False 表示该行已被其他 worker 认领或已处理
        """
        claimed = self._transition(
            CampaignContactModel.campaign_id == campaign_id,
            CampaignContactModel.phone == phone,
            CampaignContactModel.status == ContactStatus.PENDING.value,
            status=ContactStatus.SENDING.value,
            sending_at=_utcnow(),
        )
        return claimed == 1

    def mark_skipped(
        self, campaign_id: str, phone: str, skip_code: SkipCode, skip_reason: str
    ) -> bool:
        skipped = self._transition(
            CampaignContactModel.campaign_id == campaign_id,
            CampaignContactModel.phone == phone,
            CampaignContactModel.status == ContactStatus.PENDING.value,
            status=ContactStatus.SKIPPED.value,
            skip_code=skip_code.value,
            skip_reason=skip_reason,
            skipped_at=_utcnow(),
        )
        return skipped == 1

    def mark_sent(self, campaign_id: str, phone: str, message_id: str) -> None:
        updated = self._transition(
            CampaignContactModel.campaign_id == campaign_id,
            CampaignContactModel.phone == phone,
            CampaignContactModel.status == ContactStatus.SENDING.value,
            status=ContactStatus.SENT.value,
            message_id=message_id,
            error=None,
            sent_at=_utcnow(),
        )
        if updated != 1:
            logger.warning(f"写入 sent 时行不在 sending 状态: campaign={campaign_id}, phone={phone}")

    def mark_failed(self, campaign_id: str, phone: str, error: str) -> None:
        updated = self._transition(
            CampaignContactModel.campaign_id == campaign_id,
            CampaignContactModel.phone == phone,
            CampaignContactModel.status == ContactStatus.SENDING.value,
            status=ContactStatus.FAILED.value,
            error=error,
            failed_at=_utcnow(),
        )
        if updated != 1:
            logger.warning(f"写入 failed 时行不在 sending 状态: campaign={campaign_id}, phone={phone}")

    def requeue_skipped(self, row_id: str, normalized_phone: str) -> bool:
        """skipped → pending，电话号码规范化，清空跳过/错误字段"""
        requeued = self._transition(
            CampaignContactModel.id == row_id,
            CampaignContactModel.status == ContactStatus.SKIPPED.value,
            status=ContactStatus.PENDING.value,
            phone=normalized_phone,
            skip_code=None,
            skip_reason=None,
            skipped_at=None,
            error=None,
            failed_at=None,
        )
        return requeued == 1

    def update_skip(self, row_id: str, skip_code: SkipCode, skip_reason: str) -> None:
        self._transition(
            CampaignContactModel.id == row_id,
            CampaignContactModel.status == ContactStatus.SKIPPED.value,
            skip_code=skip_code.value,
            skip_reason=skip_reason,
            skipped_at=_utcnow(),
        )

    # ==================== 查询 ====================

    def list_by_campaign(self, campaign_id: str) -> list[CampaignContact]:
        stmt = (
            select(CampaignContactModel)
            .where(CampaignContactModel.campaign_id == campaign_id)
            .order_by(CampaignContactModel.seq)
            .execution_options(populate_existing=True)
        )
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def list_by_status(self, campaign_id: str, status: ContactStatus) -> list[CampaignContact]:
        stmt = (
            select(CampaignContactModel)
            .where(
                CampaignContactModel.campaign_id == campaign_id,
                CampaignContactModel.status == status.value,
            )
            .order_by(CampaignContactModel.seq)
            .execution_options(populate_existing=True)
        )
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def get_status(self, campaign_id: str, phone: str) -> ContactStatus | None:
        stmt = select(CampaignContactModel.status).where(
            CampaignContactModel.campaign_id == campaign_id,
            CampaignContactModel.phone == phone,
        )
        status = self.session.scalar(stmt)
        return ContactStatus(status) if status is not None else None

    def count_by_status(self, campaign_id: str, status: ContactStatus) -> int:
        stmt = select(func.count()).where(
            CampaignContactModel.campaign_id == campaign_id,
            CampaignContactModel.status == status.value,
        )
        return self.session.scalar(stmt) or 0

    def find_stale_sending(self, campaign_id: str, older_than: datetime) -> list[CampaignContact]:
        """列出 sending_at 早于 older_than 的行（worker 崩溃后遗留）"""
        stmt = (
            select(CampaignContactModel)
            .where(
                CampaignContactModel.campaign_id == campaign_id,
                CampaignContactModel.status == ContactStatus.SENDING.value,
                CampaignContactModel.sending_at < older_than.replace(tzinfo=None),
            )
            .order_by(CampaignContactModel.seq)
            .execution_options(populate_existing=True)
        )
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]
