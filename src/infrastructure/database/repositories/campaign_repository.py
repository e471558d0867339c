"""SQLAlchemy Campaign Repository 实现"""

from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from src.domain.entities.campaign import Campaign
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.campaign_status import CampaignStatus
from src.infrastructure.database.models import CampaignModel


def _aware(value: datetime | None) -> datetime | None:
    return value.replace(tzinfo=UTC) if value is not None else None


def _utcnow() -> datetime:
    # 数据库存储不带时区的 UTC 时间
    return datetime.now(UTC).replace(tzinfo=None)


def _naive(value: datetime | None) -> datetime | None:
    return value.replace(tzinfo=None) if value is not None else None


class SQLAlchemyCampaignRepository:
    """SQLAlchemy Campaign Repository 实现

    计数器使用 UPDATE ... SET sent = sent + :n 原子累加，
    多个 worker 同时提交批次时不会互相覆盖。
    """

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: CampaignModel) -> Campaign:
        return Campaign(
            id=model.id,
            name=model.name,
            template_name=model.template_name,
            status=CampaignStatus(model.status),
            template_snapshot=model.template_snapshot,
            template_variables=dict(model.template_variables or {}),
            recipients=model.recipients,
            sent=model.sent,
            failed=model.failed,
            skipped=model.skipped,
            started_at=_aware(model.started_at),
            completed_at=_aware(model.completed_at),
            created_at=model.created_at.replace(tzinfo=UTC),
            updated_at=model.updated_at.replace(tzinfo=UTC),
        )

    def _to_model(self, entity: Campaign) -> CampaignModel:
        return CampaignModel(
            id=entity.id,
            name=entity.name,
            template_name=entity.template_name,
            template_snapshot=entity.template_snapshot,
            template_variables=dict(entity.template_variables),
            status=entity.status.value,
            recipients=entity.recipients,
            sent=entity.sent,
            failed=entity.failed,
            skipped=entity.skipped,
            started_at=_naive(entity.started_at),
            completed_at=_naive(entity.completed_at),
            created_at=entity.created_at.replace(tzinfo=None),
            updated_at=entity.updated_at.replace(tzinfo=None),
        )

    # ==================== Repository 方法 ====================

    def save(self, campaign: Campaign) -> None:
        self.session.merge(self._to_model(campaign))
        self.session.flush()

    def get_by_id(self, campaign_id: str) -> Campaign:
        """根据 ID 获取 Campaign

        抛出：
            NotFoundError: 当 Campaign 不存在时
        """
        model = self.session.get(CampaignModel, campaign_id, populate_existing=True)
        if model is None:
            raise NotFoundError(entity_type="Campaign", entity_id=campaign_id)
        return self._to_entity(model)

    def find_by_id(self, campaign_id: str) -> Campaign | None:
        model = self.session.get(CampaignModel, campaign_id, populate_existing=True)
        return self._to_entity(model) if model is not None else None

    def get_status(self, campaign_id: str) -> CampaignStatus | None:
        """只读状态列（群发循环的协作式取消检查点）"""
        stmt = select(CampaignModel.status).where(CampaignModel.id == campaign_id)
        status = self.session.scalar(stmt)
        return CampaignStatus(status) if status is not None else None

    def add_counters(self, campaign_id: str, sent: int, failed: int, skipped: int) -> None:
        if not (sent or failed or skipped):
            return
        stmt = (
            update(CampaignModel)
            .where(CampaignModel.id == campaign_id)
            .values(
                sent=CampaignModel.sent + sent,
                failed=CampaignModel.failed + failed,
                skipped=CampaignModel.skipped + skipped,
                updated_at=_utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        self.session.execute(stmt)

    def set_skipped(self, campaign_id: str, skipped: int) -> None:
        stmt = (
            update(CampaignModel)
            .where(CampaignModel.id == campaign_id)
            .values(skipped=skipped, updated_at=_utcnow())
            .execution_options(synchronize_session=False)
        )
        self.session.execute(stmt)
