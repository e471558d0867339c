"""Campaign / CampaignContact Repository 单元测试

使用内存 SQLite 测试：
1. 实体 ⇄ ORM 模型转换
2. 条件 UPDATE 的状态推进（认领、跳过、发送结果）
3. 计数器原子累加
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.domain.entities.campaign import Campaign
from src.domain.entities.campaign_contact import CampaignContact
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.campaign_status import CampaignStatus
from src.domain.value_objects.contact import Contact
from src.domain.value_objects.contact_status import ContactStatus
from src.domain.value_objects.skip_code import SkipCode
from src.infrastructure.database.repositories import (
    SQLAlchemyCampaignContactRepository,
    SQLAlchemyCampaignRepository,
)


@pytest.fixture
def campaign_repo(db_session):
    return SQLAlchemyCampaignRepository(db_session)


@pytest.fixture
def contact_repo(db_session):
    return SQLAlchemyCampaignContactRepository(db_session)


@pytest.fixture
def campaign(campaign_repo, db_session):
    campaign = Campaign.create(
        name="Black Friday",
        template_name="promo",
        template_variables={"body": ["{{nome}}"]},
        template_snapshot={"name": "promo", "components": [{"type": "BODY", "text": "Oi {{1}}"}]},
    )
    campaign.recipients = 3
    campaign_repo.save(campaign)
    db_session.commit()
    return campaign


def _rows(campaign_id, phones):
    return [
        CampaignContact.create(campaign_id, Contact(phone=phone, name=f"C{i}", contact_id=f"id-{i}"))
        for i, phone in enumerate(phones)
    ]


class TestCampaignRepository:
    """测试：活动持久化"""

    def test_save_and_get_by_id(self, campaign_repo, campaign):
        loaded = campaign_repo.get_by_id(campaign.id)

        assert loaded.name == "Black Friday"
        assert loaded.status is CampaignStatus.DRAFT
        assert loaded.template_variables == {"body": ["{{nome}}"]}
        assert loaded.template_snapshot["name"] == "promo"
        assert loaded.recipients == 3

    def test_get_missing_raises(self, campaign_repo):
        with pytest.raises(NotFoundError):
            campaign_repo.get_by_id("nao-existe")

        assert campaign_repo.find_by_id("nao-existe") is None

    def test_status_round_trip(self, campaign_repo, campaign, db_session):
        campaign.start_sending()
        campaign_repo.save(campaign)
        db_session.commit()

        assert campaign_repo.get_status(campaign.id) is CampaignStatus.SENDING
        assert campaign_repo.get_by_id(campaign.id).started_at is not None
        assert campaign_repo.get_status("nao-existe") is None

    def test_add_counters_accumulates(self, campaign_repo, campaign, db_session):
        campaign_repo.add_counters(campaign.id, sent=2, failed=1, skipped=0)
        campaign_repo.add_counters(campaign.id, sent=1, failed=0, skipped=3)
        db_session.commit()

        loaded = campaign_repo.get_by_id(campaign.id)
        assert (loaded.sent, loaded.failed, loaded.skipped) == (3, 1, 3)

    def test_set_skipped_overwrites(self, campaign_repo, campaign, db_session):
        campaign_repo.add_counters(campaign.id, sent=0, failed=0, skipped=5)
        campaign_repo.set_skipped(campaign.id, 2)
        db_session.commit()

        assert campaign_repo.get_by_id(campaign.id).skipped == 2


class TestCampaignContactRepository:
    """测试：联系人行状态推进"""

    def test_add_all_keeps_insertion_order(self, contact_repo, campaign, db_session):
        contact_repo.add_all(_rows(campaign.id, ["+5511900000003", "+5511900000001"]))
        contact_repo.add_all(_rows(campaign.id, ["+5511900000002"]))
        db_session.commit()

        phones = [row.phone for row in contact_repo.list_by_campaign(campaign.id)]

        assert phones == ["+5511900000003", "+5511900000001", "+5511900000002"]

    def test_claim_is_compare_and_swap(self, contact_repo, campaign):
        contact_repo.add_all(_rows(campaign.id, ["+5511900000001"]))

        first = contact_repo.claim_pending(campaign.id, "+5511900000001")
        second = contact_repo.claim_pending(campaign.id, "+5511900000001")

        assert first is True
        assert second is False
        assert contact_repo.get_status(campaign.id, "+5511900000001") is ContactStatus.SENDING

    def test_mark_sent_only_from_sending(self, contact_repo, campaign):
        contact_repo.add_all(_rows(campaign.id, ["+5511900000001"]))

        contact_repo.mark_sent(campaign.id, "+5511900000001", "wamid.x")
        assert contact_repo.get_status(campaign.id, "+5511900000001") is ContactStatus.PENDING

        contact_repo.claim_pending(campaign.id, "+5511900000001")
        contact_repo.mark_sent(campaign.id, "+5511900000001", "wamid.x")

        row = contact_repo.list_by_campaign(campaign.id)[0]
        assert row.status is ContactStatus.SENT
        assert row.message_id == "wamid.x"
        assert row.sent_at is not None

    def test_mark_failed_records_error(self, contact_repo, campaign):
        contact_repo.add_all(_rows(campaign.id, ["+5511900000001"]))
        contact_repo.claim_pending(campaign.id, "+5511900000001")

        contact_repo.mark_failed(campaign.id, "+5511900000001", "(#131026) 消息无法送达")

        row = contact_repo.list_by_campaign(campaign.id)[0]
        assert row.status is ContactStatus.FAILED
        assert row.error == "(#131026) 消息无法送达"

    def test_mark_skipped_only_from_pending(self, contact_repo, campaign):
        contact_repo.add_all(_rows(campaign.id, ["+5511900000001", "+5511900000002"]))
        contact_repo.claim_pending(campaign.id, "+5511900000002")

        skipped = contact_repo.mark_skipped(
            campaign.id, "+5511900000001", SkipCode.INVALID_PHONE, "电话号码无效"
        )
        not_skipped = contact_repo.mark_skipped(
            campaign.id, "+5511900000002", SkipCode.INVALID_PHONE, "电话号码无效"
        )

        assert skipped is True
        assert not_skipped is False
        rows = contact_repo.list_by_status(campaign.id, ContactStatus.SKIPPED)
        assert [(r.phone, r.skip_code) for r in rows] == [("+5511900000001", SkipCode.INVALID_PHONE)]

    def test_requeue_and_update_skip(self, contact_repo, campaign):
        contact_repo.add_all(_rows(campaign.id, ["11900000001", "abc"]))
        contact_repo.mark_skipped(campaign.id, "11900000001", SkipCode.MISSING_REQUIRED_PARAM, "x")
        contact_repo.mark_skipped(campaign.id, "abc", SkipCode.MISSING_REQUIRED_PARAM, "x")
        first, second = contact_repo.list_by_status(campaign.id, ContactStatus.SKIPPED)

        assert contact_repo.requeue_skipped(first.id, "+5511900000001") is True
        contact_repo.update_skip(second.id, SkipCode.INVALID_PHONE, "电话号码包含非法字符")

        pending = contact_repo.list_by_status(campaign.id, ContactStatus.PENDING)
        assert [(r.phone, r.skip_code, r.skip_reason) for r in pending] == [
            ("+5511900000001", None, None)
        ]
        still = contact_repo.list_by_status(campaign.id, ContactStatus.SKIPPED)
        assert still[0].skip_code is SkipCode.INVALID_PHONE
        assert contact_repo.count_by_status(campaign.id, ContactStatus.SKIPPED) == 1

    def test_requeue_ignores_rows_that_are_not_skipped(self, contact_repo, campaign):
        contact_repo.add_all(_rows(campaign.id, ["+5511900000001"]))
        row = contact_repo.list_by_campaign(campaign.id)[0]

        assert contact_repo.requeue_skipped(row.id, "+5511900000001") is False

    def test_find_stale_sending(self, contact_repo, campaign):
        contact_repo.add_all(_rows(campaign.id, ["+5511900000001", "+5511900000002"]))
        contact_repo.claim_pending(campaign.id, "+5511900000001")

        future = datetime.now(UTC) + timedelta(minutes=5)
        past = datetime.now(UTC) - timedelta(minutes=5)

        assert [r.phone for r in contact_repo.find_stale_sending(campaign.id, future)] == [
            "+5511900000001"
        ]
        assert contact_repo.find_stale_sending(campaign.id, past) == []
