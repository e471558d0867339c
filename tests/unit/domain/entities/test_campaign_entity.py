"""测试：Campaign 实体状态机"""

import pytest

from src.domain.entities.campaign import Campaign
from src.domain.exceptions import DomainError
from src.domain.value_objects.campaign_status import CampaignStatus


def _campaign(**counters) -> Campaign:
    campaign = Campaign.create(name="Aviso", template_name="aviso")
    for key, value in counters.items():
        setattr(campaign, key, value)
    return campaign


class TestCampaignCreation:
    def test_create_defaults(self):
        campaign = Campaign.create(name="  Aviso ", template_name=" aviso ")

        assert campaign.name == "Aviso"
        assert campaign.template_name == "aviso"
        assert campaign.status is CampaignStatus.DRAFT
        assert campaign.processed == 0

    @pytest.mark.parametrize("name,template_name", [("", "aviso"), ("Aviso", "  ")])
    def test_blank_fields_rejected(self, name, template_name):
        with pytest.raises(DomainError):
            Campaign.create(name=name, template_name=template_name)


class TestCampaignTransitions:
    """测试：状态转换"""

    def test_restart_keeps_started_at(self):
        campaign = _campaign()
        campaign.start_sending()
        started_at = campaign.started_at
        campaign.pause()
        campaign.resume()

        campaign.start_sending()

        assert campaign.status is CampaignStatus.SENDING
        assert campaign.started_at == started_at

    @pytest.mark.parametrize(
        "status", [CampaignStatus.CANCELLED, CampaignStatus.COMPLETED, CampaignStatus.FAILED]
    )
    def test_finished_campaign_cannot_send(self, status):
        campaign = _campaign(status=status)

        with pytest.raises(DomainError):
            campaign.start_sending()

    def test_cancel_finished_campaign_rejected(self):
        campaign = _campaign(status=CampaignStatus.COMPLETED)

        with pytest.raises(DomainError):
            campaign.cancel()

    def test_reopen_only_affects_finished_campaigns(self):
        failed = _campaign(status=CampaignStatus.FAILED)
        paused = _campaign(status=CampaignStatus.PAUSED)

        failed.reopen()
        paused.reopen()

        assert failed.status is CampaignStatus.SCHEDULED
        assert failed.completed_at is None
        assert paused.status is CampaignStatus.PAUSED


class TestCampaignCompletion:
    """测试：结束状态判定"""

    def test_all_failed_or_skipped_is_failed(self):
        campaign = _campaign(recipients=3, failed=1, skipped=2)

        campaign.complete()

        assert campaign.status is CampaignStatus.FAILED
        assert campaign.completed_at is not None

    def test_any_sent_is_completed(self):
        campaign = _campaign(recipients=3, sent=1, failed=1, skipped=1)

        campaign.complete()

        assert campaign.status is CampaignStatus.COMPLETED
        assert campaign.processed == 3

    def test_empty_campaign_is_completed(self):
        campaign = _campaign()

        campaign.complete()

        assert campaign.status is CampaignStatus.COMPLETED
