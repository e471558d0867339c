"""DispatchCampaignUseCase - 模板群发用例

业务场景：
操作员启动一个群发活动，系统按批次把模板消息发给所有 pending 联系人

执行流程：
1. 加载活动，解析模板（快照优先，其次模板库），编译契约
   - 模板不存在或契约无效：在任何发送之前失败（TemplateContractError）
2. 活动进入 sending（重复启动时保留 started_at）
3. 按插入顺序分批（settings.dispatch_batch_size）
4. 每个批次之前、每个联系人之前重新读取活动状态：paused / cancelled 时停止
5. 每个联系人：
   - 幂等守卫：行已处理（终态或 sending）时跳过
   - precheck：不通过时条件更新 pending → skipped，立即提交
   - 原子认领 pending → sending，立即提交（认领失败说明其他 worker 已持有，静默跳过）
   - 构造请求体并发送，写入 sent(message_id) 或 failed(错误信息)，立即提交
   - 每次发送后等待 settings.dispatch_send_delay_ms
6. 每个批次结束后累加计数器并提交（检查点）
7. 全部完成：failed + skipped == recipients > 0 时为 failed，否则 completed

行状态逐行提交：进程在批次中途退出时，已认领或已发送的行不会回到 pending，
重新运行只处理仍为 pending 的行。计数器只在检查点提交，中途退出的批次计数会缺失。

发送是"每个联系人最多一次"，失败不自动重试（通过"重发"流程人工处理）。
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from src.application.ports.transaction_manager import TransactionManager
from src.domain.entities.campaign import Campaign
from src.domain.entities.campaign_contact import CampaignContact
from src.domain.entities.message_template import MessageTemplate
from src.domain.exceptions import TemplateContractError
from src.domain.ports.campaign_contact_repository import CampaignContactRepository
from src.domain.ports.campaign_repository import CampaignRepository
from src.domain.ports.message_sender import MessageSender
from src.domain.ports.message_template_repository import MessageTemplateRepository
from src.domain.services.template_contract import (
    TemplateSpecCache,
    build_template_payload,
    precheck_contact,
)
from src.domain.value_objects.template_spec import TemplateSpec

logger = logging.getLogger(__name__)


def resolve_campaign_template(
    campaign: Campaign, template_repository: MessageTemplateRepository
) -> MessageTemplate:
    """活动使用的模板：快照优先，其次模板库

    抛出：
        TemplateContractError: 两处都没有该模板
    """
    if campaign.template_snapshot:
        snapshot = dict(campaign.template_snapshot)
        snapshot.setdefault("name", campaign.template_name)
        return MessageTemplate.from_dict(snapshot)

    template = template_repository.find_by_name(campaign.template_name)
    if template is None:
        raise TemplateContractError(f"模板不存在: {campaign.template_name}")
    return template


@dataclass
class DispatchCampaignInput:
    """群发输入参数

    属性说明：
    - campaign_id: 活动 ID（必填）
    """

    campaign_id: str


@dataclass
class DispatchCampaignOutput:
    """群发结果

    属性说明：
    - status: 结束时的活动状态
    - batches: 处理过的批次数
    - sent / failed / skipped: 本次运行产生的结果数
    - stopped: 是否因暂停/取消提前停止
    """

    campaign_id: str
    status: str
    batches: int
    sent: int
    failed: int
    skipped: int
    stopped: bool


@dataclass
class _BatchCounters:
    sent: int = 0
    failed: int = 0
    skipped: int = 0


class DispatchCampaignUseCase:
    """模板群发用例

    依赖：
    - CampaignRepository / CampaignContactRepository / MessageTemplateRepository
    - MessageSender: 承运方发送端口
    - TransactionManager: 批次检查点提交
    """

    def __init__(
        self,
        campaign_repository: CampaignRepository,
        contact_repository: CampaignContactRepository,
        template_repository: MessageTemplateRepository,
        sender: MessageSender,
        transaction_manager: TransactionManager,
        spec_cache: TemplateSpecCache | None = None,
        batch_size: int = 40,
        send_delay_ms: int = 15,
        default_country_code: str = "55",
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        self.campaign_repository = campaign_repository
        self.contact_repository = contact_repository
        self.template_repository = template_repository
        self.sender = sender
        self.transaction_manager = transaction_manager
        self.spec_cache = spec_cache or TemplateSpecCache()
        self.batch_size = max(1, batch_size)
        self.send_delay_ms = send_delay_ms
        self.default_country_code = default_country_code
        self._sleep = sleep or asyncio.sleep

    async def execute(self, input_data: DispatchCampaignInput) -> DispatchCampaignOutput:
        """执行群发

        抛出：
            NotFoundError: 活动不存在
            TemplateContractError: 模板不存在或契约无效（没有任何发送）
            DomainError: 活动已结束
        """
        campaign_id = input_data.campaign_id
        campaign = self.campaign_repository.get_by_id(campaign_id)

        template = resolve_campaign_template(campaign, self.template_repository)
        spec = self.spec_cache.get_or_compile(template)

        campaign.start_sending()
        self.campaign_repository.save(campaign)
        self.transaction_manager.commit()

        rows = self.contact_repository.list_by_campaign(campaign_id)
        batches = [rows[i : i + self.batch_size] for i in range(0, len(rows), self.batch_size)]
        logger.info(
            f"开始群发: campaign={campaign_id}, template={spec.template_name}, "
            f"contacts={len(rows)}, batches={len(batches)}"
        )

        totals = _BatchCounters()
        processed_batches = 0
        stopped = False

        for number, batch in enumerate(batches, start=1):
            if self._halted(campaign_id):
                stopped = True
                break

            counters = _BatchCounters()
            for row in batch:
                if self._halted(campaign_id):
                    stopped = True
                    break
                await self._process_contact(campaign, spec, row, counters)

            # 批次检查点
            self.campaign_repository.add_counters(
                campaign_id, counters.sent, counters.failed, counters.skipped
            )
            self.transaction_manager.commit()
            processed_batches += 1
            totals.sent += counters.sent
            totals.failed += counters.failed
            totals.skipped += counters.skipped
            logger.info(
                f"批次 {number}/{len(batches)} 完成: campaign={campaign_id}, "
                f"sent={counters.sent}, failed={counters.failed}, skipped={counters.skipped}"
            )

            if stopped:
                break

        campaign = self.campaign_repository.get_by_id(campaign_id)
        if stopped:
            logger.info(f"群发已停止: campaign={campaign_id}, status={campaign.status.value}")
        else:
            campaign.complete()
            self.campaign_repository.save(campaign)
            self.transaction_manager.commit()
            logger.info(f"群发结束: campaign={campaign_id}, status={campaign.status.value}")

        return DispatchCampaignOutput(
            campaign_id=campaign_id,
            status=campaign.status.value,
            batches=processed_batches,
            sent=totals.sent,
            failed=totals.failed,
            skipped=totals.skipped,
            stopped=stopped,
        )

    def _halted(self, campaign_id: str) -> bool:
        status = self.campaign_repository.get_status(campaign_id)
        return status is not None and status.halts_dispatch

    async def _process_contact(
        self,
        campaign: Campaign,
        spec: TemplateSpec,
        row: CampaignContact,
        counters: _BatchCounters,
    ) -> None:
        campaign_id = campaign.id

        # 幂等守卫
        current = self.contact_repository.get_status(campaign_id, row.phone)
        if current is None or current.is_processed:
            return

        result = precheck_contact(
            row.to_contact(), spec, campaign.template_variables, self.default_country_code
        )
        if not result.ok:
            if self.contact_repository.mark_skipped(
                campaign_id, row.phone, result.skip_code, result.reason
            ):
                self.transaction_manager.commit()
                counters.skipped += 1
                logger.info(
                    f"跳过联系人: campaign={campaign_id}, phone={row.phone}, "
                    f"code={result.skip_code.value}"
                )
            return

        if not self.contact_repository.claim_pending(campaign_id, row.phone):
            logger.debug(f"联系人已被其他 worker 认领: campaign={campaign_id}, phone={row.phone}")
            return
        self.transaction_manager.commit()

        payload = build_template_payload(result.normalized_phone, spec, result.values)
        try:
            sent = await self.sender.send(payload)
        except Exception as exc:
            logger.exception(f"发送异常: campaign={campaign_id}, phone={row.phone}")
            self.contact_repository.mark_failed(campaign_id, row.phone, str(exc) or type(exc).__name__)
            counters.failed += 1
        else:
            if sent.success and sent.message_id:
                self.contact_repository.mark_sent(campaign_id, row.phone, sent.message_id)
                counters.sent += 1
            else:
                self.contact_repository.mark_failed(
                    campaign_id, row.phone, sent.error_message or "发送失败"
                )
                counters.failed += 1
        self.transaction_manager.commit()

        await self._sleep(self.send_delay_ms / 1000)
