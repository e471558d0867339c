"""Campaigns 路由

定义模板群发相关的 API 端点：
- POST /api/campaigns - 创建 draft 活动
- GET /api/campaigns/{campaign_id} - 获取活动（含计数器）
- POST /api/campaigns/{campaign_id}/dispatch - 执行群发
- POST /api/campaigns/{campaign_id}/pause|resume|cancel - 控制
- POST /api/campaigns/{campaign_id}/resend-skipped - 重新校验被跳过的联系人
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.application.use_cases import (
    CampaignAction,
    ControlCampaignUseCase,
    CreateCampaignInput,
    CreateCampaignUseCase,
    DispatchCampaignInput,
    DispatchCampaignUseCase,
    ResendSkippedUseCase,
)
from src.config import settings
from src.domain.exceptions import DomainError, NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import (
    SQLAlchemyCampaignContactRepository,
    SQLAlchemyCampaignRepository,
    SQLAlchemyMessageTemplateRepository,
)
from src.infrastructure.database.transaction_manager import SQLAlchemyTransactionManager
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies import (
    get_campaign_contact_repository,
    get_campaign_repository,
    get_container,
    get_template_repository,
    get_transaction_manager,
)
from src.interfaces.api.dto import (
    CampaignResponse,
    CreateCampaignRequest,
    DispatchResponse,
    ResendSkippedResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])


@router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED)
def create_campaign(
    request: CreateCampaignRequest,
    campaign_repository: SQLAlchemyCampaignRepository = Depends(get_campaign_repository),
    contact_repository: SQLAlchemyCampaignContactRepository = Depends(
        get_campaign_contact_repository
    ),
    template_repository: SQLAlchemyMessageTemplateRepository = Depends(get_template_repository),
    transaction_manager: SQLAlchemyTransactionManager = Depends(get_transaction_manager),
) -> CampaignResponse:
    use_case = CreateCampaignUseCase(
        campaign_repository=campaign_repository,
        contact_repository=contact_repository,
        template_repository=template_repository,
        transaction_manager=transaction_manager,
        default_country_code=settings.default_country_code,
    )
    try:
        campaign = use_case.execute(
            CreateCampaignInput(
                name=request.name,
                template_name=request.template_name,
                contacts=[c.to_contact() for c in request.contacts],
                template_variables=request.template_variables,
            )
        )
    except DomainError as e:
        transaction_manager.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return CampaignResponse.from_entity(campaign)


@router.get("/{campaign_id}", response_model=CampaignResponse)
def get_campaign(
    campaign_id: str,
    campaign_repository: SQLAlchemyCampaignRepository = Depends(get_campaign_repository),
) -> CampaignResponse:
    try:
        return CampaignResponse.from_entity(campaign_repository.get_by_id(campaign_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{campaign_id}/dispatch", response_model=DispatchResponse)
async def dispatch_campaign(
    campaign_id: str,
    container: ApiContainer = Depends(get_container),
    campaign_repository: SQLAlchemyCampaignRepository = Depends(get_campaign_repository),
    contact_repository: SQLAlchemyCampaignContactRepository = Depends(
        get_campaign_contact_repository
    ),
    template_repository: SQLAlchemyMessageTemplateRepository = Depends(get_template_repository),
    transaction_manager: SQLAlchemyTransactionManager = Depends(get_transaction_manager),
) -> DispatchResponse:
    """执行群发

    异常处理：
    - 400: 模板不存在、契约无效或活动已结束（没有任何发送）
    - 404: 活动不存在
    - 500: 意外错误（已提交的行状态和批次计数器保留）
    """
    use_case = DispatchCampaignUseCase(
        campaign_repository=campaign_repository,
        contact_repository=contact_repository,
        template_repository=template_repository,
        sender=container.sender,
        transaction_manager=transaction_manager,
        spec_cache=container.spec_cache,
        batch_size=settings.dispatch_batch_size,
        send_delay_ms=settings.dispatch_send_delay_ms,
        default_country_code=settings.default_country_code,
    )
    try:
        output = await use_case.execute(DispatchCampaignInput(campaign_id=campaign_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainError as e:
        transaction_manager.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        transaction_manager.rollback()
        logger.exception(f"群发失败: campaign={campaign_id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return DispatchResponse(
        campaign_id=output.campaign_id,
        status=output.status,
        batches=output.batches,
        sent=output.sent,
        failed=output.failed,
        skipped=output.skipped,
        stopped=output.stopped,
    )


def _control(
    campaign_id: str,
    action: CampaignAction,
    campaign_repository: SQLAlchemyCampaignRepository,
    session: Session,
) -> CampaignResponse:
    use_case = ControlCampaignUseCase(
        campaign_repository=campaign_repository,
        transaction_manager=SQLAlchemyTransactionManager(session),
    )
    try:
        return CampaignResponse.from_entity(use_case.execute(campaign_id, action))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainError as e:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{campaign_id}/pause", response_model=CampaignResponse)
def pause_campaign(
    campaign_id: str,
    campaign_repository: SQLAlchemyCampaignRepository = Depends(get_campaign_repository),
    session: Session = Depends(get_db_session),
) -> CampaignResponse:
    return _control(campaign_id, CampaignAction.PAUSE, campaign_repository, session)


@router.post("/{campaign_id}/resume", response_model=CampaignResponse)
def resume_campaign(
    campaign_id: str,
    campaign_repository: SQLAlchemyCampaignRepository = Depends(get_campaign_repository),
    session: Session = Depends(get_db_session),
) -> CampaignResponse:
    return _control(campaign_id, CampaignAction.RESUME, campaign_repository, session)


@router.post("/{campaign_id}/cancel", response_model=CampaignResponse)
def cancel_campaign(
    campaign_id: str,
    campaign_repository: SQLAlchemyCampaignRepository = Depends(get_campaign_repository),
    session: Session = Depends(get_db_session),
) -> CampaignResponse:
    return _control(campaign_id, CampaignAction.CANCEL, campaign_repository, session)


@router.post("/{campaign_id}/resend-skipped", response_model=ResendSkippedResponse)
def resend_skipped(
    campaign_id: str,
    container: ApiContainer = Depends(get_container),
    campaign_repository: SQLAlchemyCampaignRepository = Depends(get_campaign_repository),
    contact_repository: SQLAlchemyCampaignContactRepository = Depends(
        get_campaign_contact_repository
    ),
    template_repository: SQLAlchemyMessageTemplateRepository = Depends(get_template_repository),
    transaction_manager: SQLAlchemyTransactionManager = Depends(get_transaction_manager),
) -> ResendSkippedResponse:
    use_case = ResendSkippedUseCase(
        campaign_repository=campaign_repository,
        contact_repository=contact_repository,
        template_repository=template_repository,
        transaction_manager=transaction_manager,
        spec_cache=container.spec_cache,
        default_country_code=settings.default_country_code,
    )
    try:
        output = use_case.execute(campaign_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainError as e:
        transaction_manager.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ResendSkippedResponse(
        status=output.status, resent=output.resent, still_skipped=output.still_skipped
    )
