"""请求级 Repository 依赖

所有 Repository 共享同一个请求 Session（get_db_session），
用例通过 TransactionManager 控制提交点。
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import (
    SQLAlchemyCampaignContactRepository,
    SQLAlchemyCampaignRepository,
    SQLAlchemyFlowRepository,
    SQLAlchemyMessageTemplateRepository,
)
from src.infrastructure.database.transaction_manager import SQLAlchemyTransactionManager


def get_flow_repository(session: Session = Depends(get_db_session)) -> SQLAlchemyFlowRepository:
    return SQLAlchemyFlowRepository(session)


def get_template_repository(
    session: Session = Depends(get_db_session),
) -> SQLAlchemyMessageTemplateRepository:
    return SQLAlchemyMessageTemplateRepository(session)


def get_campaign_repository(
    session: Session = Depends(get_db_session),
) -> SQLAlchemyCampaignRepository:
    return SQLAlchemyCampaignRepository(session)


def get_campaign_contact_repository(
    session: Session = Depends(get_db_session),
) -> SQLAlchemyCampaignContactRepository:
    return SQLAlchemyCampaignContactRepository(session)


def get_transaction_manager(
    session: Session = Depends(get_db_session),
) -> SQLAlchemyTransactionManager:
    return SQLAlchemyTransactionManager(session)
