"""Flows 路由

定义流程编辑器相关的 API 端点：
- POST /api/flows/validate - 校验未保存的图
- POST /api/flows/test - 交互式测试运行
- POST /api/flows - 保存流程
- GET /api/flows/{flow_id} - 获取流程
- POST /api/flows/{flow_id}/validate - 校验已保存的流程
- POST /api/flows/{flow_id}/activate - 发布流程（必须通过校验）
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.application.use_cases import (
    ActivateFlowUseCase,
    RunFlowTestInput,
    RunFlowTestUseCase,
    SaveFlowInput,
    SaveFlowUseCase,
    ValidateFlowInput,
    ValidateFlowUseCase,
)
from src.domain.exceptions import DomainError, NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import SQLAlchemyFlowRepository
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies import get_container, get_flow_repository
from src.interfaces.api.dto import FlowGraphRequest, FlowResponse, FlowTestRequest, SaveFlowRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flows", tags=["Flows"])


@router.post("/validate")
def validate_graph(
    request: FlowGraphRequest,
    container: ApiContainer = Depends(get_container),
) -> dict[str, Any]:
    """校验未保存的图，返回 {valid, canPublish, errors, warnings}"""
    use_case = ValidateFlowUseCase(validator=container.validator)
    result = use_case.execute(ValidateFlowInput(nodes=request.nodes, edges=request.edges))
    return result.to_dict()


@router.post("/test")
async def test_flow(
    request: FlowTestRequest,
    container: ApiContainer = Depends(get_container),
    flow_repository: SQLAlchemyFlowRepository = Depends(get_flow_repository),
) -> dict[str, Any]:
    """交互式测试运行

    异常处理：
    - 400: 流程为空、没有 start 节点或节点类型未知
    - 404: flowId 对应的流程不存在
    """
    use_case = RunFlowTestUseCase(runner=container.test_runner, flow_repository=flow_repository)
    try:
        report = await use_case.execute(
            RunFlowTestInput(
                test_phone=request.test_phone,
                flow_id=request.flow_id,
                nodes=request.nodes,
                edges=request.edges,
                contact_name=request.contact_name,
                user_input=request.user_input,
            )
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return report.to_dict()


@router.post("", response_model=FlowResponse, status_code=status.HTTP_201_CREATED)
def save_flow(
    request: SaveFlowRequest,
    flow_repository: SQLAlchemyFlowRepository = Depends(get_flow_repository),
    session: Session = Depends(get_db_session),
) -> FlowResponse:
    """保存流程（新建或整体覆盖）"""
    try:
        flow = SaveFlowUseCase(flow_repository).execute(
            SaveFlowInput(
                name=request.name,
                nodes=request.nodes,
                edges=request.edges,
                flow_id=request.id,
            )
        )
        session.commit()
        return FlowResponse.from_entity(flow)
    except DomainError as e:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        session.rollback()
        logger.exception("保存流程失败")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/{flow_id}", response_model=FlowResponse)
def get_flow(
    flow_id: str,
    flow_repository: SQLAlchemyFlowRepository = Depends(get_flow_repository),
) -> FlowResponse:
    try:
        return FlowResponse.from_entity(flow_repository.get_by_id(flow_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{flow_id}/validate")
def validate_flow(
    flow_id: str,
    container: ApiContainer = Depends(get_container),
    flow_repository: SQLAlchemyFlowRepository = Depends(get_flow_repository),
) -> dict[str, Any]:
    use_case = ValidateFlowUseCase(validator=container.validator, flow_repository=flow_repository)
    try:
        result = use_case.execute(ValidateFlowInput(flow_id=flow_id))
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return result.to_dict()


@router.post("/{flow_id}/activate", response_model=FlowResponse)
def activate_flow(
    flow_id: str,
    container: ApiContainer = Depends(get_container),
    flow_repository: SQLAlchemyFlowRepository = Depends(get_flow_repository),
    session: Session = Depends(get_db_session),
) -> FlowResponse:
    """发布流程

    异常处理：
    - 400: 存在 error 级别的校验问题
    - 404: 流程不存在
    """
    use_case = ActivateFlowUseCase(flow_repository=flow_repository, validator=container.validator)
    try:
        output = use_case.execute(flow_id)
        session.commit()
        return FlowResponse.from_entity(output.flow)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainError as e:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
