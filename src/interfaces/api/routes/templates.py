"""Templates 路由

- POST /api/templates - 登记模板（编译契约，无效时 400 且不入库）
- GET /api/templates/{name}/spec - 查看编译后的契约
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.application.use_cases import (
    GetTemplateSpecUseCase,
    RegisterTemplateInput,
    RegisterTemplateUseCase,
)
from src.domain.exceptions import DomainError, NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import SQLAlchemyMessageTemplateRepository
from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies import get_container, get_template_repository
from src.interfaces.api.dto import RegisterTemplateRequest, TemplateSpecResponse

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.post("", response_model=TemplateSpecResponse, status_code=status.HTTP_201_CREATED)
def register_template(
    request: RegisterTemplateRequest,
    container: ApiContainer = Depends(get_container),
    template_repository: SQLAlchemyMessageTemplateRepository = Depends(get_template_repository),
    session: Session = Depends(get_db_session),
) -> TemplateSpecResponse:
    use_case = RegisterTemplateUseCase(template_repository, spec_cache=container.spec_cache)
    try:
        output = use_case.execute(
            RegisterTemplateInput(
                name=request.name,
                components=request.components,
                language=request.language,
                parameter_format=request.parameter_format,
                status=request.status,
            )
        )
        session.commit()
    except DomainError as e:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return TemplateSpecResponse(
        name=output.template.name, spec=output.spec.to_dict(), spec_hash=output.spec_hash
    )


@router.get("/{name}/spec", response_model=TemplateSpecResponse)
def get_template_spec(
    name: str,
    container: ApiContainer = Depends(get_container),
    template_repository: SQLAlchemyMessageTemplateRepository = Depends(get_template_repository),
) -> TemplateSpecResponse:
    use_case = GetTemplateSpecUseCase(template_repository, spec_cache=container.spec_cache)
    try:
        output = use_case.execute(name)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DomainError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return TemplateSpecResponse(
        name=output.template.name, spec=output.spec.to_dict(), spec_hash=output.spec_hash
    )
