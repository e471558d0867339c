"""RegisterTemplateUseCase - 模板登记用例

业务场景：
从承运方同步（或手动录入）一个模板到本地模板库。
登记时先编译契约：契约无效的模板不入库，错误立即返回给操作员。
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities.message_template import MessageTemplate
from src.domain.ports.message_template_repository import MessageTemplateRepository
from src.domain.services.template_contract import TemplateSpecCache, spec_hash
from src.domain.value_objects.template_spec import TemplateSpec

logger = logging.getLogger(__name__)


@dataclass
class RegisterTemplateInput:
    """模板登记输入

    属性说明：
    - name: 模板名称（必填）
    - components: 承运方格式的组件列表
    - language / parameter_format / status: 原样保存
    """

    name: str
    components: list[dict[str, Any]] = field(default_factory=list)
    language: str = "pt_BR"
    parameter_format: str = "positional"
    status: str = "APPROVED"


@dataclass
class TemplateContractOutput:
    template: MessageTemplate
    spec: TemplateSpec
    spec_hash: str


class RegisterTemplateUseCase:
    def __init__(
        self,
        template_repository: MessageTemplateRepository,
        spec_cache: TemplateSpecCache | None = None,
    ):
        self.template_repository = template_repository
        self.spec_cache = spec_cache or TemplateSpecCache()

    def execute(self, input_data: RegisterTemplateInput) -> TemplateContractOutput:
        """登记模板

        抛出：
            DomainError: 名称为空
            TemplateContractError: 契约无效（不入库）
        """
        template = MessageTemplate.create(
            name=input_data.name,
            components=input_data.components,
            language=input_data.language,
            parameter_format=input_data.parameter_format,
            status=input_data.status,
        )
        spec = self.spec_cache.get_or_compile(template)

        self.template_repository.save(template)
        logger.info(f"模板已登记: name={template.name}, format={spec.parameter_format.value}")
        return TemplateContractOutput(template=template, spec=spec, spec_hash=spec_hash(template))


class GetTemplateSpecUseCase:
    """读取模板库中模板的编译结果"""

    def __init__(
        self,
        template_repository: MessageTemplateRepository,
        spec_cache: TemplateSpecCache | None = None,
    ):
        self.template_repository = template_repository
        self.spec_cache = spec_cache or TemplateSpecCache()

    def execute(self, name: str) -> TemplateContractOutput:
        """读取契约

        抛出：
            NotFoundError: 模板不存在
            TemplateContractError: 契约无效
        """
        template = self.template_repository.get_by_name(name)
        spec = self.spec_cache.get_or_compile(template)
        return TemplateContractOutput(template=template, spec=spec, spec_hash=spec_hash(template))
