"""SQLAlchemy MessageTemplate Repository 实现

模板按名称唯一；保存时同时记录契约内容哈希，便于判断模板是否发生变化。
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.entities.message_template import MessageTemplate
from src.domain.exceptions import NotFoundError
from src.domain.services.template_contract import spec_hash
from src.infrastructure.database.models import MessageTemplateModel


class SQLAlchemyMessageTemplateRepository:
    def __init__(self, session: Session):
        self.session = session

    def _to_entity(self, model: MessageTemplateModel) -> MessageTemplate:
        return MessageTemplate(
            id=model.id,
            name=model.name,
            language=model.language,
            parameter_format=model.parameter_format,
            status=model.status,
            components=list(model.components or []),
        )

    def save(self, template: MessageTemplate) -> None:
        """保存模板（同名模板覆盖组件和状态）"""
        stmt = select(MessageTemplateModel).where(MessageTemplateModel.name == template.name)
        model = self.session.scalars(stmt).first()

        if model is None:
            model = MessageTemplateModel(id=template.id, name=template.name)
            self.session.add(model)

        model.language = template.language
        model.parameter_format = template.parameter_format
        model.status = template.status
        model.components = list(template.components)
        model.spec_hash = spec_hash(template)
        self.session.flush()

    def find_by_name(self, name: str) -> MessageTemplate | None:
        stmt = select(MessageTemplateModel).where(MessageTemplateModel.name == name)
        model = self.session.scalars(stmt).first()
        return self._to_entity(model) if model is not None else None

    def get_by_name(self, name: str) -> MessageTemplate:
        """根据名称获取模板

        抛出：
            NotFoundError: 当模板不存在时
        """
        template = self.find_by_name(name)
        if template is None:
            raise NotFoundError(entity_type="MessageTemplate", entity_id=name)
        return template
