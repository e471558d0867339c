"""MessageTemplateRepository Port - 本地模板库接口"""

from typing import Protocol

from src.domain.entities.message_template import MessageTemplate


class MessageTemplateRepository(Protocol):
    def save(self, template: MessageTemplate) -> None: ...

    def find_by_name(self, name: str) -> MessageTemplate | None: ...

    def get_by_name(self, name: str) -> MessageTemplate:
        """根据名称获取模板

        抛出：
            NotFoundError: 当模板不存在时
        """
        ...
