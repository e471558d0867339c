"""MessageTemplate 实体 - 承运方审核过的消息模板（本地同步副本）

属性说明：
- name: 模板名称（承运方唯一）
- language: 语言代码（默认 pt_BR）
- parameter_format: positional / named（原样保存承运方返回值）
- status: 审核状态（APPROVED / PENDING / REJECTED）
- components: 组件列表（HEADER/BODY/FOOTER/BUTTONS），承运方格式
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError


@dataclass
class MessageTemplate:
    id: str
    name: str
    language: str = "pt_BR"
    parameter_format: str = "positional"
    status: str = "APPROVED"
    components: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        name: str,
        components: list[dict[str, Any]],
        language: str = "pt_BR",
        parameter_format: str = "positional",
        status: str = "APPROVED",
    ) -> "MessageTemplate":
        if not name or not name.strip():
            raise DomainError("name 不能为空")

        return cls(
            id=str(uuid4()),
            name=name.strip(),
            language=language or "pt_BR",
            parameter_format=parameter_format or "positional",
            status=status,
            components=list(components or []),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MessageTemplate":
        """从模板快照字典构造（兼容 parameter_format / parameterFormat 两种写法）"""
        return cls(
            id=str(data.get("id") or uuid4()),
            name=str(data.get("name") or ""),
            language=data.get("language") or "pt_BR",
            parameter_format=data.get("parameter_format") or data.get("parameterFormat") or "positional",
            status=data.get("status") or "APPROVED",
            components=list(data.get("components") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "parameter_format": self.parameter_format,
            "status": self.status,
            "components": list(self.components),
        }
