"""流程校验结果值对象

业务定义：
- FlowValidationError：一条校验问题，必须带上出问题的节点或连线 ID
- severity=error 阻止发布，severity=warning 只是提示
- ValidationResult：一次校验的聚合结果
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ValidationSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class FlowValidationError:
    """一条校验问题

    属性说明：
    - type: 问题标签（如 invalid-node-config、disconnected-node）
    - severity: error / warning
    - message: 可读信息
    - node_id / edge_id: 出问题的节点或连线
    """

    type: str
    severity: ValidationSeverity
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    @classmethod
    def error(
        cls, type: str, message: str, node_id: str | None = None, edge_id: str | None = None
    ) -> "FlowValidationError":
        return cls(type, ValidationSeverity.ERROR, message, node_id, edge_id)

    @classmethod
    def warning(
        cls, type: str, message: str, node_id: str | None = None, edge_id: str | None = None
    ) -> "FlowValidationError":
        return cls(type, ValidationSeverity.WARNING, message, node_id, edge_id)

    @property
    def is_error(self) -> bool:
        return self.severity is ValidationSeverity.ERROR

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.node_id:
            data["node"] = {"id": self.node_id}
        if self.edge_id:
            data["edge"] = {"id": self.edge_id}
        return data


@dataclass(frozen=True)
class ValidationResult:
    """校验聚合结果

    valid 与 can_publish 相同：没有任何 error 级别的问题
    """

    errors: tuple[FlowValidationError, ...] = ()
    warnings: tuple[FlowValidationError, ...] = field(default_factory=tuple)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def can_publish(self) -> bool:
        return self.valid

    def errors_for_node(self, node_id: str) -> list[FlowValidationError]:
        return [e for e in (*self.errors, *self.warnings) if e.node_id == node_id]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "canPublish": self.can_publish,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }
