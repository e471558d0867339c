"""Precheck 结果值对象

precheck_contact() 的两种结果：
- PrecheckOk：可以发送，携带规范化电话号码和已解析的参数值
- PrecheckSkip：有意不发送，携带稳定的 SkipCode 和可读原因
"""

from dataclasses import dataclass, field

from src.domain.value_objects.skip_code import SkipCode


@dataclass(frozen=True)
class ResolvedParam:
    """已解析的单个参数（key 为占位符键，text 为最终文本）"""

    key: str
    text: str


@dataclass(frozen=True)
class ResolvedButton:
    """已解析的动态 URL 按钮参数"""

    index: int
    params: tuple[ResolvedParam, ...]


@dataclass(frozen=True)
class ResolvedTemplateValues:
    body: tuple[ResolvedParam, ...] = ()
    header: tuple[ResolvedParam, ...] = ()
    buttons: tuple[ResolvedButton, ...] = field(default_factory=tuple)

    def missing_params(self) -> list[str]:
        """列出值为空的参数位置：header、body:<key>、button:<index>:<n>"""
        missing: list[str] = []
        if any(not p.text.strip() for p in self.header):
            missing.append("header")
        for p in self.body:
            if not p.text.strip():
                missing.append(f"body:{p.key}")
        for button in self.buttons:
            for position, p in enumerate(button.params, start=1):
                if not p.text.strip():
                    missing.append(f"button:{button.index}:{position}")
        return missing


@dataclass(frozen=True)
class PrecheckOk:
    normalized_phone: str
    values: ResolvedTemplateValues
    ok: bool = True


@dataclass(frozen=True)
class PrecheckSkip:
    skip_code: SkipCode
    reason: str
    normalized_phone: str | None = None
    ok: bool = False


PrecheckResult = PrecheckOk | PrecheckSkip
