"""模板契约 (Template Contract)

Domain 层服务：把消息模板编译成 TemplateSpec，按联系人解析占位符，
并构造承运方请求体。

职责：
- compile_template_spec(): 纯函数，违反承运方协议约束时抛 TemplateContractError
- TemplateSpecCache: 按内容哈希缓存编译结果（同一版本只编译一次）
- resolve_var_value(): 把操作员填写的值解析成联系人相关的文本
- precheck_contact(): 发送前的逐联系人检查，返回 PrecheckOk 或 PrecheckSkip
- build_template_payload(): 构造承运方请求体（组件顺序固定）

协议约束（必须精确执行）：
- 位置占位符 {{1}}..{{N}} 必须连续，不能有缺口
- 命名占位符必须匹配 ^[a-z0-9_]+$
- 文本 HEADER 最多 1 个占位符
- 动态 URL 按钮最多 1 个占位符，且只允许位置格式
"""

import hashlib
import json
import logging
import re
import threading
from collections.abc import Mapping
from typing import Any

from src.domain.entities.message_template import MessageTemplate
from src.domain.exceptions import TemplateContractError
from src.domain.services.phone import validate_phone_number
from src.domain.value_objects.contact import Contact
from src.domain.value_objects.precheck_result import (
    PrecheckOk,
    PrecheckResult,
    PrecheckSkip,
    ResolvedButton,
    ResolvedParam,
    ResolvedTemplateValues,
)
from src.domain.value_objects.skip_code import SkipCode
from src.domain.value_objects.template_spec import (
    BodySpec,
    ButtonKind,
    ButtonSpec,
    HeaderSpec,
    ParameterFormat,
    TemplateSpec,
)

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "pt_BR"
DEFAULT_CONTACT_NAME = "Cliente"

_POSITIONAL_TOKEN = re.compile(r"\{\{(\d+)\}\}")
_ANY_TOKEN = re.compile(r"\{\{([^}]*)\}\}")
_NAMED_KEY = re.compile(r"^[a-z0-9_]+$")
_CUSTOM_FIELD_TOKEN = re.compile(r"^\{\{([a-zA-Z0-9_]+)\}\}$")
_NUMERIC_KEY = re.compile(r"^\d+$")

_NAME_TOKENS = frozenset({"{{nome}}", "{{name}}", "{{contact.name}}"})
_PHONE_TOKENS = frozenset({"{{telefone}}", "{{phone}}", "{{contact.phone}}"})
_EMAIL_TOKENS = frozenset({"{{email}}", "{{contact.email}}"})


# ==================== 编译 ====================


def _template_fields(template: MessageTemplate | Mapping[str, Any]) -> tuple[str, str, str, list]:
    if isinstance(template, MessageTemplate):
        return (
            template.name,
            template.language,
            template.parameter_format,
            list(template.components),
        )
    return (
        str(template.get("name") or ""),
        template.get("language") or DEFAULT_LANGUAGE,
        template.get("parameter_format") or template.get("parameterFormat") or "",
        list(template.get("components") or []),
    )


def _parameter_format(raw: Any) -> ParameterFormat:
    # 只有显式的 named 才是命名格式
    return ParameterFormat.NAMED if raw == ParameterFormat.NAMED.value else ParameterFormat.POSITIONAL


def extract_positional_keys(text: str) -> list[str]:
    """提取位置占位符键（升序、去重），缺口时抛 TemplateContractError"""
    numbers = {int(match) for match in _POSITIONAL_TOKEN.findall(text or "")}
    if not numbers:
        return []

    for expected in range(1, max(numbers) + 1):
        if expected not in numbers:
            raise TemplateContractError(f"位置占位符不连续：缺少 {{{{{expected}}}}}")

    return [str(n) for n in sorted(numbers)]


def extract_named_keys(text: str) -> list[str]:
    """提取命名占位符键（保持首次出现顺序），非法字符时抛 TemplateContractError"""
    keys: list[str] = []
    for raw in _ANY_TOKEN.findall(text or ""):
        if not _NAMED_KEY.match(raw):
            raise TemplateContractError(
                f"命名占位符非法：{{{{{raw}}}}}，只能使用小写字母、数字和下划线"
            )
        if raw not in keys:
            keys.append(raw)
    return keys


def _extract_keys(text: str | None, parameter_format: ParameterFormat) -> list[str]:
    if not text or "{{" not in text:
        return []
    if parameter_format is ParameterFormat.NAMED:
        return extract_named_keys(text)
    return extract_positional_keys(text)


def _find_component(components: list[dict[str, Any]], type_: str, **filters: Any) -> dict | None:
    for component in components:
        if str(component.get("type", "")).upper() != type_:
            continue
        if not isinstance(component.get("text"), str):
            continue
        if all(str(component.get(k, "")).upper() == v for k, v in filters.items()):
            return component
    return None


def compile_template_spec(template: MessageTemplate | Mapping[str, Any]) -> TemplateSpec:
    """编译模板契约

    参数：
        template: MessageTemplate 实体或模板快照字典

    返回：
        TemplateSpec

    抛出：
        TemplateContractError: 违反任一协议约束时
    """
    name, language, raw_format, components = _template_fields(template)
    parameter_format = _parameter_format(raw_format)

    body = _find_component(components, "BODY")
    if body is None or not body.get("text"):
        raise TemplateContractError("模板无效：componente BODY ausente（缺少 BODY 组件）")

    header = _find_component(components, "HEADER", format="TEXT")
    header_keys = _extract_keys(header.get("text") if header else None, parameter_format)
    if len(header_keys) > 1:
        raise TemplateContractError("模板无效：文本 HEADER 最多支持 1 个参数")

    body_keys = _extract_keys(body["text"], parameter_format)

    footer = _find_component(components, "FOOTER")

    buttons: list[ButtonSpec] = []
    index = 0
    for component in components:
        if str(component.get("type", "")).upper() != "BUTTONS":
            continue
        for button in component.get("buttons") or []:
            if str(button.get("type", "")).upper() == "URL":
                url = button.get("url") or ""
                is_dynamic = "{{" in url

                if is_dynamic and parameter_format is ParameterFormat.NAMED:
                    raise TemplateContractError(
                        "模板无效：parameter_format=named 时不支持动态 URL 按钮，请改用位置格式或固定 URL"
                    )

                keys = extract_positional_keys(url) if is_dynamic else []
                if len(keys) > 1:
                    raise TemplateContractError("模板无效：动态 URL 按钮最多支持 1 个变量")

                buttons.append(
                    ButtonSpec(
                        kind=ButtonKind.URL,
                        index=index,
                        is_dynamic=is_dynamic,
                        required_keys=tuple(keys),
                    )
                )
            else:
                buttons.append(ButtonSpec(kind=ButtonKind.OTHER, index=index))
            index += 1

    return TemplateSpec(
        template_name=name,
        language=language or DEFAULT_LANGUAGE,
        parameter_format=parameter_format,
        header=HeaderSpec(required_keys=tuple(header_keys)) if header else None,
        body=BodySpec(required_keys=tuple(body_keys)),
        footer=footer["text"] if footer and footer.get("text") else None,
        buttons=tuple(buttons),
    )


def spec_hash(template: MessageTemplate | Mapping[str, Any]) -> str:
    """模板内容哈希（名称、语言、参数格式、组件的规范 JSON 的 sha256）"""
    name, language, raw_format, components = _template_fields(template)
    canonical = json.dumps(
        {
            "name": name,
            "language": language or DEFAULT_LANGUAGE,
            "parameter_format": _parameter_format(raw_format).value,
            "components": components,
        },
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class TemplateSpecCache:
    """TemplateSpec 缓存

    键为模板内容哈希，编译是确定性的，所以同一版本只编译一次。
    编译失败不缓存（每次都重新抛出）。
    """

    def __init__(self) -> None:
        self._specs: dict[str, TemplateSpec] = {}
        self._lock = threading.Lock()

    def get_or_compile(self, template: MessageTemplate | Mapping[str, Any]) -> TemplateSpec:
        key = spec_hash(template)
        with self._lock:
            cached = self._specs.get(key)
        if cached is not None:
            return cached

        spec = compile_template_spec(template)
        with self._lock:
            self._specs.setdefault(key, spec)
            return self._specs[key]

    def __len__(self) -> int:
        return len(self._specs)

    def clear(self) -> None:
        with self._lock:
            self._specs.clear()


# ==================== 解析 ====================


def resolve_var_value(raw: Any, contact: Contact) -> str:
    """解析操作员填写的变量值

    解析顺序：
    1. 内部令牌：{{nome}}/{{name}}、{{telefone}}/{{phone}}、{{email}}
    2. {{identificador}}：联系人自定义字段（不存在时为空字符串）
    3. 其他：原样使用（去掉首尾空白）
    """
    value = "" if raw is None else str(raw).strip()

    if value in _NAME_TOKENS:
        return (contact.name or DEFAULT_CONTACT_NAME).strip()
    if value in _PHONE_TOKENS:
        return (contact.phone or "").strip()
    if value in _EMAIL_TOKENS:
        email = contact.email or (contact.custom_fields or {}).get("email") or ""
        return str(email).strip()

    match = _CUSTOM_FIELD_TOKEN.match(value)
    if match:
        field_value = (contact.custom_fields or {}).get(match.group(1))
        return "" if field_value is None else str(field_value).strip()

    return value


def _positional_values(raw: Any) -> list[str]:
    """位置变量：接受列表，或以数字字符串为键的映射（"1"、"2"……）"""
    if isinstance(raw, (list, tuple)):
        return ["" if v is None else str(v) for v in raw]
    if isinstance(raw, Mapping):
        numbered = {
            int(k): "" if v is None else str(v)
            for k, v in raw.items()
            if _NUMERIC_KEY.match(str(k)) and int(k) >= 1
        }
        if not numbered:
            return []
        return [numbered.get(i, "") for i in range(1, max(numbered) + 1)]
    return []


def _named_values(raw: Any) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    return {str(k): "" if v is None else str(v) for k, v in raw.items()}


def _at(values: list[str], key: str) -> str | None:
    position = int(key) - 1
    return values[position] if 0 <= position < len(values) else None


def resolve_template_values(
    spec: TemplateSpec, contact: Contact, raw_variables: Mapping[str, Any] | None
) -> ResolvedTemplateValues:
    """按契约解析 header / body / 动态按钮的值"""
    raw_variables = raw_variables or {}
    header_keys = spec.header.required_keys if spec.header else ()

    if spec.parameter_format is ParameterFormat.NAMED:
        header_map = _named_values(raw_variables.get("header"))
        body_map = _named_values(raw_variables.get("body"))
        return ResolvedTemplateValues(
            header=tuple(
                ResolvedParam(k, resolve_var_value(header_map.get(k), contact)) for k in header_keys[:1]
            ),
            body=tuple(
                ResolvedParam(k, resolve_var_value(body_map.get(k), contact))
                for k in spec.body.required_keys
            ),
        )

    header_values = _positional_values(raw_variables.get("header"))
    body_values = _positional_values(raw_variables.get("body"))
    button_values = raw_variables.get("buttons") or {}
    if not isinstance(button_values, Mapping):
        button_values = {}

    buttons: list[ResolvedButton] = []
    for button in spec.dynamic_url_buttons:
        params = []
        for key in button.required_keys:
            n = int(key)
            # 兼容两种键：button_{index}_{n-1}（旧）和 button_{index}_{n}
            legacy = button_values.get(f"button_{button.index}_{n - 1}")
            modern = button_values.get(f"button_{button.index}_{n}")
            params.append(
                ResolvedParam(key, resolve_var_value(legacy if legacy is not None else modern, contact))
            )
        buttons.append(ResolvedButton(index=button.index, params=tuple(params)))

    return ResolvedTemplateValues(
        header=tuple(
            ResolvedParam(k, resolve_var_value(_at(header_values, k), contact)) for k in header_keys[:1]
        ),
        body=tuple(
            ResolvedParam(k, resolve_var_value(_at(body_values, k), contact))
            for k in spec.body.required_keys
        ),
        buttons=tuple(buttons),
    )


def precheck_contact(
    contact: Contact,
    spec: TemplateSpec,
    raw_variables: Mapping[str, Any] | None,
    default_country_code: str = "55",
) -> PrecheckResult:
    """发送前逐联系人检查

    检查顺序：
    1. 没有持久化 contact_id → MISSING_CONTACT_ID
    2. 电话号码无效 → INVALID_PHONE
    3. 任一必需参数解析为空 → MISSING_REQUIRED_PARAM

    返回：
        PrecheckOk(normalized_phone, values) 或 PrecheckSkip(skip_code, reason)
    """
    if contact.contact_id is None or not str(contact.contact_id).strip():
        return PrecheckSkip(
            skip_code=SkipCode.MISSING_CONTACT_ID,
            reason="联系人未登记（缺少 contact_id），请先在联系人页面添加后再发送",
        )

    phone = validate_phone_number(contact.phone, default_country_code)
    if not phone.is_valid:
        return PrecheckSkip(
            skip_code=SkipCode.INVALID_PHONE,
            reason=phone.error or "电话号码无效",
            normalized_phone=phone.normalized or None,
        )

    values = resolve_template_values(spec, contact, raw_variables)
    missing = values.missing_params()
    if missing:
        return PrecheckSkip(
            skip_code=SkipCode.MISSING_REQUIRED_PARAM,
            reason=f"必需变量没有值: {', '.join(missing)}",
            normalized_phone=phone.normalized,
        )

    return PrecheckOk(normalized_phone=phone.normalized, values=values)


# ==================== 请求体 ====================


def _parameter(param: ResolvedParam, parameter_format: ParameterFormat) -> dict[str, str]:
    if parameter_format is ParameterFormat.NAMED:
        return {"type": "text", "parameter_name": param.key, "text": param.text}
    return {"type": "text", "text": param.text}


def build_template_payload(
    to: str, spec: TemplateSpec, values: ResolvedTemplateValues
) -> dict[str, Any]:
    """构造承运方模板消息请求体

    组件顺序固定：header（有值时）、body（总是存在，参数可能为空）、
    然后每个动态 URL 按钮一个组件，按钮索引升序。
    """
    components: list[dict[str, Any]] = []

    if values.header:
        components.append(
            {
                "type": "header",
                "parameters": [_parameter(p, spec.parameter_format) for p in values.header],
            }
        )

    components.append(
        {
            "type": "body",
            "parameters": [_parameter(p, spec.parameter_format) for p in values.body],
        }
    )

    for button in sorted(values.buttons, key=lambda b: b.index):
        components.append(
            {
                "type": "button",
                "sub_type": "url",
                "index": button.index,
                "parameters": [{"type": "text", "text": p.text} for p in button.params],
            }
        )

    return {
        "messaging_product": "whatsapp",
        "to": to.lstrip("+"),
        "type": "template",
        "template": {
            "name": spec.template_name,
            "language": {"code": spec.language},
            "components": components,
        },
    }
