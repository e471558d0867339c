"""节点级校验规则

每种节点类型一个校验函数，签名统一为 (node, context) -> list[FlowValidationError]。
长度上限与承运方接口限制一致。

注意：
- 只读取 node.structural_data()，忽略 status / validationErrors / position
- "没有入边"的提示由中心校验统一产生，这里不重复
"""

import re
from typing import Any

from src.domain.entities.flow_node import FlowNode
from src.domain.services.condition_evaluator import COMPARING_OPERATORS, KNOWN_OPERATORS
from src.domain.services.node_type_registry import ValidationContext
from src.domain.value_objects.validation_error import FlowValidationError

INVALID_NODE_CONFIG = "invalid-node-config"

MESSAGE_TEXT_MAX = 4096
MEDIA_CAPTION_MAX = 1024
DOCUMENT_FILENAME_MAX = 240
INTERACTIVE_BODY_MAX = 1024
HEADER_MAX = 60
FOOTER_MAX = 60
BUTTON_TITLE_MAX = 20
MAX_REPLY_BUTTONS = 3
LIST_BUTTON_TEXT_MAX = 20
LIST_ROW_TITLE_MAX = 24
LIST_ROW_DESCRIPTION_MAX = 72
MAX_LIST_ROWS = 10
MENU_OPTION_LABEL_MAX = 20
MAX_MENU_OPTIONS = 10
INPUT_QUESTION_MAX = 4096
VARIABLE_NAME_MAX = 64
TEMPLATE_BUTTON_TEXT_MAX = 25
TEMPLATE_URL_MAX = 2000
DELAY_WARNING_SECONDS = 24 * 60 * 60

DEFAULT_LIST_BUTTON_TEXT = "Ver opções"
INPUT_TYPES = frozenset({"text", "number", "email", "phone", "date"})
DELAY_UNITS = {"seconds": 1, "minutes": 60, "hours": 3600}

_VARIABLE_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _header_text(data: dict[str, Any]) -> str:
    # buttons 节点的 header 可能是 {type, text}
    header = data.get("header")
    if isinstance(header, dict):
        return header.get("text") or ""
    return header if isinstance(header, str) else ""


def _error(node: FlowNode, message: str) -> FlowValidationError:
    return FlowValidationError.error(INVALID_NODE_CONFIG, message, node_id=node.id)


def _warning(node: FlowNode, message: str) -> FlowValidationError:
    return FlowValidationError.warning(INVALID_NODE_CONFIG, message, node_id=node.id)


def _check_max(
    errors: list[FlowValidationError], node: FlowNode, value: str, limit: int, label: str
) -> None:
    if value and len(value) > limit:
        errors.append(_error(node, f"{label}超过 {limit} 个字符"))


def _check_header_footer(errors: list[FlowValidationError], node: FlowNode, data: dict) -> None:
    _check_max(errors, node, _header_text(data), HEADER_MAX, "Header ")
    _check_max(errors, node, _text(data, "footer"), FOOTER_MAX, "Footer ")


def _unrouted_options(
    node: FlowNode, context: ValidationContext, options: list[dict[str, Any]], label_key: str
) -> list[FlowValidationError]:
    handles = {edge.source_handle for edge in context.outgoing_edges(node.id)}
    return [
        _warning(node, f"选项 \"{option.get(label_key) or option.get('id')}\" 没有连接到下一个节点")
        for option in options
        if option.get("id") and option.get("id") not in handles
    ]


def validate_message_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    text = _text(data, "text")
    errors: list[FlowValidationError] = []

    if not text.strip():
        errors.append(_error(node, "消息内容不能为空"))
    _check_max(errors, node, text, MESSAGE_TEXT_MAX, "消息内容")
    return errors


def media_reference(node: FlowNode) -> str:
    """媒体引用：mediaUrl / mediaId / <type>Url"""
    data = node.structural_data()
    for key in ("mediaUrl", "mediaId", f"{node.type.value}Url"):
        value = _text(data, key).strip()
        if value:
            return value
    return ""


def validate_media_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    errors: list[FlowValidationError] = []

    if not media_reference(node):
        errors.append(_error(node, "媒体 URL 或媒体 ID 不能为空"))

    if node.type.value != "audio":
        _check_max(errors, node, _text(data, "caption"), MEDIA_CAPTION_MAX, "说明文字")

    if node.type.value == "document":
        _check_max(errors, node, _text(data, "filename"), DOCUMENT_FILENAME_MAX, "文件名")

    return errors


def validate_buttons_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    body = _text(data, "body")
    buttons = list(data.get("buttons") or [])
    errors: list[FlowValidationError] = []

    if not body.strip():
        errors.append(_error(node, "消息内容不能为空"))
    _check_max(errors, node, body, INTERACTIVE_BODY_MAX, "消息内容")
    _check_header_footer(errors, node, data)

    if not buttons:
        errors.append(_error(node, "至少需要 1 个按钮"))
    elif len(buttons) > MAX_REPLY_BUTTONS:
        errors.append(_error(node, f"最多允许 {MAX_REPLY_BUTTONS} 个按钮"))

    for button in buttons:
        title = str(button.get("title") or "")
        if not title.strip():
            errors.append(_error(node, "按钮标题不能为空"))
        elif len(title) > BUTTON_TITLE_MAX:
            errors.append(_error(node, f"按钮 \"{title[:10]}...\" 超过 {BUTTON_TITLE_MAX} 个字符"))

    errors.extend(_unrouted_options(node, context, buttons, "title"))
    return errors


def list_rows(data: dict[str, Any]) -> list[dict[str, Any]]:
    """列表的所有行：sections[].rows，或扁平的 items"""
    sections = data.get("sections")
    if sections:
        return [row for section in sections for row in (section.get("rows") or [])]
    return list(data.get("items") or [])


def validate_list_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    body = _text(data, "body")
    rows = list_rows(data)
    errors: list[FlowValidationError] = []

    if not body.strip():
        errors.append(_error(node, "消息内容不能为空"))
    _check_max(errors, node, body, INTERACTIVE_BODY_MAX, "消息内容")
    _check_header_footer(errors, node, data)
    _check_max(
        errors,
        node,
        _text(data, "buttonText") or DEFAULT_LIST_BUTTON_TEXT,
        LIST_BUTTON_TEXT_MAX,
        "按钮文字",
    )

    if not rows:
        errors.append(_error(node, "至少需要 1 个列表项"))
    elif len(rows) > MAX_LIST_ROWS:
        errors.append(_error(node, f"最多允许 {MAX_LIST_ROWS} 个列表项"))

    for row in rows:
        title = str(row.get("title") or "")
        if not title.strip():
            errors.append(_error(node, "列表项标题不能为空"))
        elif len(title) > LIST_ROW_TITLE_MAX:
            errors.append(_error(node, f"列表项 \"{title[:10]}...\" 超过 {LIST_ROW_TITLE_MAX} 个字符"))
        _check_max(errors, node, str(row.get("description") or ""), LIST_ROW_DESCRIPTION_MAX, "列表项描述")

    return errors


def validate_menu_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    text = _text(data, "text")
    options = list(data.get("options") or [])
    errors: list[FlowValidationError] = []

    if not text.strip():
        errors.append(_error(node, "消息内容不能为空"))
    _check_max(errors, node, text, INTERACTIVE_BODY_MAX, "消息内容")
    _check_header_footer(errors, node, data)

    if not options:
        errors.append(_error(node, "菜单至少需要 1 个选项"))
    elif len(options) > MAX_MENU_OPTIONS:
        errors.append(_error(node, f"最多允许 {MAX_MENU_OPTIONS} 个选项"))

    for option in options:
        label = str(option.get("label") or "")
        if not label.strip():
            errors.append(_error(node, "选项名称不能为空"))
        elif len(label) > MENU_OPTION_LABEL_MAX:
            errors.append(_error(node, f"选项 \"{label[:10]}...\" 超过 {MENU_OPTION_LABEL_MAX} 个字符"))

    errors.extend(_unrouted_options(node, context, options, "label"))
    return errors


def validate_input_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    question = _text(data, "question")
    variable_name = _text(data, "variableName").strip()
    input_type = data.get("inputType") or "text"
    errors: list[FlowValidationError] = []

    if not question.strip():
        errors.append(_error(node, "问题不能为空"))
    _check_max(errors, node, question, INPUT_QUESTION_MAX, "问题")

    if not variable_name:
        errors.append(_error(node, "变量名不能为空"))
    elif len(variable_name) > VARIABLE_NAME_MAX:
        errors.append(_error(node, f"变量名超过 {VARIABLE_NAME_MAX} 个字符"))
    elif not _VARIABLE_NAME.match(variable_name):
        errors.append(_error(node, "变量名只能包含字母、数字和下划线，且不能以数字开头"))

    if input_type not in INPUT_TYPES:
        errors.append(_error(node, f"不支持的输入类型: {input_type}"))

    return errors


def delay_seconds(node: FlowNode) -> int | None:
    """延时总秒数（配置无效时返回 None）"""
    data = node.structural_data()
    amount = data.get("delaySeconds")
    unit = data.get("delayType") or "seconds"
    if isinstance(amount, bool) or not isinstance(amount, int) or unit not in DELAY_UNITS:
        return None
    return amount * DELAY_UNITS[unit]


def validate_delay_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    amount = data.get("delaySeconds")
    unit = data.get("delayType") or "seconds"
    errors: list[FlowValidationError] = []

    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        errors.append(_error(node, "延时必须是至少为 1 的整数"))
    if unit not in DELAY_UNITS:
        errors.append(_error(node, f"不支持的延时单位: {unit}"))

    total = delay_seconds(node)
    if not errors and total is not None and total > DELAY_WARNING_SECONDS:
        errors.append(_warning(node, "延时超过 24 小时"))

    return errors


def validate_template_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    status = str(data.get("templateStatus") or "").upper()
    errors: list[FlowValidationError] = []

    if not _text(data, "templateName").strip():
        errors.append(_error(node, "请选择一个已审核的模板"))

    if status == "PENDING":
        errors.append(_warning(node, "模板尚未通过承运方审核"))
    elif status == "REJECTED":
        errors.append(_error(node, "模板已被承运方拒绝"))

    for button in data.get("buttons") or []:
        _check_max(errors, node, str(button.get("text") or ""), TEMPLATE_BUTTON_TEXT_MAX, "按钮文字")
        _check_max(errors, node, str(button.get("url") or ""), TEMPLATE_URL_MAX, "URL ")

    return errors


def validate_condition_node(node: FlowNode, context: ValidationContext) -> list[FlowValidationError]:
    data = node.structural_data()
    operator = _text(data, "operator").strip()
    value = data.get("value")
    errors: list[FlowValidationError] = []

    if not _text(data, "variable").strip():
        errors.append(_error(node, "条件变量不能为空"))

    if not operator:
        errors.append(_error(node, "条件运算符不能为空"))
    elif operator not in KNOWN_OPERATORS:
        errors.append(_error(node, f"未知的条件运算符: {operator}"))
    elif operator in COMPARING_OPERATORS and (value is None or str(value).strip() == ""):
        errors.append(_error(node, "比较值不能为空"))

    if not context.outgoing_edges(node.id):
        errors.append(_error(node, "条件节点至少需要一条出边"))

    return errors
