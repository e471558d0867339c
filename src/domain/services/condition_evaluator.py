"""条件节点求值

支持的运算符：
- equals / not_equals / contains / not_contains：字符串比较，不区分大小写
- greater / less：数值比较，任一侧不是数字时为 False
- exists / not_exists：变量是否存在且非空
"""

from collections.abc import Mapping
from typing import Any

COMPARING_OPERATORS = frozenset(
    {"equals", "not_equals", "contains", "not_contains", "greater", "less"}
)
PRESENCE_OPERATORS = frozenset({"exists", "not_exists"})
KNOWN_OPERATORS = COMPARING_OPERATORS | PRESENCE_OPERATORS


def _to_number(value: Any) -> float | None:
    try:
        number = float(str(value).strip().replace(",", "."))
    except (TypeError, ValueError):
        return None
    # NaN 不参与比较
    return None if number != number else number


def _lookup(variables: Mapping[str, Any], name: str) -> Any:
    if name in variables:
        return variables[name]
    lowered = name.lower()
    for key, value in variables.items():
        if str(key).lower() == lowered:
            return value
    return None


def evaluate_condition(
    variable: str, operator: str, expected: Any, variables: Mapping[str, Any]
) -> bool:
    """对运行变量求值 `variable <operator> expected`

    抛出：
        ValueError: 未知运算符
    """
    actual = _lookup(variables, (variable or "").strip())
    actual_text = "" if actual is None else str(actual).strip()

    if operator == "exists":
        return actual_text != ""
    if operator == "not_exists":
        return actual_text == ""

    expected_text = "" if expected is None else str(expected).strip()

    if operator == "equals":
        return actual_text.lower() == expected_text.lower()
    if operator == "not_equals":
        return actual_text.lower() != expected_text.lower()
    if operator == "contains":
        return expected_text.lower() in actual_text.lower()
    if operator == "not_contains":
        return expected_text.lower() not in actual_text.lower()

    if operator in ("greater", "less"):
        left, right = _to_number(actual_text), _to_number(expected_text)
        if left is None or right is None:
            return False
        return left > right if operator == "greater" else left < right

    raise ValueError(f"未知的条件运算符: {operator}")
