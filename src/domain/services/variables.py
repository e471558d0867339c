"""运行变量替换

消息文本中的 {{nome}}、{{contactName}} 之类占位符按运行变量替换，
键不区分大小写，找不到的占位符保持原样。
"""

import re
from collections.abc import Mapping

_PLACEHOLDER = re.compile(r"\{\{\s*([a-zA-Z0-9_.]+)\s*\}\}")


def substitute_variables(text: str, variables: Mapping[str, str]) -> str:
    if not text or "{{" not in text:
        return text or ""

    lowered = {str(k).lower(): v for k, v in variables.items()}

    def _replace(match: re.Match[str]) -> str:
        value = lowered.get(match.group(1).lower())
        return match.group(0) if value is None else str(value)

    return _PLACEHOLDER.sub(_replace, text)
