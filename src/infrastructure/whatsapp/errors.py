"""承运方错误码 → 可读信息

未收录的错误码使用承运方返回的 error.message。
"""

FRIENDLY_ERROR_MESSAGES: dict[int, str] = {
    100: "请求参数无效",
    190: "访问令牌已过期或无效",
    368: "账号因违反政策被临时限制",
    130429: "超过发送速率限制",
    131000: "承运方内部错误",
    131008: "缺少必需参数",
    131009: "参数值无效",
    131021: "收件人不能是发送方号码",
    131026: "消息无法送达（号码可能未注册 WhatsApp）",
    131047: "超过 24 小时会话窗口，只能发送模板消息",
    131048: "因垃圾消息限制被拒绝",
    131051: "不支持的消息类型",
    131056: "对同一收件人发送过于频繁",
    132000: "模板参数数量与审核版本不一致",
    132001: "模板不存在或该语言版本未审核",
    132005: "模板翻译后的文本过长",
    132007: "模板内容违反承运方政策",
    132012: "模板参数格式不匹配",
    132015: "模板已暂停",
    132016: "模板已停用",
    133010: "发送号码未注册",
}


def friendly_error_message(code: int | None, fallback: str | None) -> str:
    if code is not None and code in FRIENDLY_ERROR_MESSAGES:
        return FRIENDLY_ERROR_MESSAGES[code]
    return fallback or "未知错误"


def format_carrier_error(code: int | None, message: str) -> str:
    """规范化错误字符串：(#<code>) <message>"""
    if code is None:
        return message
    return f"(#{code}) {message}"
