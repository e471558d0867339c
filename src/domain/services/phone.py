"""电话号码规范化与校验

承运方要求 E.164 格式（发送时去掉前导 +）。基于 phonenumbers（libphonenumber 元数据）：
- 没有 + 的号码按默认国家码（巴西 55）对应的地区解析
- 号码必须在该地区的编号计划内有效
- 只接受移动号码（MOBILE 或 FIXED_LINE_OR_MOBILE），固定电话收不到 WhatsApp 消息
"""

import re
from dataclasses import dataclass

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat, PhoneNumberType

DEFAULT_COUNTRY_CODE = "55"

_FORMAT_CHARS = re.compile(r"[\s().\-]")
_NON_DIGITS = re.compile(r"\D")
_LETTERS = re.compile(r"[A-Za-z]")

_MESSAGING_TYPES = frozenset({PhoneNumberType.MOBILE, PhoneNumberType.FIXED_LINE_OR_MOBILE})


@dataclass(frozen=True)
class PhoneValidation:
    is_valid: bool
    normalized: str = ""
    error: str | None = None
    region: str | None = None


def _default_region(default_country_code: str) -> str | None:
    if not default_country_code or not default_country_code.isdigit():
        return None
    region = phonenumbers.region_code_for_country_code(int(default_country_code))
    return None if region == phonenumbers.UNKNOWN_REGION else region


def _parse(phone: str, default_country_code: str) -> phonenumbers.PhoneNumber | None:
    cleaned = _FORMAT_CHARS.sub("", phone.strip())
    try:
        return phonenumbers.parse(cleaned, _default_region(default_country_code))
    except NumberParseException:
        return None


def _fallback_normalize(phone: str, default_country_code: str) -> str:
    """无法解析时：保留数字，10–11 位本国号码补国家码"""
    cleaned = _FORMAT_CHARS.sub("", phone.strip())
    digits = _NON_DIGITS.sub("", cleaned)
    if not digits:
        return ""
    if not cleaned.startswith("+") and len(digits) in (10, 11) and default_country_code:
        digits = f"{default_country_code}{digits}"
    return f"+{digits}"


def normalize_phone_number(phone: str | None, default_country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """规范化为 E.164（+<数字>）；无法提取数字时返回空字符串"""
    if not phone or not phone.strip():
        return ""

    parsed = _parse(phone, default_country_code)
    if parsed is None:
        return _fallback_normalize(phone, default_country_code)
    return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)


def validate_phone_number(
    phone: str | None, default_country_code: str = DEFAULT_COUNTRY_CODE
) -> PhoneValidation:
    """校验电话号码是否可以用于 WhatsApp 发送"""
    if phone is None or not phone.strip():
        return PhoneValidation(is_valid=False, error="电话号码为空")

    if _LETTERS.search(phone) or any(ord(ch) < 32 for ch in phone):
        return PhoneValidation(is_valid=False, error=f"电话号码包含非法字符: {phone!r}")

    parsed = _parse(phone, default_country_code)
    if parsed is None:
        return PhoneValidation(
            is_valid=False,
            normalized=_fallback_normalize(phone, default_country_code),
            error=f"电话号码无法解析: {phone!r}",
        )

    normalized = phonenumbers.format_number(parsed, PhoneNumberFormat.E164)
    region = phonenumbers.region_code_for_number(parsed)

    if not phonenumbers.is_possible_number(parsed):
        return PhoneValidation(
            is_valid=False,
            normalized=normalized,
            error=f"电话号码长度无效（{len(str(parsed.national_number))} 位）",
        )

    if not phonenumbers.is_valid_number(parsed):
        return PhoneValidation(
            is_valid=False, normalized=normalized, error="电话号码不在编号计划内", region=region
        )

    if phonenumbers.number_type(parsed) not in _MESSAGING_TYPES:
        return PhoneValidation(
            is_valid=False, normalized=normalized, error="不是移动电话号码", region=region
        )

    return PhoneValidation(is_valid=True, normalized=normalized, region=region)


def to_carrier_recipient(phone: str) -> str:
    """承运方请求中的 to 字段：去掉前导 +"""
    return phone.lstrip("+")
