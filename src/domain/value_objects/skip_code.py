"""SkipCode 枚举 - 联系人跳过原因码

稳定的原因码，"重发已跳过"流程依赖它判断联系人是否可以重新进入队列。
"""

from enum import Enum


class SkipCode(str, Enum):
    """跳过原因码枚举"""

    MISSING_CONTACT_ID = "MISSING_CONTACT_ID"
    INVALID_PHONE = "INVALID_PHONE"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_CONTRACT_INVALID = "TEMPLATE_CONTRACT_INVALID"
    MISSING_REQUIRED_PARAM = "MISSING_REQUIRED_PARAM"
    UNSUPPORTED_TEMPLATE_FEATURE = "UNSUPPORTED_TEMPLATE_FEATURE"
