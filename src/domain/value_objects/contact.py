"""Contact 值对象 - 群发输入中的联系人

属性说明：
- phone: 原始电话号码（可能带格式，precheck 时规范化）
- name: 联系人名称
- email: 邮箱（可选）
- custom_fields: 自定义字段（{{campo}} 形式的变量从这里解析）
- contact_id: 持久化联系人 ID；没有 ID 的临时联系人不会被发送
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Contact:
    phone: str
    name: str = ""
    email: str | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict)
    contact_id: str | None = None
