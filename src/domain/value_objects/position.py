"""Position 值对象 - 节点在画布上的位置

业务定义：
- Position 只服务于可视化编辑器
- 校验和执行都不读取它，修改位置不会触发重新校验
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Position:
    """Position 值对象

    属性说明：
    - x: 横坐标（像素，允许负数）
    - y: 纵坐标（像素，允许负数）

    示例：
    >>> Position(x=100, y=200) == Position(x=100, y=200)
    True
    """

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Position":
        if not data:
            return cls()
        return cls(x=float(data.get("x", 0.0)), y=float(data.get("y", 0.0)))

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}
