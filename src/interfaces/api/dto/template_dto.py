"""Template DTO - 模板登记与契约查看"""

from typing import Any

from pydantic import BaseModel, Field


class RegisterTemplateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="模板名称")
    language: str = Field(default="pt_BR", description="语言代码")
    parameter_format: str = Field(default="positional", description="positional / named")
    status: str = Field(default="APPROVED", description="审核状态")
    components: list[dict[str, Any]] = Field(default_factory=list, description="承运方格式的组件")


class TemplateSpecResponse(BaseModel):
    """编译后的模板契约（spec 为 TemplateSpec.to_dict() 的结构）"""

    name: str
    spec: dict[str, Any]
    spec_hash: str | None = None
