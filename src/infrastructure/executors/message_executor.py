"""Message Executors（消息执行器）

Infrastructure 层：发送普通消息的节点执行器

包括：
- MessageExecutor: 文本消息
- MediaExecutor: 图片/视频/音频/文档
- TemplateExecutor: 模板消息（节点级 bodyVariables）
"""

from typing import Any

from src.domain.entities.flow_node import FlowNode
from src.domain.exceptions import FlowExecutionError
from src.domain.ports.node_executor import ExecutionContext
from src.domain.services.node_validators import media_reference
from src.domain.services.template_contract import DEFAULT_LANGUAGE, build_template_payload
from src.domain.services.variables import substitute_variables
from src.domain.value_objects.precheck_result import ResolvedParam, ResolvedTemplateValues
from src.domain.value_objects.template_spec import (
    BodySpec,
    HeaderSpec,
    ParameterFormat,
    TemplateSpec,
)
from src.infrastructure.executors.base_executor import SendingExecutor
from src.infrastructure.whatsapp.message_builder import build_media_message, build_text_message


class MessageExecutor(SendingExecutor):
    """文本消息节点执行器

    配置参数：
        text: 消息内容（支持 {{变量}}）
    """

    def _text(self, node: FlowNode, context: ExecutionContext) -> str:
        return substitute_variables(node.data.get("text") or "", context.variables)

    def build_payload(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        text = self._text(node, context)
        if not text.strip():
            raise FlowExecutionError(node.id, "消息内容为空")
        return build_text_message(context.recipient, text)

    def describe(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        return {"text": self._text(node, context)}


class MediaExecutor(SendingExecutor):
    """媒体消息节点执行器

    配置参数：
        mediaUrl / mediaId / <type>Url: 媒体引用
        caption: 说明文字（音频除外）
        filename: 文件名（仅文档）
    """

    def build_payload(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        reference = media_reference(node)
        if not reference:
            raise FlowExecutionError(node.id, "缺少媒体 URL 或媒体 ID")

        caption = node.data.get("caption")
        return build_media_message(
            context.recipient,
            node.type.value,
            reference,
            caption=substitute_variables(caption, context.variables) if caption else None,
            filename=node.data.get("filename"),
        )

    def describe(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        return {"mediaType": node.type.value, "media": media_reference(node)}


def _variable_values(raw: Any, context: ExecutionContext) -> tuple[ResolvedParam, ...]:
    """节点级变量：[{name, value}] 或字符串列表，按顺序对应 {{1}}、{{2}}……"""
    params = []
    for position, item in enumerate(raw or [], start=1):
        value = item.get("value") if isinstance(item, dict) else item
        text = substitute_variables("" if value is None else str(value), context.variables)
        params.append(ResolvedParam(str(position), text))
    return tuple(params)


class TemplateExecutor(SendingExecutor):
    """模板消息节点执行器

    配置参数：
        templateName: 模板名称
        language: 语言代码（默认 pt_BR）
        headerVariables / bodyVariables: 变量列表（值支持 {{变量}}）
    """

    def build_payload(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        name = (node.data.get("templateName") or "").strip()
        if not name:
            raise FlowExecutionError(node.id, "模板节点缺少 templateName")

        header = _variable_values(node.data.get("headerVariables"), context)[:1]
        body = _variable_values(node.data.get("bodyVariables"), context)

        spec = TemplateSpec(
            template_name=name,
            language=node.data.get("language") or DEFAULT_LANGUAGE,
            parameter_format=ParameterFormat.POSITIONAL,
            header=HeaderSpec(required_keys=tuple(p.key for p in header)) if header else None,
            body=BodySpec(required_keys=tuple(p.key for p in body)),
        )
        values = ResolvedTemplateValues(body=body, header=header)
        return build_template_payload(context.recipient, spec, values)

    def describe(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        return {"templateName": node.data.get("templateName")}
