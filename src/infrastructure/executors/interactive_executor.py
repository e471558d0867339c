"""Interactive Executors（交互执行器）

Infrastructure 层：发送交互消息并等待用户选择的节点执行器

包括：
- ButtonsExecutor: 回复按钮（最多 3 个）
- ListExecutor: 列表消息（最多 10 行）
- MenuExecutor: 菜单（3 个以内用按钮，超过用列表）
- InputExecutor: 提问并把回答保存到变量

选项选择规则：
- context.user_input 存在时，按选项 ID（其次按标题，不区分大小写）匹配
- 没有 user_input 时选第一个选项（交互式测试运行在这些节点挂起）
- user_input 没有匹配任何选项时不前进（没有匹配的出边）

user_input 被一个节点使用后即清空。
"""

from typing import Any

from src.domain.entities.flow import Flow
from src.domain.entities.flow_node import FlowNode
from src.domain.exceptions import FlowExecutionError
from src.domain.ports.node_executor import ExecutionContext
from src.domain.services.edge_router import default_next_node_id, next_node_id_for_handle
from src.domain.services.node_validators import DEFAULT_LIST_BUTTON_TEXT, list_rows
from src.domain.services.variables import substitute_variables
from src.infrastructure.executors.base_executor import SendingExecutor
from src.infrastructure.whatsapp.message_builder import (
    MAX_REPLY_BUTTONS,
    build_list_message,
    build_reply_buttons_message,
    build_text_message,
)


def _header(node: FlowNode) -> str | None:
    header = node.data.get("header")
    if isinstance(header, dict):
        return header.get("text") or None
    return header or None


class OptionSelectingExecutor(SendingExecutor):
    """按选项路由的交互执行器基类"""

    label_key = "title"

    def options(self, node: FlowNode) -> list[dict[str, Any]]:
        raise NotImplementedError

    def choose(self, node: FlowNode, context: ExecutionContext) -> str | None:
        options = [o for o in self.options(node) if o.get("id")]
        if not options:
            return None

        if context.user_input is None:
            return options[0]["id"]

        answer = str(context.user_input).strip()
        for option in options:
            if option["id"] == answer:
                return option["id"]
        for option in options:
            if str(option.get(self.label_key) or "").strip().lower() == answer.lower():
                return option["id"]
        return None

    def describe(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        return {"selected": self.choose(node, context)}

    def route(self, node: FlowNode, flow: Flow, context: ExecutionContext) -> str | None:
        selected = self.choose(node, context)
        context.user_input = None
        return next_node_id_for_handle(flow, node.id, selected)

    def _body(self, node: FlowNode, context: ExecutionContext, key: str) -> str:
        body = substitute_variables(node.data.get(key) or "", context.variables)
        if not body.strip():
            raise FlowExecutionError(node.id, "消息内容为空")
        return body


class ButtonsExecutor(OptionSelectingExecutor):
    """回复按钮节点执行器

    配置参数：
        body: 消息内容
        header / footer: 可选
        buttons: [{id, title}]
    """

    def options(self, node: FlowNode) -> list[dict[str, Any]]:
        return list(node.data.get("buttons") or [])

    def build_payload(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        return build_reply_buttons_message(
            context.recipient,
            self._body(node, context, "body"),
            [(b["id"], b.get("title") or "") for b in self.options(node) if b.get("id")],
            header=_header(node),
            footer=node.data.get("footer"),
        )


class ListExecutor(OptionSelectingExecutor):
    """列表节点执行器

    配置参数：
        body: 消息内容
        buttonText: 打开列表的按钮文字（默认 "Ver opções"）
        sections: [{title, rows: [{id, title, description}]}] 或扁平的 items
    """

    def options(self, node: FlowNode) -> list[dict[str, Any]]:
        return list_rows(node.data)

    def build_payload(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        sections = node.data.get("sections") or [{"rows": self.options(node)}]
        return build_list_message(
            context.recipient,
            self._body(node, context, "body"),
            node.data.get("buttonText") or DEFAULT_LIST_BUTTON_TEXT,
            sections,
            header=_header(node),
            footer=node.data.get("footer"),
        )


class MenuExecutor(OptionSelectingExecutor):
    """菜单节点执行器

    配置参数：
        text: 消息内容
        options: [{id, label, description}]
    """

    label_key = "label"

    def options(self, node: FlowNode) -> list[dict[str, Any]]:
        return list(node.data.get("options") or [])

    def build_payload(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        text = self._body(node, context, "text")
        options = [o for o in self.options(node) if o.get("id")]

        if len(options) <= MAX_REPLY_BUTTONS:
            return build_reply_buttons_message(
                context.recipient,
                text,
                [(o["id"], o.get("label") or "") for o in options],
                header=_header(node),
                footer=node.data.get("footer"),
            )

        rows = [
            {"id": o["id"], "title": o.get("label") or "", "description": o.get("description")}
            for o in options
        ]
        return build_list_message(
            context.recipient,
            text,
            DEFAULT_LIST_BUTTON_TEXT,
            [{"rows": rows}],
            header=_header(node),
            footer=node.data.get("footer"),
        )


class InputExecutor(SendingExecutor):
    """输入节点执行器

    配置参数：
        question: 问题
        variableName: 保存回答的变量名
    """

    def build_payload(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        question = substitute_variables(node.data.get("question") or "", context.variables)
        if not question.strip():
            raise FlowExecutionError(node.id, "问题为空")
        return build_text_message(context.recipient, question)

    def describe(self, node: FlowNode, context: ExecutionContext) -> dict[str, Any]:
        return {"variableName": node.data.get("variableName"), "answer": context.user_input}

    def route(self, node: FlowNode, flow: Flow, context: ExecutionContext) -> str | None:
        variable_name = (node.data.get("variableName") or "").strip()
        if context.user_input is not None and variable_name:
            context.variables[variable_name] = str(context.user_input)
        context.user_input = None
        return default_next_node_id(flow, node.id)
