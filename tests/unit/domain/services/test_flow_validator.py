"""FlowValidator 单元测试

覆盖：
- 中心校验（start、无效连线、孤立节点、缺少 end、死循环）
- 节点级校验通过注册中心分发
- 编辑器 JSON 中的未知节点类型
"""

import pytest

from src.domain.entities.flow_edge import FlowEdge
from src.domain.entities.flow_node import FlowNode
from src.domain.services.flow_validator import FlowValidator
from src.infrastructure.executors import create_node_type_registry


@pytest.fixture
def validator(fake_sender):
    return FlowValidator(create_node_type_registry(fake_sender))


def _node(node_id, type_, **data):
    return FlowNode.create(type_, data=data, node_id=node_id)


def _edge(source, target, handle=None, edge_id=None):
    return FlowEdge.create(source, target, source_handle=handle, edge_id=edge_id)


def _types(problems):
    return [p.type for p in problems]


def _messages(result):
    return [e.message for e in result.errors]


def _linear_flow():
    nodes = [
        _node("start", "start"),
        _node("msg", "message", text="Olá {{contactName}}"),
        _node("end", "end"),
    ]
    edges = [_edge("start", "msg"), _edge("msg", "end")]
    return nodes, edges


class TestCentralRules:
    """测试：中心校验"""

    def test_valid_linear_flow(self, validator):
        nodes, edges = _linear_flow()

        result = validator.validate(nodes, edges)

        assert result.valid is True
        assert result.can_publish is True
        assert result.errors == ()
        assert result.warnings == ()

    def test_missing_start_node(self, validator):
        result = validator.validate([_node("msg", "message", text="Oi"), _node("end", "end")], [])

        assert "missing-start-node" in _types(result.errors)
        assert result.can_publish is False

    def test_start_without_outgoing_edge(self, validator):
        result = validator.validate([_node("start", "start"), _node("end", "end")], [])

        messages = [e.message for e in result.errors]
        assert "start 节点必须连接到下一个节点" in messages

    def test_multiple_start_nodes(self, validator):
        nodes = [_node("s1", "start"), _node("s2", "start"), _node("end", "end")]
        edges = [_edge("s1", "end"), _edge("s2", "end")]

        result = validator.validate(nodes, edges)

        assert [e.node_id for e in result.errors if e.type == "multiple-start-nodes"] == ["s2"]

    def test_edge_to_missing_node(self, validator):
        nodes, edges = _linear_flow()
        edges.append(_edge("msg", "ghost", edge_id="e-ghost"))

        result = validator.validate(nodes, edges)

        invalid = [e for e in result.errors if e.type == "invalid-edge"]
        assert len(invalid) == 1
        assert invalid[0].edge_id == "e-ghost"

    def test_disconnected_node_is_warning(self, validator):
        nodes, edges = _linear_flow()
        nodes.append(_node("orphan", "message", text="Sozinho", label="Órfão"))

        result = validator.validate(nodes, edges)

        assert result.valid is True
        orphan = [w for w in result.warnings if w.type == "disconnected-node"]
        assert orphan[0].message == '节点 "Órfão" 没有入边'

    def test_note_nodes_are_not_reported_as_disconnected(self, validator):
        nodes, edges = _linear_flow()
        nodes.append(_node("note", "note", text="comentário"))

        result = validator.validate(nodes, edges)

        assert result.warnings == ()

    def test_missing_end_node_is_warning(self, validator):
        nodes = [_node("start", "start"), _node("msg", "message", text="Oi")]

        result = validator.validate(nodes, [_edge("start", "msg")])

        assert result.valid is True
        assert "missing-end-node" in _types(result.warnings)

    def test_loop_without_waiting_node_is_error(self, validator):
        nodes = [
            _node("start", "start"),
            _node("a", "message", text="A"),
            _node("b", "message", text="B"),
        ]
        edges = [_edge("start", "a"), _edge("a", "b"), _edge("b", "a", edge_id="back")]

        result = validator.validate(nodes, edges)

        loops = [e for e in result.errors if e.type == "infinite-loop"]
        assert len(loops) == 1
        assert loops[0].edge_id == "back"

    def test_loop_through_waiting_node_is_allowed(self, validator):
        nodes = [
            _node("start", "start"),
            _node("ask", "input", question="Seu nome?", variableName="nome"),
            _node("b", "message", text="Obrigado"),
            _node("end", "end"),
        ]
        edges = [_edge("start", "ask"), _edge("ask", "b"), _edge("b", "ask"), _edge("b", "end")]

        result = validator.validate(nodes, edges)

        assert "infinite-loop" not in _types(result.errors)

    def test_validation_is_idempotent(self, validator):
        nodes, edges = _linear_flow()
        nodes.append(_node("orphan", "message", text=""))

        assert validator.validate(nodes, edges) == validator.validate(nodes, edges)


class TestNodeRules:
    """测试：节点级校验"""

    def _validate_single(self, validator, node, extra_edges=()):
        nodes = [_node("start", "start"), node, _node("end", "end")]
        edges = [_edge("start", node.id), _edge(node.id, "end"), *extra_edges]
        return validator.validate(nodes, edges)

    def test_empty_message_text(self, validator):
        result = self._validate_single(validator, _node("msg", "message", text="  "))

        assert [e.message for e in result.errors] == ["消息内容不能为空"]
        assert result.errors[0].node_id == "msg"

    def test_message_text_too_long(self, validator):
        result = self._validate_single(validator, _node("msg", "message", text="x" * 4097))

        assert result.errors[0].message == "消息内容超过 4096 个字符"

    def test_too_many_buttons(self, validator):
        buttons = [{"id": f"b{i}", "title": f"Opção {i}"} for i in range(4)]
        node = _node("btn", "buttons", body="Escolha", buttons=buttons)

        result = self._validate_single(validator, node)

        assert "最多允许 3 个按钮" in [e.message for e in result.errors]

    def test_unrouted_button_is_warning(self, validator):
        node = _node("btn", "buttons", body="Escolha", buttons=[{"id": "sim", "title": "Sim"}])

        result = self._validate_single(validator, node)

        assert result.valid is True
        assert any("Sim" in w.message for w in result.warnings)

    def test_long_delay_is_warning(self, validator):
        node = _node("wait", "delay", delaySeconds=25, delayType="hours")

        result = self._validate_single(validator, node)

        assert result.valid is True
        assert [w.message for w in result.warnings] == ["延时超过 24 小时"]

    def test_invalid_delay_amount(self, validator):
        node = _node("wait", "delay", delaySeconds=0, delayType="seconds")

        result = self._validate_single(validator, node)

        assert result.valid is False

    def test_rejected_template(self, validator):
        node = _node("tpl", "template", templateName="promo", templateStatus="REJECTED")

        result = self._validate_single(validator, node)

        assert [e.message for e in result.errors] == ["模板已被承运方拒绝"]

    def test_condition_without_outgoing_edges(self, validator):
        nodes = [
            _node("start", "start"),
            _node("cond", "condition", variable="nome", operator="exists"),
            _node("end", "end"),
        ]
        edges = [_edge("start", "cond")]

        result = validator.validate(nodes, edges)

        assert "条件节点至少需要一条出边" in [e.message for e in result.errors]

    def test_transient_data_is_ignored(self, validator):
        node = _node(
            "msg",
            "message",
            text="Oi",
            status="error",
            validationErrors=[{"message": "antigo"}],
        )

        result = self._validate_single(validator, node)

        assert result.valid is True


class TestCarrierLimits:
    """测试：承运方长度与数量上限（边界值恰好通过，超出一个即报错）"""

    def _validate_single(self, validator, node):
        nodes = [_node("start", "start"), node, _node("end", "end")]
        return validator.validate(nodes, [_edge("start", node.id), _edge(node.id, "end")])

    def _list_node(self, rows=None, button_text="Ver"):
        rows = rows if rows is not None else [{"id": "r1", "title": "Item"}]
        return _node(
            "lst",
            "list",
            body="Escolha",
            buttonText=button_text,
            sections=[{"title": "Seção", "rows": rows}],
        )

    def test_list_row_count(self, validator):
        ten = [{"id": f"r{i}", "title": f"Item {i}"} for i in range(10)]
        eleven = [*ten, {"id": "r10", "title": "Item 10"}]

        assert self._validate_single(validator, self._list_node(ten)).valid is True
        result = self._validate_single(validator, self._list_node(eleven))
        assert "最多允许 10 个列表项" in _messages(result)

    def test_list_row_title_length(self, validator):
        ok = self._list_node([{"id": "r1", "title": "t" * 24}])
        too_long = self._list_node([{"id": "r1", "title": "t" * 25}])

        assert self._validate_single(validator, ok).valid is True
        assert _messages(self._validate_single(validator, too_long)) == [
            "列表项 \"tttttttttt...\" 超过 24 个字符"
        ]

    def test_list_row_description_length(self, validator):
        ok = self._list_node([{"id": "r1", "title": "Item", "description": "d" * 72}])
        too_long = self._list_node([{"id": "r1", "title": "Item", "description": "d" * 73}])

        assert self._validate_single(validator, ok).valid is True
        assert _messages(self._validate_single(validator, too_long)) == ["列表项描述超过 72 个字符"]

    def test_list_button_text_length(self, validator):
        assert self._validate_single(validator, self._list_node(button_text="b" * 20)).valid is True
        result = self._validate_single(validator, self._list_node(button_text="b" * 21))
        assert _messages(result) == ["按钮文字超过 20 个字符"]

    def test_menu_option_count(self, validator):
        options = [{"id": f"o{i}", "label": f"Opção {i}"} for i in range(11)]

        ok = self._validate_single(validator, _node("menu", "menu", text="Menu", options=options[:10]))
        too_many = self._validate_single(validator, _node("menu", "menu", text="Menu", options=options))

        assert ok.valid is True
        assert "最多允许 10 个选项" in _messages(too_many)

    def test_menu_option_label_length(self, validator):
        ok = _node("menu", "menu", text="Menu", options=[{"id": "o1", "label": "l" * 20}])
        too_long = _node("menu", "menu", text="Menu", options=[{"id": "o1", "label": "l" * 21}])

        assert self._validate_single(validator, ok).valid is True
        assert _messages(self._validate_single(validator, too_long)) == [
            "选项 \"llllllllll...\" 超过 20 个字符"
        ]

    def test_button_title_length(self, validator):
        ok = _node("btn", "buttons", body="Escolha", buttons=[{"id": "b1", "title": "x" * 20}])
        too_long = _node("btn", "buttons", body="Escolha", buttons=[{"id": "b1", "title": "x" * 21}])

        assert self._validate_single(validator, ok).valid is True
        assert _messages(self._validate_single(validator, too_long)) == [
            "按钮 \"xxxxxxxxxx...\" 超过 20 个字符"
        ]

    @pytest.mark.parametrize("name", ["nome", "_valor", "resposta_2", "v" * 64])
    def test_input_variable_name_accepted(self, validator, name):
        node = _node("ask", "input", question="Qual?", variableName=name)

        assert self._validate_single(validator, node).valid is True

    @pytest.mark.parametrize(
        "name,message",
        [
            ("2nome", "变量名只能包含字母、数字和下划线，且不能以数字开头"),
            ("meu-nome", "变量名只能包含字母、数字和下划线，且不能以数字开头"),
            ("v" * 65, "变量名超过 64 个字符"),
            ("   ", "变量名不能为空"),
        ],
    )
    def test_input_variable_name_rejected(self, validator, name, message):
        node = _node("ask", "input", question="Qual?", variableName=name)

        assert _messages(self._validate_single(validator, node)) == [message]

    @pytest.mark.parametrize("input_type", ["text", "number", "email", "phone", "date"])
    def test_input_types_accepted(self, validator, input_type):
        node = _node("ask", "input", question="Qual?", variableName="v", inputType=input_type)

        assert self._validate_single(validator, node).valid is True

    def test_unknown_input_type(self, validator):
        node = _node("ask", "input", question="Qual?", variableName="v", inputType="cpf")

        assert _messages(self._validate_single(validator, node)) == ["不支持的输入类型: cpf"]

    def test_media_caption_length(self, validator):
        url = "https://cdn.example/a.png"
        ok = _node("img", "image", mediaUrl=url, caption="c" * 1024)
        too_long = _node("img", "image", mediaUrl=url, caption="c" * 1025)

        assert self._validate_single(validator, ok).valid is True
        assert _messages(self._validate_single(validator, too_long)) == ["说明文字超过 1024 个字符"]

    def test_audio_caption_is_not_checked(self, validator):
        node = _node("aud", "audio", mediaUrl="https://cdn.example/a.ogg", caption="c" * 2000)

        assert self._validate_single(validator, node).valid is True

    def test_document_filename_length(self, validator):
        url = "https://cdn.example/a.pdf"
        ok = _node("doc", "document", mediaUrl=url, filename="f" * 240)
        too_long = _node("doc", "document", mediaUrl=url, filename="f" * 241)

        assert self._validate_single(validator, ok).valid is True
        assert _messages(self._validate_single(validator, too_long)) == ["文件名超过 240 个字符"]


class TestValidateGraph:
    """测试：编辑器 JSON 校验"""

    def test_unknown_node_type_reported(self, validator):
        result = validator.validate_graph(
            [
                {"id": "start", "type": "start", "data": {}},
                {"id": "x", "type": "teleport", "data": {}},
                {"id": "end", "type": "end", "data": {}},
            ],
            [{"id": "e1", "source": "start", "target": "end"}],
        )

        unknown = [e for e in result.errors if e.type == "unknown-node-type"]
        assert len(unknown) == 1
        assert unknown[0].node_id == "x"
        assert result.can_publish is False

    def test_to_dict_shape(self, validator):
        result = validator.validate_graph([{"id": "end", "type": "end", "data": {}}], [])

        data = result.to_dict()

        assert data["valid"] is False
        assert data["canPublish"] is False
        assert data["errors"][0] == {
            "type": "missing-start-node",
            "severity": "error",
            "message": "流程必须有一个 start 节点",
        }
