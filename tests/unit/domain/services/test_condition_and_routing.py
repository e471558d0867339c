"""条件求值 / 变量替换 / 出边选择 单元测试"""

import pytest

from src.domain.entities.flow import Flow
from src.domain.services.condition_evaluator import evaluate_condition
from src.domain.services.edge_router import (
    default_next_node_id,
    find_edge_by_handles,
    next_node_id_for_handle,
)
from src.domain.services.variables import substitute_variables


class TestEvaluateCondition:
    """测试：条件运算符"""

    @pytest.mark.parametrize(
        "operator,expected,actual,outcome",
        [
            ("equals", "SIM", "sim", True),
            ("equals", "sim", "não", False),
            ("not_equals", "sim", "não", True),
            ("contains", "pedido", "Meu Pedido 12", True),
            ("not_contains", "pedido", "olá", True),
            ("greater", "10", "12,5", True),
            ("less", "10", "12", False),
        ],
    )
    def test_comparisons(self, operator, expected, actual, outcome):
        assert evaluate_condition("resposta", operator, expected, {"resposta": actual}) is outcome

    def test_numeric_comparison_with_non_number_is_false(self):
        assert evaluate_condition("idade", "greater", "18", {"idade": "muitos"}) is False

    def test_exists_and_not_exists(self):
        variables = {"nome": "Ana", "vazio": "  "}

        assert evaluate_condition("nome", "exists", None, variables) is True
        assert evaluate_condition("vazio", "exists", None, variables) is False
        assert evaluate_condition("ausente", "not_exists", None, variables) is True

    def test_variable_lookup_is_case_insensitive(self):
        assert evaluate_condition("NOME", "equals", "ana", {"nome": "Ana"}) is True

    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError, match="未知的条件运算符"):
            evaluate_condition("nome", "matches", "x", {"nome": "Ana"})


class TestSubstituteVariables:
    """测试：{{变量}} 替换"""

    def test_known_variables_are_replaced(self):
        text = substitute_variables("Olá {{ contactName }}!", {"contactName": "Ana"})

        assert text == "Olá Ana!"

    def test_unknown_variables_are_kept(self):
        assert substitute_variables("Oi {{apelido}}", {}) == "Oi {{apelido}}"

    def test_lookup_is_case_insensitive(self):
        assert substitute_variables("{{NOME}}", {"nome": "Ana"}) == "Ana"


def _flow(edges):
    nodes = [
        {"id": "a", "type": "buttons", "data": {}},
        {"id": "b", "type": "message", "data": {}},
        {"id": "c", "type": "message", "data": {}},
    ]
    return Flow.from_graph(nodes, edges)


class TestEdgeRouter:
    """测试：出边选择"""

    def test_default_prefers_output_handle(self):
        flow = _flow(
            [
                {"id": "e1", "source": "a", "target": "b"},
                {"id": "e2", "source": "a", "target": "c", "sourceHandle": "output"},
            ]
        )

        assert default_next_node_id(flow, "a") == "c"

    def test_default_falls_back_to_unlabelled_edge(self):
        flow = _flow(
            [
                {"id": "e1", "source": "a", "target": "b", "sourceHandle": "opt-1"},
                {"id": "e2", "source": "a", "target": "c"},
            ]
        )

        assert default_next_node_id(flow, "a") == "c"

    def test_default_without_edges(self):
        assert default_next_node_id(_flow([]), "a") is None

    def test_handle_routing(self):
        flow = _flow(
            [
                {"id": "e1", "source": "a", "target": "b", "sourceHandle": "sim"},
                {"id": "e2", "source": "a", "target": "c", "sourceHandle": "nao"},
            ]
        )

        assert next_node_id_for_handle(flow, "a", "nao") == "c"
        assert next_node_id_for_handle(flow, "a", "talvez") is None
        assert next_node_id_for_handle(flow, "a", None) is None

    def test_handles_are_tried_in_order(self):
        flow = _flow(
            [
                {"id": "e1", "source": "a", "target": "b", "sourceHandle": "yes"},
                {"id": "e2", "source": "a", "target": "c", "sourceHandle": "true"},
            ]
        )

        assert find_edge_by_handles(flow, "a", ("true", "yes")).target == "c"
