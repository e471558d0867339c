"""FlowExecutionEngine 单元测试

使用真实的节点类型注册中心 + FakeSender：
- 线性流程、挂起点、外部输入
- 发送失败、循环、死路、最大步数
- node_statuses 旁路表与事件顺序
"""

import pytest

from src.domain.entities.flow import Flow
from src.domain.exceptions import FlowExecutionError
from src.domain.ports.message_sender import SendResult
from src.domain.ports.node_executor import ExecutionContext
from src.domain.services.flow_execution_engine import FlowExecutionEngine
from src.domain.services.node_type_registry import NodeTypeDefinition, NodeTypeRegistry
from src.domain.value_objects.flow_run_status import FlowRunStatus
from src.domain.value_objects.node_run_status import NodeRunStatus
from src.domain.value_objects.node_type import FlowNodeType
from src.infrastructure.executors import EndExecutor, StartExecutor, create_node_type_registry


def _flow(nodes, edges):
    return Flow.from_graph(
        [{"id": node_id, "type": type_, "data": data} for node_id, type_, data in nodes],
        [
            {"id": f"e{i}", "source": s, "target": t, "sourceHandle": h}
            for i, (s, t, h) in enumerate(edges)
        ],
    )


def _buttons_flow():
    return _flow(
        [
            ("start", "start", {}),
            (
                "btn",
                "buttons",
                {
                    "body": "Quer continuar?",
                    "buttons": [{"id": "sim", "title": "Sim"}, {"id": "nao", "title": "Não"}],
                },
            ),
            ("yes", "message", {"text": "Ótimo!"}),
            ("no", "message", {"text": "Tudo bem."}),
            ("end", "end", {}),
        ],
        [
            ("start", "btn", None),
            ("btn", "yes", "sim"),
            ("btn", "no", "nao"),
            ("yes", "end", None),
            ("no", "end", None),
        ],
    )


@pytest.fixture
def engine(fake_sender):
    return FlowExecutionEngine(create_node_type_registry(fake_sender))


class TestLinearFlow:
    """测试：start → message → end"""

    @pytest.mark.asyncio
    async def test_run_completes_and_sends_once(self, engine, fake_sender):
        flow = _flow(
            [("start", "start", {}), ("msg", "message", {"text": "Olá {{contactName}}"}), ("end", "end", {})],
            [("start", "msg", None), ("msg", "end", None)],
        )
        events = []
        context = ExecutionContext(recipient="5511987654321", variables={"contactName": "Ana"})

        # Act
        result = await engine.run(flow, writer=events.append, context=context)

        # Assert
        assert result.status is FlowRunStatus.COMPLETED
        assert result.succeeded is True
        assert result.messages_sent == 1
        assert result.nodes_executed == 3
        assert result.executed_node_ids == ["start", "msg", "end"]
        assert result.final_result == {"text": "Olá Ana", "messageId": "wamid.1"}
        assert result.node_statuses == {"msg": NodeRunStatus.SUCCESS}
        assert [e.label for e in events] == ["message:processing", "message:success", "finish"]
        assert fake_sender.payloads == [
            {
                "messaging_product": "whatsapp",
                "recipient_type": "individual",
                "to": "5511987654321",
                "type": "text",
                "text": {"body": "Olá Ana", "preview_url": False},
            }
        ]

    @pytest.mark.asyncio
    async def test_end_node_keeps_last_message_result(self, engine):
        flow = _flow(
            [("start", "start", {}), ("msg", "message", {"text": "Oi"}), ("end", "end", {})],
            [("start", "msg", None), ("msg", "end", None)],
        )

        result = await engine.run(flow)

        assert result.status is FlowRunStatus.COMPLETED
        assert result.final_result["text"] == "Oi"

    @pytest.mark.asyncio
    async def test_missing_start_node_raises(self, engine):
        flow = _flow([("msg", "message", {"text": "Oi"})], [])

        with pytest.raises(FlowExecutionError):
            await engine.run(flow)

    @pytest.mark.asyncio
    async def test_explicit_start_node_id(self, engine, fake_sender):
        flow = _flow(
            [("start", "start", {}), ("a", "message", {"text": "A"}), ("b", "message", {"text": "B"})],
            [("start", "a", None), ("a", "b", None)],
        )

        result = await engine.run(flow, start_node_id="b")

        assert result.executed_node_ids == ["b"]
        assert result.status is FlowRunStatus.DEAD_END
        assert fake_sender.payloads[0]["text"]["body"] == "B"


class TestSuspendPoints:
    """测试：交互节点挂起与外部输入"""

    @pytest.mark.asyncio
    async def test_buttons_suspend_interactive_run(self, engine, fake_sender):
        result = await engine.run(_buttons_flow(), stop_at_suspend=True)

        assert result.status is FlowRunStatus.SUSPENDED
        assert result.last_node_id == "btn"
        assert result.messages_sent == 1
        assert fake_sender.payloads[0]["type"] == "interactive"

    @pytest.mark.asyncio
    async def test_without_suspend_first_option_is_taken(self, engine, fake_sender):
        result = await engine.run(_buttons_flow())

        assert result.status is FlowRunStatus.COMPLETED
        assert result.executed_node_ids == ["start", "btn", "yes", "end"]
        assert result.messages_sent == 2

    @pytest.mark.asyncio
    async def test_user_input_matches_label_and_continues(self, engine, fake_sender):
        context = ExecutionContext(recipient="5511987654321", user_input="não")

        result = await engine.run(_buttons_flow(), context=context, stop_at_suspend=True)

        assert result.status is FlowRunStatus.COMPLETED
        assert "no" in result.executed_node_ids
        assert context.user_input is None
        assert fake_sender.payloads[-1]["text"]["body"] == "Tudo bem."

    @pytest.mark.asyncio
    async def test_unmatched_user_input_is_dead_end(self, engine):
        context = ExecutionContext(user_input="talvez")

        result = await engine.run(_buttons_flow(), context=context, stop_at_suspend=True)

        assert result.status is FlowRunStatus.DEAD_END
        assert result.last_node_id == "btn"

    @pytest.mark.asyncio
    async def test_input_node_stores_answer(self, engine, fake_sender):
        flow = _flow(
            [
                ("start", "start", {}),
                ("ask", "input", {"question": "Seu nome?", "variableName": "nome"}),
                ("thanks", "message", {"text": "Obrigado {{nome}}"}),
                ("end", "end", {}),
            ],
            [("start", "ask", None), ("ask", "thanks", None), ("thanks", "end", None)],
        )
        context = ExecutionContext(user_input="Ana")

        result = await engine.run(flow, context=context, stop_at_suspend=True)

        assert result.status is FlowRunStatus.COMPLETED
        assert context.variables["nome"] == "Ana"
        assert fake_sender.payloads[-1]["text"]["body"] == "Obrigado Ana"

    @pytest.mark.asyncio
    async def test_second_interactive_node_suspends_after_input_consumed(self, engine):
        flow = _flow(
            [
                ("start", "start", {}),
                ("ask", "input", {"question": "Nome?", "variableName": "nome"}),
                ("ask2", "input", {"question": "Cidade?", "variableName": "cidade"}),
                ("end", "end", {}),
            ],
            [("start", "ask", None), ("ask", "ask2", None), ("ask2", "end", None)],
        )

        result = await engine.run(
            flow, context=ExecutionContext(user_input="Ana"), stop_at_suspend=True
        )

        assert result.status is FlowRunStatus.SUSPENDED
        assert result.last_node_id == "ask2"


class TestFailuresAndLimits:
    """测试：失败、循环、死路、最大步数"""

    @pytest.mark.asyncio
    async def test_carrier_failure_stops_run(self, engine, fake_sender):
        fake_sender.results = [SendResult.fail("(#131026) 消息无法送达", error_code=131026)]
        flow = _flow(
            [("start", "start", {}), ("msg", "message", {"text": "Oi"}), ("end", "end", {})],
            [("start", "msg", None), ("msg", "end", None)],
        )
        events = []

        result = await engine.run(flow, writer=events.append)

        assert result.status is FlowRunStatus.FAILED
        assert result.succeeded is False
        assert result.error == "(#131026) 消息无法送达"
        assert result.messages_sent == 0
        assert result.node_statuses["msg"] is NodeRunStatus.ERROR
        assert [e.label for e in events] == ["message:processing", "message:error"]
        assert events[-1].error == "(#131026) 消息无法送达"

    @pytest.mark.asyncio
    async def test_sender_exception_is_reported_as_failure(self, engine, fake_sender):
        fake_sender.results = [RuntimeError("conexão recusada")]
        flow = _flow(
            [("start", "start", {}), ("msg", "message", {"text": "Oi"})],
            [("start", "msg", None)],
        )
        events = []

        result = await engine.run(flow, writer=events.append)

        assert result.status is FlowRunStatus.FAILED
        assert result.error == "conexão recusada"
        assert events[-1].status is NodeRunStatus.ERROR

    @pytest.mark.asyncio
    async def test_cycle_is_detected(self, engine, fake_sender):
        flow = _flow(
            [("start", "start", {}), ("a", "message", {"text": "A"}), ("b", "message", {"text": "B"})],
            [("start", "a", None), ("a", "b", None), ("b", "a", None)],
        )

        result = await engine.run(flow)

        assert result.status is FlowRunStatus.CYCLE
        assert result.messages_sent == 2
        assert result.last_node_id == "b"

    @pytest.mark.asyncio
    async def test_dead_end_without_end_node(self, engine):
        flow = _flow(
            [("start", "start", {}), ("msg", "message", {"text": "Oi"})],
            [("start", "msg", None)],
        )

        result = await engine.run(flow)

        assert result.status is FlowRunStatus.DEAD_END
        assert result.succeeded is True

    @pytest.mark.asyncio
    async def test_max_steps(self, fake_sender):
        engine = FlowExecutionEngine(create_node_type_registry(fake_sender), max_steps=2)
        flow = _flow(
            [
                ("start", "start", {}),
                ("a", "message", {"text": "A"}),
                ("b", "message", {"text": "B"}),
                ("end", "end", {}),
            ],
            [("start", "a", None), ("a", "b", None), ("b", "end", None)],
        )

        result = await engine.run(flow)

        assert result.status is FlowRunStatus.MAX_STEPS
        assert result.executed_node_ids == ["start", "a"]

    @pytest.mark.asyncio
    async def test_unregistered_node_type_fails(self):
        registry = NodeTypeRegistry()
        registry.register(NodeTypeDefinition(FlowNodeType.START, StartExecutor()))
        registry.register(NodeTypeDefinition(FlowNodeType.END, EndExecutor()))
        flow = _flow(
            [("start", "start", {}), ("msg", "message", {"text": "Oi"})],
            [("start", "msg", None)],
        )
        events = []

        result = await FlowExecutionEngine(registry).run(flow, writer=events.append)

        assert result.status is FlowRunStatus.FAILED
        assert result.error == "未注册的节点类型: message"
        assert events[0].status is NodeRunStatus.ERROR

    @pytest.mark.asyncio
    async def test_missing_target_node_fails(self, engine):
        flow = _flow([("start", "start", {})], [("start", "ghost", None)])

        result = await engine.run(flow)

        assert result.status is FlowRunStatus.FAILED
        assert result.error == "节点不存在: ghost"
