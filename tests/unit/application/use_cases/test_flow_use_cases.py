"""流程用例单元测试：保存、校验、发布、试运行"""

import pytest

from src.application.use_cases.run_flow_test import RunFlowTestInput, RunFlowTestUseCase
from src.application.use_cases.save_flow import (
    ActivateFlowUseCase,
    SaveFlowInput,
    SaveFlowUseCase,
)
from src.application.use_cases.validate_flow import ValidateFlowInput, ValidateFlowUseCase
from src.domain.exceptions import DomainError, NotFoundError
from src.domain.services.flow_execution_engine import FlowExecutionEngine
from src.domain.services.flow_test_runner import FlowTestRunner
from src.domain.services.flow_validator import FlowValidator
from src.domain.value_objects.flow_run_status import FlowRunStatus
from src.domain.value_objects.flow_status import FlowStatus
from src.infrastructure.database.repositories import SQLAlchemyFlowRepository
from src.infrastructure.executors import create_node_type_registry

NODES = [
    {"id": "start", "type": "start", "position": {"x": 0, "y": 0}, "data": {}},
    {
        "id": "menu",
        "type": "menu",
        "data": {
            "text": "Olá {{contactName}}, escolha",
            "options": [{"id": "o1", "label": "Vendas"}, {"id": "o2", "label": "Suporte"}],
        },
    },
    {"id": "vendas", "type": "message", "data": {"text": "Vendas"}},
    {"id": "suporte", "type": "message", "data": {"text": "Suporte"}},
    {"id": "end", "type": "end", "data": {}},
]

EDGES = [
    {"id": "e1", "source": "start", "target": "menu"},
    {"id": "e2", "source": "menu", "target": "vendas", "sourceHandle": "o1"},
    {"id": "e3", "source": "menu", "target": "suporte", "sourceHandle": "o2"},
    {"id": "e4", "source": "vendas", "target": "end"},
    {"id": "e5", "source": "suporte", "target": "end"},
]


@pytest.fixture
def flow_repo(db_session):
    return SQLAlchemyFlowRepository(db_session)


@pytest.fixture
def registry(fake_sender):
    return create_node_type_registry(fake_sender)


@pytest.fixture
def validator(registry):
    return FlowValidator(registry)


@pytest.fixture
def saved_flow(flow_repo):
    return SaveFlowUseCase(flow_repo).execute(
        SaveFlowInput(name="Atendimento", nodes=NODES, edges=EDGES)
    )


class TestSaveFlow:
    """测试：保存流程"""

    def test_save_new_flow(self, flow_repo, saved_flow):
        stored = flow_repo.get_by_id(saved_flow.id)

        assert stored.name == "Atendimento"
        assert stored.status is FlowStatus.DRAFT
        assert [n.id for n in stored.nodes] == ["start", "menu", "vendas", "suporte", "end"]
        assert len(stored.edges) == 5

    def test_overwrite_keeps_identity_and_status(self, flow_repo, saved_flow, validator):
        ActivateFlowUseCase(flow_repo, validator).execute(saved_flow.id)

        updated = SaveFlowUseCase(flow_repo).execute(
            SaveFlowInput(
                name="Atendimento v2",
                nodes=[NODES[0], NODES[2], NODES[4]],
                edges=[
                    {"id": "a", "source": "start", "target": "vendas"},
                    {"id": "b", "source": "vendas", "target": "end"},
                ],
                flow_id=saved_flow.id,
            )
        )

        stored = flow_repo.get_by_id(saved_flow.id)
        assert updated.id == saved_flow.id
        assert stored.name == "Atendimento v2"
        assert stored.status is FlowStatus.ACTIVE
        assert stored.created_at == saved_flow.created_at
        assert [n.id for n in stored.nodes] == ["start", "vendas", "end"]

    def test_unknown_node_type_rejected(self, flow_repo):
        with pytest.raises(DomainError):
            SaveFlowUseCase(flow_repo).execute(
                SaveFlowInput(name="X", nodes=[{"id": "a", "type": "fax", "data": {}}])
            )


class TestValidateAndActivate:
    """测试：校验与发布"""

    def test_validate_saved_flow(self, validator, flow_repo, saved_flow):
        result = ValidateFlowUseCase(validator, flow_repo).execute(
            ValidateFlowInput(flow_id=saved_flow.id)
        )

        assert result.can_publish is True

    def test_validate_unsaved_graph_reports_unknown_type(self, validator):
        result = ValidateFlowUseCase(validator).execute(
            ValidateFlowInput(
                nodes=[
                    {"id": "start", "type": "start", "data": {}},
                    {"id": "x", "type": "fax", "data": {}},
                ],
                edges=[{"id": "e1", "source": "start", "target": "x"}],
            )
        )

        assert "unknown-node-type" in [e.type for e in result.errors]

    def test_validate_unknown_flow_id(self, validator, flow_repo):
        with pytest.raises(NotFoundError):
            ValidateFlowUseCase(validator, flow_repo).execute(ValidateFlowInput(flow_id="nao-existe"))

    def test_activate_valid_flow(self, validator, flow_repo, saved_flow):
        output = ActivateFlowUseCase(flow_repo, validator).execute(saved_flow.id)

        assert output.flow.status is FlowStatus.ACTIVE
        assert flow_repo.get_by_id(saved_flow.id).status is FlowStatus.ACTIVE

    def test_activate_rejects_flow_with_errors(self, validator, flow_repo):
        flow = SaveFlowUseCase(flow_repo).execute(
            SaveFlowInput(
                name="Quebrado",
                nodes=[
                    {"id": "start", "type": "start", "data": {}},
                    {"id": "msg", "type": "message", "data": {"text": "  "}},
                ],
                edges=[{"id": "e1", "source": "start", "target": "msg"}],
            )
        )

        with pytest.raises(DomainError, match="流程存在校验错误"):
            ActivateFlowUseCase(flow_repo, validator).execute(flow.id)

        assert flow_repo.get_by_id(flow.id).status is FlowStatus.DRAFT


class TestRunFlowTest:
    """测试：试运行用例"""

    @pytest.fixture
    def runner(self, registry):
        return FlowTestRunner(FlowExecutionEngine(registry))

    @pytest.mark.asyncio
    async def test_unsaved_graph_suspends_at_menu(self, runner, fake_sender):
        report = await RunFlowTestUseCase(runner).execute(
            RunFlowTestInput(test_phone="+5511987654321", nodes=NODES, edges=EDGES, contact_name="Ana")
        )

        assert report.status is FlowRunStatus.SUSPENDED
        assert report.stopped_at == "menu"
        assert len(fake_sender.payloads) == 1
        assert fake_sender.payloads[0]["interactive"]["body"]["text"] == "Olá Ana, escolha"

    @pytest.mark.asyncio
    async def test_saved_flow_with_user_input_follows_choice(
        self, runner, flow_repo, saved_flow, fake_sender
    ):
        report = await RunFlowTestUseCase(runner, flow_repo).execute(
            RunFlowTestInput(test_phone="5511987654321", flow_id=saved_flow.id, user_input="Suporte")
        )

        assert report.status is FlowRunStatus.COMPLETED
        assert report.stopped_at == "end"
        assert fake_sender.payloads[-1]["text"]["body"] == "Suporte"

    @pytest.mark.asyncio
    async def test_empty_graph_raises(self, runner):
        with pytest.raises(DomainError):
            await RunFlowTestUseCase(runner).execute(RunFlowTestInput(test_phone="5511987654321"))
