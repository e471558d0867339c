"""Flow / MessageTemplate Repository 单元测试"""

import pytest

from src.domain.entities.flow import Flow
from src.domain.entities.message_template import MessageTemplate
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.flow_status import FlowStatus
from src.infrastructure.database.repositories import (
    SQLAlchemyFlowRepository,
    SQLAlchemyMessageTemplateRepository,
)


def _flow(name="Boas-vindas"):
    return Flow.from_graph(
        [
            {"id": "start", "type": "start", "position": {"x": 10, "y": 20}, "data": {}},
            {
                "id": "msg",
                "type": "message",
                "data": {"text": "Oi", "status": "success", "validationErrors": []},
            },
            {"id": "end", "type": "end", "data": {}},
        ],
        [
            {"id": "e1", "source": "start", "target": "msg"},
            {"id": "e2", "source": "msg", "target": "end", "sourceHandle": "output"},
        ],
        name=name,
    )


class TestFlowRepository:
    """测试：流程持久化"""

    def test_save_and_load_graph(self, db_session):
        repo = SQLAlchemyFlowRepository(db_session)
        flow = _flow()

        repo.save(flow)
        db_session.commit()
        loaded = repo.get_by_id(flow.id)

        assert loaded.name == "Boas-vindas"
        assert [n.id for n in loaded.nodes] == ["start", "msg", "end"]
        assert loaded.nodes[0].position.x == 10
        assert [(e.source, e.target, e.source_handle) for e in loaded.edges] == [
            ("start", "msg", None),
            ("msg", "end", "output"),
        ]

    def test_transient_node_data_not_persisted(self, db_session):
        repo = SQLAlchemyFlowRepository(db_session)
        flow = _flow()

        repo.save(flow)
        db_session.commit()

        assert repo.get_by_id(flow.id).get_node("msg").data == {"text": "Oi"}

    def test_two_flows_can_share_node_ids(self, db_session):
        repo = SQLAlchemyFlowRepository(db_session)
        first, second = _flow("A"), _flow("B")

        repo.save(first)
        repo.save(second)
        db_session.commit()

        assert len(repo.find_all()) == 2

    def test_save_replaces_graph_and_status(self, db_session):
        repo = SQLAlchemyFlowRepository(db_session)
        flow = _flow()
        repo.save(flow)
        db_session.commit()

        flow.remove_node("msg")
        flow.activate()
        repo.save(flow)
        db_session.commit()

        loaded = repo.get_by_id(flow.id)
        assert [n.id for n in loaded.nodes] == ["start", "end"]
        assert loaded.edges == []
        assert loaded.status is FlowStatus.ACTIVE

    def test_get_missing_raises(self, db_session):
        with pytest.raises(NotFoundError):
            SQLAlchemyFlowRepository(db_session).get_by_id("flow_nope")

    def test_delete_is_idempotent(self, db_session):
        repo = SQLAlchemyFlowRepository(db_session)
        flow = _flow()
        repo.save(flow)
        db_session.commit()

        repo.delete(flow.id)
        repo.delete(flow.id)
        db_session.commit()

        assert repo.find_by_id(flow.id) is None


class TestMessageTemplateRepository:
    """测试：模板持久化"""

    def test_save_and_find_by_name(self, db_session):
        repo = SQLAlchemyMessageTemplateRepository(db_session)
        template = MessageTemplate.create(
            name="promo", components=[{"type": "BODY", "text": "Oi {{1}}"}]
        )

        repo.save(template)
        loaded = repo.find_by_name("promo")

        assert loaded.components == [{"type": "BODY", "text": "Oi {{1}}"}]
        assert loaded.language == "pt_BR"
        assert loaded.parameter_format == "positional"

    def test_same_name_overwrites(self, db_session):
        repo = SQLAlchemyMessageTemplateRepository(db_session)
        repo.save(MessageTemplate.create(name="promo", components=[{"type": "BODY", "text": "v1"}]))
        repo.save(
            MessageTemplate.create(
                name="promo", components=[{"type": "BODY", "text": "v2"}], status="PAUSED"
            )
        )

        loaded = repo.get_by_name("promo")

        assert loaded.components == [{"type": "BODY", "text": "v2"}]
        assert loaded.status == "PAUSED"

    def test_get_missing_raises(self, db_session):
        repo = SQLAlchemyMessageTemplateRepository(db_session)

        assert repo.find_by_name("nada") is None
        with pytest.raises(NotFoundError):
            repo.get_by_name("nada")
