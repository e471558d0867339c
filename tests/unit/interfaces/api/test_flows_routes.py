"""Flows 路由单元测试

覆盖：
- POST /api/flows/validate
- POST /api/flows/test
- POST /api/flows、GET /api/flows/{flow_id}
- POST /api/flows/{flow_id}/validate、/activate
"""

NODES = [
    {"id": "start", "type": "start", "data": {}},
    {
        "id": "botoes",
        "type": "buttons",
        "data": {
            "body": "Quer continuar?",
            "buttons": [{"id": "sim", "title": "Sim"}, {"id": "nao", "title": "Não"}],
        },
    },
    {"id": "ok", "type": "message", "data": {"text": "Combinado, {{contactName}}"}},
    {"id": "end", "type": "end", "data": {}},
]

EDGES = [
    {"id": "e1", "source": "start", "target": "botoes"},
    {"id": "e2", "source": "botoes", "target": "ok", "sourceHandle": "sim"},
    {"id": "e3", "source": "botoes", "target": "end", "sourceHandle": "nao"},
    {"id": "e4", "source": "ok", "target": "end"},
]


def _save(client, nodes=NODES, edges=EDGES, name="Atendimento"):
    response = client.post("/api/flows", json={"name": name, "nodes": nodes, "edges": edges})
    assert response.status_code == 201
    return response.json()


class TestValidateRoutes:
    """测试：校验端点"""

    def test_validate_valid_graph(self, client):
        response = client.post("/api/flows/validate", json={"nodes": NODES, "edges": EDGES})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["canPublish"] is True
        assert data["errors"] == []

    def test_validate_reports_problems_with_node_ids(self, client):
        response = client.post(
            "/api/flows/validate",
            json={
                "nodes": [
                    {"id": "start", "type": "start", "data": {}},
                    {"id": "solto", "type": "message", "data": {"text": "Oi"}},
                ],
                "edges": [],
            },
        )

        data = response.json()
        assert data["canPublish"] is False
        errors = {(e["type"], e.get("node", {}).get("id")) for e in data["errors"]}
        warnings = {(w["type"], w.get("node", {}).get("id")) for w in data["warnings"]}
        assert ("invalid-node-config", "start") in errors
        assert ("disconnected-node", "solto") in warnings

    def test_validate_saved_flow_not_found(self, client):
        response = client.post("/api/flows/nao-existe/validate")

        assert response.status_code == 404


class TestSaveAndActivateRoutes:
    """测试：保存、读取、发布"""

    def test_save_and_get(self, client):
        saved = _save(client)

        response = client.get(f"/api/flows/{saved['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Atendimento"
        assert data["status"] == "draft"
        assert [n["id"] for n in data["nodes"]] == ["start", "botoes", "ok", "end"]
        assert {e["sourceHandle"] for e in data["edges"] if e["source"] == "botoes"} == {"sim", "nao"}

    def test_save_unknown_node_type_returns_400(self, client):
        response = client.post(
            "/api/flows",
            json={"name": "X", "nodes": [{"id": "a", "type": "fax", "data": {}}], "edges": []},
        )

        assert response.status_code == 400

    def test_get_unknown_flow(self, client):
        assert client.get("/api/flows/nao-existe").status_code == 404

    def test_activate(self, client):
        saved = _save(client)

        response = client.post(f"/api/flows/{saved['id']}/activate")

        assert response.status_code == 200
        assert response.json()["status"] == "active"

    def test_activate_invalid_flow_returns_400(self, client):
        saved = _save(
            client,
            nodes=[
                {"id": "start", "type": "start", "data": {}},
                {"id": "msg", "type": "message", "data": {"text": ""}},
            ],
            edges=[{"id": "e1", "source": "start", "target": "msg"}],
        )

        response = client.post(f"/api/flows/{saved['id']}/activate")

        assert response.status_code == 400
        assert client.get(f"/api/flows/{saved['id']}").json()["status"] == "draft"


class TestFlowTestRoute:
    """测试：交互式测试运行"""

    def test_run_stops_at_buttons(self, client, fake_sender):
        response = client.post(
            "/api/flows/test",
            json={"testPhone": "+5511987654321", "nodes": NODES, "edges": EDGES},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "suspended"
        assert data["stoppedAt"] == "botoes"
        assert data["messagesSent"] == 1
        assert fake_sender.payloads[0]["to"] == "5511987654321"

    def test_run_saved_flow_with_reply(self, client, fake_sender):
        saved = _save(client)

        response = client.post(
            "/api/flows/test",
            json={
                "testPhone": "5511987654321",
                "flowId": saved["id"],
                "contactName": "Ana",
                "userInput": "sim",
            },
        )

        data = response.json()
        assert data["status"] == "completed"
        assert data["success"] is True
        assert fake_sender.payloads[-1]["text"]["body"] == "Combinado, Ana"

    def test_run_without_start_returns_400(self, client):
        response = client.post(
            "/api/flows/test",
            json={
                "testPhone": "5511987654321",
                "nodes": [{"id": "msg", "type": "message", "data": {"text": "Oi"}}],
                "edges": [],
            },
        )

        assert response.status_code == 400

    def test_run_unknown_flow_returns_404(self, client):
        response = client.post(
            "/api/flows/test", json={"testPhone": "5511987654321", "flowId": "nao-existe"}
        )

        assert response.status_code == 404
