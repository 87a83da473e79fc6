"""Tests for POST /ask-jiji"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from conftest import fake_admin, fake_supabase, make_resource_row, make_settings
from jiji.core.dependencies import get_resource_service
from jiji.database.supabase_client import SupabaseClients
from jiji.main import create_app

AUTH = {"Authorization": "Bearer a.b.c"}


class TestMockMode:
    """No Supabase configuration: synthesized identity, empty search, no logging"""

    def test_explain_rag_end_to_end(self, mock_mode_client):
        response = mock_mode_client.post("/ask-jiji", json={"query": "Explain RAG"}, headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert "Retrieval-Augmented Generation" in body["data"]["answer"]
        assert body["data"]["resources"] == []
        assert "error" not in body

    def test_request_without_header_is_allowed(self, mock_mode_client):
        response = mock_mode_client.post("/ask-jiji", json={"query": "What is deep learning?"})

        assert response.status_code == 200
        assert "Neural networks" in response.json()["data"]["answer"]

    def test_malformed_token_is_rejected(self, mock_mode_client):
        response = mock_mode_client.post(
            "/ask-jiji",
            json={"query": "Explain RAG"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Invalid token format"}

    def test_query_is_trimmed(self, mock_mode_client):
        response = mock_mode_client.post("/ask-jiji", json={"query": "   Explain RAG   "}, headers=AUTH)

        assert response.status_code == 200


class TestValidation:
    @pytest.mark.parametrize("payload", [
        {},
        {"query": ""},
        {"query": "   \n\t "},
        {"query": "x" * 1001},
        {"query": 42},
        {"query": None},
    ])
    def test_invalid_query_returns_400_with_query_detail(self, mock_mode_client, payload):
        response = mock_mode_client.post("/ask-jiji", json=payload, headers=AUTH)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"].startswith("Validation failed: query: ")
        fields = [d["field"] for d in body["details"]]
        assert "query" in fields
        for detail in body["details"]:
            assert set(detail) == {"field", "message", "code"}

    def test_exactly_1000_characters_is_accepted(self, mock_mode_client):
        response = mock_mode_client.post("/ask-jiji", json={"query": "y" * 1000}, headers=AUTH)

        assert response.status_code == 200

    def test_missing_query_reports_missing_code(self, mock_mode_client):
        response = mock_mode_client.post("/ask-jiji", json={"question": "Explain RAG"}, headers=AUTH)

        assert response.status_code == 400
        assert response.json()["details"][0] == {
            "field": "query",
            "message": "Field required",
            "code": "missing",
        }

    def test_request_without_body_reports_query(self, mock_mode_client):
        response = mock_mode_client.post("/ask-jiji", headers=AUTH)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed: query: Field required"
        assert body["details"] == [{"field": "query", "message": "Field required", "code": "missing"}]

    def test_null_body_reports_query(self, mock_mode_client):
        response = mock_mode_client.post(
            "/ask-jiji",
            content=b"null",
            headers={**AUTH, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert [d["field"] for d in response.json()["details"]] == ["query"]

    def test_invalid_json_is_reported_on_body(self, mock_mode_client):
        response = mock_mode_client.post(
            "/ask-jiji",
            content=b'{"query": ',
            headers={**AUTH, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "body"


class TestConfiguredBackend:
    def test_missing_header_returns_401(self, live_client):
        response = live_client.post("/ask-jiji", json={"query": "Explain RAG"})

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Authorization header required. Use: Bearer <token>",
        }

    def test_non_bearer_scheme_returns_401(self, live_client):
        response = live_client.post(
            "/ask-jiji",
            json={"query": "Explain RAG"},
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
        )

        assert response.status_code == 401

    def test_authentication_runs_before_body_validation(self, live_client):
        response = live_client.post("/ask-jiji", json={})

        assert response.status_code == 401

    def test_answer_resources_and_detached_log(self, settings):
        supabase = fake_supabase(
            text_rows=[make_resource_row("r1", "Introduction to RAG")],
            tag_rows=[
                make_resource_row("r1", "Introduction to RAG"),
                make_resource_row("r2", "RAG Tutorial Video", "video"),
            ],
        )
        supabase.auth.get_user.return_value = Mock(user=Mock(id="user-123", email="learner@example.com", role="authenticated"))
        admin = fake_admin()
        app = create_app(settings=settings, clients=SupabaseClients(client=supabase, admin_client=admin))

        with TestClient(app) as client:
            response = client.post("/ask-jiji", json={"query": "Explain RAG"}, headers={"Authorization": "Bearer real.jwt.token"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert [r["id"] for r in data["resources"]] == ["r1", "r2"]
        assert data["resources"][1] == {
            "id": "r2",
            "title": "RAG Tutorial Video",
            "type": "video",
            "url": "https://files.example.com/r2",
        }
        supabase.auth.get_user.assert_called_once_with("real.jwt.token")
        admin.table.assert_called_with("queries")
        inserted = admin.table.return_value.insert.call_args[0][0]
        assert inserted["user_id"] == "user-123"
        assert inserted["query_text"] == "Explain RAG"
        assert inserted["resources_returned"] == ["r1", "r2"]
        assert "Retrieval-Augmented Generation" in inserted["answer_text"]

    def test_log_failure_does_not_reach_client(self, settings):
        supabase = fake_supabase()
        supabase.auth.get_user.return_value = Mock(user=Mock(id="user-123", email=None, role=None))
        admin = fake_admin()
        admin.table.return_value.insert.return_value.execute.side_effect = RuntimeError("insert failed")
        app = create_app(settings=settings, clients=SupabaseClients(client=supabase, admin_client=admin))

        with TestClient(app) as client:
            response = client.post("/ask-jiji", json={"query": "Explain RAG"}, headers={"Authorization": "Bearer real.jwt.token"})

        assert response.status_code == 200
        assert response.json()["data"]["resources"] == []

    def test_search_failure_degrades_to_empty_resources(self, settings):
        supabase = fake_supabase()
        supabase.auth.get_user.return_value = Mock(user=Mock(id="user-123", email="a@b.c", role="authenticated"))
        supabase.table.side_effect = RuntimeError("database unavailable")
        app = create_app(settings=settings, clients=SupabaseClients(client=supabase))

        with TestClient(app) as client:
            response = client.post("/ask-jiji", json={"query": "Explain RAG"}, headers={"Authorization": "Bearer real.jwt.token"})

        assert response.status_code == 200
        assert response.json()["data"]["resources"] == []


class TestErrorHandling:
    def _app_with_failing_search(self, **settings_overrides):
        app = create_app(settings=make_settings(**settings_overrides), clients=SupabaseClients())
        failing = Mock()
        failing.search_resources.side_effect = RuntimeError("search exploded")
        app.dependency_overrides[get_resource_service] = lambda: failing
        return app

    def test_unhandled_error_shows_message_outside_production(self):
        app = self._app_with_failing_search(environment="development")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post("/ask-jiji", json={"query": "Explain RAG"}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "search exploded"}

    def test_unhandled_error_is_generic_in_production(self):
        app = self._app_with_failing_search(environment="production")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post("/ask-jiji", json={"query": "Explain RAG"}, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Internal server error"}

    def test_unknown_route_returns_structured_404(self, mock_mode_client):
        response = mock_mode_client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Route GET /does-not-exist not found"}

    def test_wrong_method_uses_error_envelope(self, mock_mode_client):
        response = mock_mode_client.get("/ask-jiji")

        assert response.status_code == 405
        assert response.json()["success"] is False


class TestRateLimiting:
    def test_requests_over_the_limit_get_429(self):
        app = create_app(
            settings=make_settings(rate_limit="2/minute", rate_limit_enabled=True),
            clients=SupabaseClients(),
        )

        with TestClient(app) as client:
            statuses = [
                client.post("/ask-jiji", json={"query": "Explain RAG"}, headers=AUTH).status_code
                for _ in range(3)
            ]
            limited = client.post("/ask-jiji", json={"query": "Explain RAG"}, headers=AUTH)
            health = client.get("/health")

        assert statuses == [200, 200, 429]
        assert limited.json()["success"] is False
        assert limited.json() == {"success": False, "error": "Rate limit exceeded: 2 per 1 minute"}
        assert health.status_code == 200

    def test_probes_are_not_counted(self):
        app = create_app(
            settings=make_settings(rate_limit="1/minute", rate_limit_enabled=True),
            clients=SupabaseClients(),
        )

        with TestClient(app) as client:
            probes = [client.get(path).status_code for path in ("/health", "/ready", "/health")]
            response = client.post("/ask-jiji", json={"query": "Explain RAG"}, headers=AUTH)

        assert probes == [200, 200, 200]
        assert response.status_code == 200

    def test_disabled_limit_lets_everything_through(self):
        app = create_app(
            settings=make_settings(rate_limit="1/minute", rate_limit_enabled=False),
            clients=SupabaseClients(),
        )

        with TestClient(app) as client:
            statuses = {
                client.post("/ask-jiji", json={"query": "Explain RAG"}, headers=AUTH).status_code
                for _ in range(3)
            }

        assert statuses == {200}
