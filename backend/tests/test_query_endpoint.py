"""
Integration tests for the HTTP front end (/query, /health, /metrics).

The orchestrator is stubbed so no real LLM calls are made.
"""
import pytest
from fastapi.testclient import TestClient

from saturn.core import config as config_module
from saturn.core.config import ProviderConfig, Settings
from saturn.main import app
from saturn.routes import query as query_module
from saturn.services.llm.errors import OrchestrationCancelled, TransportError
from saturn.services.llm.orchestration import APOLOGY_MESSAGE


class StubOrchestrator:
    def __init__(self, response=None, error=None):
        self._response = response
        self._error = error
        self.queries = []

    async def answer(self, query, timeout_seconds=None):
        self.queries.append(query)
        if self._error is not None:
            raise self._error
        return self._response


@pytest.fixture
def client():
    return TestClient(app)


def use_orchestrator(monkeypatch, orchestrator):
    monkeypatch.setattr(query_module, "get_orchestrator", lambda: orchestrator)
    return orchestrator


def test_query_returns_answer(client, monkeypatch):
    stub = use_orchestrator(monkeypatch, StubOrchestrator(response="Joe Biden won in 2020."))

    response = client.post("/query", json={"query": "  Who won the 2020 election?  "})

    assert response.status_code == 200
    assert response.json() == {
        "query": "Who won the 2020 election?",
        "response": "Joe Biden won in 2020.",
    }
    assert stub.queries == ["Who won the 2020 election?"]
    assert "X-Trace-ID" in response.headers
    assert "X-Request-ID" in response.headers


def test_query_returns_apology_as_normal_answer(client, monkeypatch):
    use_orchestrator(monkeypatch, StubOrchestrator(response=APOLOGY_MESSAGE))

    response = client.post("/query", json={"query": "q"})

    assert response.status_code == 200
    assert response.json()["response"] == APOLOGY_MESSAGE


def test_query_provider_error_is_bad_gateway(client, monkeypatch):
    use_orchestrator(
        monkeypatch,
        StubOrchestrator(error=TransportError("perplexity", "Failed to fetch response: 503")),
    )

    response = client.post("/query", json={"query": "weather today?"})

    assert response.status_code == 502
    assert response.json() == {
        "query": "weather today?",
        "error": "Failed to fetch response: 503",
    }


def test_query_deadline_is_gateway_timeout(client, monkeypatch):
    use_orchestrator(monkeypatch, StubOrchestrator(error=OrchestrationCancelled(5.0)))

    response = client.post("/query", json={"query": "q"})

    assert response.status_code == 504
    assert "error" in response.json()


def test_blank_query_rejected(client, monkeypatch):
    stub = use_orchestrator(monkeypatch, StubOrchestrator(response="unused"))

    response = client.post("/query", json={"query": "   "})

    assert response.status_code == 400
    assert stub.queries == []
    assert "X-Trace-ID" in response.headers


def test_missing_query_field_rejected(client):
    response = client.post("/query", json={})

    assert response.status_code == 422


def test_trace_id_header_is_preserved(client, monkeypatch):
    use_orchestrator(monkeypatch, StubOrchestrator(response="ok"))

    response = client.post("/query", json={"query": "q"}, headers={"X-Trace-ID": "trace-abc"})

    assert response.headers["X-Trace-ID"] == "trace-abc"


def test_health_check(client):
    response = client.get("/health/")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert set(data["providers"]) == {"primary", "secondary", "tertiary", "structured"}


def test_metrics_endpoint(client):
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "saturn_" in response.text


def test_health_check_does_not_reread_environment(client, monkeypatch):
    def provider(name, api_key=None):
        return ProviderConfig(name=name, api_key=api_key, model="m", base_url="https://x")

    settings = Settings(
        openai=provider("openai", "sk-test"),
        openai_structured=provider("openai_structured", "sk-test"),
        gemini=provider("gemini"),
        perplexity=provider("perplexity"),
    )

    def fail_load_settings(*args, **kwargs):
        raise AssertionError("environment re-read on a health check")

    monkeypatch.setattr(config_module, "_settings", settings)
    monkeypatch.setattr(config_module, "load_settings", fail_load_settings)

    for _ in range(2):
        response = client.get("/health/")
        assert response.status_code == 200

    assert response.json()["providers"] == {
        "primary": True,
        "secondary": False,
        "tertiary": False,
        "structured": True,
    }
