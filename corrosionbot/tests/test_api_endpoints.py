"""API endpoint tests — FastAPI endpoints with a faked classifier and assistant.

Tests the HTTP layer: request/response shapes and error mapping.
No test reaches a real LLM.
"""

import pytest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient

from corrosionbot.chat import CoatingsAssistant
from corrosionbot.llm_router import LLMResult
from corrosionbot.logic.engine import CorrosionEngine
from corrosionbot.logic.errors import UpstreamUnavailable
from corrosionbot.main import app, get_assistant, get_engine

from conftest import FailingClassifier, FakeClassifier, classifier_json


@pytest.fixture
def client(config):
    classifier = FakeClassifier(classifier_json(("pitting", "severe", 0.9), ("fouling", "minor", 0.4)))
    app.dependency_overrides[get_engine] = lambda: CorrosionEngine(classifier=classifier, config=config)
    app.dependency_overrides[get_assistant] = lambda: CoatingsAssistant(config=config)
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# HEALTH & BASIC ENDPOINTS
# =============================================================================

class TestHealthEndpoint:
    def test_health_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_health_reports_masked_provider_status(self, client):
        with patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test-123456789", "GEMINI_API_KEY": ""}):
            data = client.get("/health").json()
        providers = {p["provider"]: p for p in data["providers"]}
        assert providers["openai"] == {"provider": "openai", "configured": True, "masked_key": "sk-t...6789"}
        assert providers["gemini"]["configured"] is False
        assert "sk-test-123456789" not in str(data)

    def test_health_reports_model_readiness(self, client):
        with patch.dict("os.environ", {"OPENAI_API_KEY": "sk-test-123456789"}):
            data = client.get("/health").json()
        assert data["classifierReady"] is True
        assert data["chatReady"] is True
        with patch.dict("os.environ", {"OPENAI_API_KEY": ""}):
            data = client.get("/health").json()
        assert data["classifierReady"] is False

    def test_root_returns_200(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "running" in resp.json()["message"]


class TestOptionEndpoints:
    def test_config_options_shape(self, client):
        data = client.get("/config/options").json()
        assert data["maxImages"] == 5
        assert "Auto" in data["environments"]
        assert "Ballast Tank" in data["areas"]
        assert data["existingSystems"][0] == "Unknown"

    def test_catalog_lists_products_and_families(self, client):
        data = client.get("/catalog").json()
        names = {p["name"] for p in data["products"]}
        assert "Sigmadur 550" in names
        assert "Ecofleet 530" in names
        assert data["areaFamilies"][-1] == "generic"


# =============================================================================
# ANALYZE
# =============================================================================

class TestAnalyzeEndpoint:
    def test_analyze_returns_one_item_per_image(self, client, images, meta):
        resp = client.post("/analyze", json={"images": images, "meta": meta})
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["items"]) == 3
        assert data["disclaimer"]
        assert data["meta"]["estimatedEnv"] == "C5M"
        assert data["meta"]["effectiveEnv"] == "C5M"

    def test_analyze_item_shape(self, client, images, meta):
        item = client.post("/analyze", json={"images": images, "meta": meta}).json()["items"][0]
        assert item["defect"]["type"] == "pitting"
        assert item["defect"]["severity"] == "severe"
        assert "surfacePrep" in item["recommendation"]
        assert "stripe" in item["recommendation"]["products"][0]["dft"]

    def test_padded_items_are_defaults(self, client, images, meta):
        item = client.post("/analyze", json={"images": images, "meta": meta}).json()["items"][2]
        assert item["defect"]["type"] == "general_corrosion"
        assert item["defect"]["confidence"] == 0.5

    def test_override_echoed(self, client, images, meta):
        meta["environment"] = "CX"
        data = client.post("/analyze", json={"images": images, "meta": meta}).json()
        assert data["meta"]["estimatedEnv"] == "C5M"
        assert data["meta"]["effectiveEnv"] == "CX"

    @pytest.mark.parametrize("body", [
        {"images": [], "meta": {}},
        {"meta": {"area": "Deck"}},
        {"images": "data:image/png;base64,AAAA"},
        {"images": ["data:image/png;base64,AAAA"], "meta": "Deck"},
    ])
    def test_invalid_input_returns_400(self, client, body):
        resp = client.post("/analyze", json=body)
        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_no_images_message(self, client):
        resp = client.post("/analyze", json={"images": []})
        assert resp.json() == {"error": "No images"}

    def test_upstream_failure_returns_500(self, client, config, images, meta):
        app.dependency_overrides[get_engine] = lambda: CorrosionEngine(classifier=FailingClassifier(), config=config)
        resp = client.post("/analyze", json={"images": images, "meta": meta})
        assert resp.status_code == 500
        assert "connection refused" in resp.json()["error"]

    def test_unexpected_failure_returns_500(self, client, images):
        broken = MagicMock()
        broken.run.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_engine] = lambda: broken
        resp = client.post("/analyze", json={"images": images})
        assert resp.status_code == 500
        assert resp.json() == {"error": "boom"}


# =============================================================================
# CHAT
# =============================================================================

class TestChatEndpoint:
    @patch("corrosionbot.chat.llm_call")
    def test_chat_returns_answer(self, mock_call, client):
        mock_call.return_value = LLMResult(text="1. Blast to Sa 2½.\n2. Apply stripe coat.")
        resp = client.post("/chat", json={
            "question": "How do I prepare the surface?",
            "meta": {"area": "Deck"},
            "lastResult": {"items": []},
        })
        assert resp.status_code == 200
        assert resp.json()["answer"].startswith("1. Blast")

    @pytest.mark.parametrize("question", [None, "", "   "])
    def test_missing_question_returns_400(self, client, question):
        resp = client.post("/chat", json={"question": question})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing question"}

    @patch("corrosionbot.chat.llm_call")
    def test_chat_upstream_failure_returns_500(self, mock_call, client):
        mock_call.return_value = LLMResult(text="", error="quota exceeded")
        resp = client.post("/chat", json={"question": "Which primer?"})
        assert resp.status_code == 500
        assert "quota exceeded" in resp.json()["error"]

    def test_chat_history_passed_to_assistant(self, client):
        assistant = MagicMock()
        assistant.ask.return_value = "ok"
        app.dependency_overrides[get_assistant] = lambda: assistant
        client.post("/chat", json={
            "question": "And the topcoat?",
            "history": [{"role": "user", "content": "Which primer?"}, {"role": "assistant", "content": "Epoxy."}],
        })
        kwargs = assistant.ask.call_args.kwargs
        assert kwargs["history"][1] == {"role": "assistant", "content": "Epoxy."}

    def test_assistant_unavailable_error_type(self, client):
        assistant = MagicMock()
        assistant.ask.side_effect = UpstreamUnavailable("Assistant call failed: timeout")
        app.dependency_overrides[get_assistant] = lambda: assistant
        resp = client.post("/chat", json={"question": "Why?"})
        assert resp.status_code == 500
        assert resp.json()["error"] == "Assistant call failed: timeout"
