from __future__ import annotations

import json
from io import BytesIO

import pytest
from conftest import FakeGateway, make_client
from docx import Document

from hathor_bot.document_builder import DOCX_FILENAME, DOCX_MIMETYPE
from hathor_bot.enums import CompletionErrorKind, ErrorAction
from hathor_bot.errors import CompletionError
from hathor_bot.redis_manager import CONTEXT_KEY_PREFIX
from hathor_bot.response_generator import (DOWNLOAD_HINT_MARKER,
                                           FALLBACK_RESPONSE)

ROSE_REPLY = "🌿 Oils to Help You\n• [Rose Oil](https://hathororganics.com/products/rose-oil) nightly."


def _chat(client, message, session=None):
    headers = {"X-Session-Id": session} if session else {}
    return client.post("/chat", json={"message": message}, headers=headers)


def _stored(fake_redis, session="default"):
    return json.loads(fake_redis.data[f"{CONTEXT_KEY_PREFIX}{session}"])


def _docx_text(data: bytes) -> str:
    return "\n".join(p.text for p in Document(BytesIO(data)).paragraphs)


# ─────────────────────────────────────────────────────────────
# Deterministic paths
# ─────────────────────────────────────────────────────────────
def test_inventory_reply_is_catalog_driven(client, gateway):
    body = _chat(client, "What oils do you have?").get_json()
    assert body["success"] is True
    assert body["inventoryComplete"] is True
    assert '<a href="https://hathororganics.com/products/moringa-oil" target="_blank">Moringa Oil</a>' in body["response"]
    assert "](http" not in body["response"]
    assert gateway.calls == []


def test_inventory_then_follow_up(client, fake_redis, gateway):
    _chat(client, "Show me your complete collection")
    assert _stored(fake_redis)["last_response_type"] == "inventory"

    body = _chat(client, "Are these all the oils you have?").get_json()
    assert body["followUpConfirmed"] is True
    assert "**Total: 20 sacred oils**" in body["response"]
    assert _stored(fake_redis)["last_response_type"] == "follow_up"
    assert gateway.calls == []


def test_follow_up_phrase_on_fresh_session_goes_to_model(client, gateway):
    body = _chat(client, "is that all?").get_json()
    assert "followUpConfirmed" not in body
    assert gateway.calls[0]["user"] == "is that all?"


def test_sessions_are_isolated_by_header(client, gateway):
    _chat(client, "what oils do you have", session="alice")
    bob = _chat(client, "is that all?", session="bob").get_json()
    alice = _chat(client, "is that all?", session="alice").get_json()
    assert "followUpConfirmed" not in bob
    assert alice["followUpConfirmed"] is True
    assert len(gateway.calls) == 1


# ─────────────────────────────────────────────────────────────
# General path
# ─────────────────────────────────────────────────────────────
def test_general_reply_is_stored_verbatim_with_ttl(app_and_client, fake_redis):
    app, client = app_and_client
    body = _chat(client, "I feel tired").get_json()
    stored = _stored(fake_redis)
    assert stored["last_response_type"] == "general"
    assert stored["last_response"] == body["response"]
    assert body["prescriptionAvailable"] is False
    assert fake_redis.ttls[f"{CONTEXT_KEY_PREFIX}default"] == app.config["CONTEXT_TTL_SECONDS"]


def test_general_reply_with_products_offers_download(client_factory):
    client = client_factory(FakeGateway(ROSE_REPLY))
    body = _chat(client, "my skin looks dull").get_json()
    assert body["prescriptionAvailable"] is True
    assert [p["name"] for p in body["prescriptionData"]["products"]] == ["Rose Oil"]
    assert DOWNLOAD_HINT_MARKER in body["response"]
    assert '<a href="https://hathororganics.com/products/rose-oil" target="_blank">Rose Oil</a>' in body["response"]


def test_hair_loss_override(client_factory):
    client = client_factory(FakeGateway("Massage [Rosemary Oil](https://hathororganics.com/products/rosemary-oil) in."))
    body = _chat(client, "I'm losing my hair, please help").get_json()
    rx = body["prescriptionData"]
    assert [p["name"] for p in rx["products"]] == ["Garden Cress Oil", "Rosemary Oil", "Sesame Oil"]
    assert rx["source"] == "hair_loss"
    assert rx["instructions"]["duration"] == "3-6 months"


def test_prescription_is_carried_forward(client_factory):
    client = client_factory(FakeGateway(ROSE_REPLY, "Rest well tonight."))
    _chat(client, "my skin looks dull")
    body = _chat(client, "thank you").get_json()
    assert body["prescriptionAvailable"] is True
    assert body["prescriptionData"]["products"][0]["name"] == "Rose Oil"


# ─────────────────────────────────────────────────────────────
# Fallbacks
# ─────────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "reply,kind",
    [
        (CompletionError(CompletionErrorKind.QUOTA_EXCEEDED, "insufficient credit"), "quota_exceeded"),
        (CompletionError(CompletionErrorKind.INVALID_KEY, "bad key"), "invalid_key"),
        ("", "malformed_response"),
        ("   ", "malformed_response"),
    ],
)
def test_completion_failures_answer_with_fallback(client_factory, fake_redis, reply, kind):
    client = client_factory(FakeGateway(reply))
    resp = _chat(client, "my skin is dry")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"] is True
    assert body["fallback"] is True
    assert body["response"] == FALLBACK_RESPONSE
    assert body["error"]["type"] == kind
    assert _stored(fake_redis)["last_response_type"] == "fallback"


def test_no_gateway_answers_with_fallback(client_factory):
    client = client_factory(None)
    body = _chat(client, "my skin is dry").get_json()
    assert body["fallback"] is True
    assert "error" not in body
    assert body["response"] == FALLBACK_RESPONSE


def test_follow_up_after_fallback_is_general(client_factory):
    gw = FakeGateway(CompletionError(CompletionErrorKind.NETWORK))
    client = client_factory(gw)
    _chat(client, "my skin is dry")
    body = _chat(client, "is that all?").get_json()
    assert "followUpConfirmed" not in body
    assert len(gw.calls) == 2


def test_propagated_errors_still_get_fallback_reply(client_factory):
    client = client_factory(
        FakeGateway(CompletionError(CompletionErrorKind.MODEL_NOT_FOUND)),
        error_policy=lambda err: ErrorAction.PROPAGATE,
    )
    resp = _chat(client, "help")
    assert resp.status_code == 200
    assert resp.get_json() == {"response": FALLBACK_RESPONSE, "success": True, "fallback": True}


def test_unexpected_error_gets_fallback_reply(fake_redis, gateway):
    def broken_policy(req):
        raise RuntimeError("no session for you")

    _, client = make_client(fake_redis, gateway, session_key_policy=broken_policy)
    body = _chat(client, "hello").get_json()
    assert body["fallback"] is True
    assert body["response"] == FALLBACK_RESPONSE


@pytest.mark.parametrize("payload", [{"message": ""}, {"message": "   "}, {"message": 42}, {}, None])
def test_missing_message_is_400(client, payload):
    resp = client.post("/chat", json=payload)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "No message provided", "success": False}


# ─────────────────────────────────────────────────────────────
# Download
# ─────────────────────────────────────────────────────────────
def test_cold_download_serves_sample_document(client):
    resp = client.get("/download-prescription")
    assert resp.status_code == 200
    assert resp.mimetype == DOCX_MIMETYPE
    assert DOCX_FILENAME in resp.headers["Content-Disposition"]
    assert "This is a sample prescription" in _docx_text(resp.data)


def test_download_intent_keeps_context(client_factory, fake_redis):
    client = client_factory(FakeGateway(ROSE_REPLY))
    _chat(client, "my skin looks dull", session="s1")
    before = _stored(fake_redis, "s1")

    body = _chat(client, "Please download my prescription", session="s1").get_json()
    assert body["downloadRequested"] is True
    assert body["prescriptionAvailable"] is True
    assert body["downloadUrl"] == "/download-prescription"
    assert _stored(fake_redis, "s1") == before

    resp = client.get("/download-prescription", headers={"X-Session-Id": "s1"})
    text = _docx_text(resp.data)
    assert "Rose Oil nightly." in text
    assert "sample prescription" not in text


def test_download_intent_without_prescription(client):
    body = _chat(client, "download my prescription").get_json()
    assert body["downloadRequested"] is True
    assert body["prescriptionAvailable"] is False
    assert body["prescriptionData"] is None


# ─────────────────────────────────────────────────────────────
# Service endpoints
# ─────────────────────────────────────────────────────────────
def test_chat_test_endpoint(client):
    assert client.get("/chat/test").get_json() == {"message": "Backend server is running!"}


def test_flags_never_expose_key(client):
    body = client.get("/chat/flags").get_json()
    assert body["api_key_configured"] is False
    assert body["gateway_ready"] is True
    assert "ANTHROPIC_API_KEY" not in body


def test_health(client, fake_redis):
    assert client.get("/health").get_json() == {"status": "healthy", "redis": "connected", "llm": True}
    fake_redis.down = True
    resp = client.get("/health")
    assert resp.status_code == 500
    assert resp.get_json()["redis"] == "disconnected"


def test_reset_clears_session(client, fake_redis):
    _chat(client, "what oils do you have", session="s9")
    resp = client.post("/reset", json={"session_id": "s9"})
    assert resp.get_json() == {"message": "Session reset successfully", "removed": True}
    assert f"{CONTEXT_KEY_PREFIX}s9" not in fake_redis.data

    by_header = client.post("/reset", json={}, headers={"X-Session-Id": "s9"})
    assert by_header.get_json()["removed"] is False


def test_reset_without_session_is_400(client):
    assert client.post("/reset", json={}).status_code == 400


def test_unknown_route_is_json_404(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Endpoint not found"


def test_app_refuses_to_start_without_redis(fake_redis, gateway):
    fake_redis.down = True
    with pytest.raises(RuntimeError):
        make_client(fake_redis, gateway)
