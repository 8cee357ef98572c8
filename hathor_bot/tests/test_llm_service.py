from __future__ import annotations

import asyncio
import inspect
import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from types import SimpleNamespace

import anthropic
import httpx
import pytest
from conftest import make_client

from hathor_bot.config import TestingConfig
from hathor_bot.enums import CompletionErrorKind
from hathor_bot.errors import CompletionError
from hathor_bot.llm_service import (AnthropicGateway, build_gateway,
                                    classify_anthropic_error)

_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _status_error(cls, status: int, message: str = "error", body=None):
    return cls(message, response=httpx.Response(status, request=_REQUEST), body=body)


@pytest.mark.parametrize(
    "exc,kind",
    [
        (_status_error(anthropic.AuthenticationError, 401), CompletionErrorKind.INVALID_KEY),
        (_status_error(anthropic.PermissionDeniedError, 403), CompletionErrorKind.INVALID_KEY),
        (_status_error(anthropic.RateLimitError, 429), CompletionErrorKind.RATE_LIMITED),
        (_status_error(anthropic.NotFoundError, 404), CompletionErrorKind.MODEL_NOT_FOUND),
        (_status_error(anthropic.InternalServerError, 500), CompletionErrorKind.NETWORK),
        (anthropic.APIConnectionError(request=_REQUEST), CompletionErrorKind.NETWORK),
        (anthropic.APITimeoutError(request=_REQUEST), CompletionErrorKind.NETWORK),
        (_status_error(anthropic.BadRequestError, 400, "Your credit balance is too low"),
         CompletionErrorKind.QUOTA_EXCEEDED),
        (_status_error(anthropic.APIStatusError, 402), CompletionErrorKind.QUOTA_EXCEEDED),
        (ValueError("something odd"), CompletionErrorKind.UNKNOWN),
    ],
)
def test_classify_anthropic_error(exc, kind):
    assert classify_anthropic_error(exc).kind == kind


def test_classify_reads_error_type_and_status():
    exc = _status_error(
        anthropic.RateLimitError, 429,
        body={"type": "error", "error": {"type": "rate_limit_error", "message": "slow down"}},
    )
    err = classify_anthropic_error(exc)
    assert err.code == "rate_limit_error"
    assert err.status == 429
    assert err.to_diagnostic()["type"] == "rate_limited"


def test_classify_passes_completion_errors_through():
    original = CompletionError(CompletionErrorKind.MALFORMED_RESPONSE)
    assert classify_anthropic_error(original) is original


class _Messages:
    def __init__(self, result):
        self.result = result
        self.kwargs = None

    async def create(self, *, model, system, messages, temperature, max_tokens):
        self.kwargs = {
            "model": model,
            "system": system,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class _Client:
    """Stands in for AsyncAnthropic as an async context manager."""

    def __init__(self, messages):
        self.messages = messages
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True
        return False


def _gateway(result):
    messages = _Messages(result)
    clients = []

    def factory():
        clients.append(_Client(messages))
        return clients[-1]

    gw = AnthropicGateway("", model="test-model", temperature=0.2, max_tokens=50,
                          client_factory=factory)
    return gw, messages, clients


def _text_block(text):
    return SimpleNamespace(type="text", text=text)


def test_complete_joins_text_blocks():
    gw, messages, _ = _gateway(SimpleNamespace(content=[_text_block("Hello "), _text_block("seeker")]))
    assert asyncio.run(gw.complete("SYS", "hi")) == "Hello seeker"
    assert messages.kwargs == {
        "model": "test-model",
        "system": "SYS",
        "messages": [{"role": "user", "content": "hi"}],
        "temperature": 0.2,
        "max_tokens": 50,
    }


@pytest.mark.parametrize(
    "content",
    [[], [_text_block("   ")], [SimpleNamespace(type="tool_use", id="x")]],
)
def test_complete_without_text_is_malformed(content):
    gw, _, _ = _gateway(SimpleNamespace(content=content))
    with pytest.raises(CompletionError) as info:
        asyncio.run(gw.complete("SYS", "hi"))
    assert info.value.kind == CompletionErrorKind.MALFORMED_RESPONSE


def test_complete_wraps_sdk_errors():
    gw, _, _ = _gateway(_status_error(anthropic.AuthenticationError, 401, "invalid x-api-key"))
    with pytest.raises(CompletionError) as info:
        asyncio.run(gw.complete("SYS", "hi"))
    assert info.value.kind == CompletionErrorKind.INVALID_KEY
    assert isinstance(info.value.__cause__, anthropic.AuthenticationError)


def test_gateway_requires_key_or_client():
    with pytest.raises(RuntimeError):
        AnthropicGateway("", model="m")


def test_build_gateway_without_key_returns_none():
    assert build_gateway(TestingConfig()) is None


def test_build_gateway_with_key():
    cfg = TestingConfig()
    cfg.ANTHROPIC_API_KEY = "sk-ant-test"
    gw = build_gateway(cfg)
    assert isinstance(gw, AnthropicGateway)
    assert gw.model == cfg.LLM_MODEL


def test_each_call_opens_and_closes_its_own_client():
    gw, _, clients = _gateway(SimpleNamespace(content=[_text_block("ok")]))
    asyncio.run(gw.complete("SYS", "one"))
    asyncio.run(gw.complete("SYS", "two"))
    assert len(clients) == 2
    assert all(c.closed for c in clients)


def test_installed_sdk_accepts_gateway_keywords():
    create = anthropic.AsyncAnthropic(api_key="sk-ant-test").messages.create
    params = inspect.signature(create).parameters
    for name in ("model", "system", "messages", "temperature", "max_tokens"):
        assert name in params


# ─────────────────────────────────────────────────────────────
# Real SDK against a local keep-alive server
# ─────────────────────────────────────────────────────────────
class _MessagesHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"
    requests_seen: list = []

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        self.requests_seen.append(json.loads(self.rfile.read(length)))
        body = json.dumps({
            "id": f"msg_{len(self.requests_seen)}",
            "type": "message",
            "role": "assistant",
            "model": "stub-model",
            "content": [{"type": "text", "text": f"Rest and hydrate, turn {len(self.requests_seen)}."}],
            "stop_reason": "end_turn",
            "stop_sequence": None,
            "usage": {"input_tokens": 1, "output_tokens": 1},
        }).encode()
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture
def messages_server():
    _MessagesHandler.requests_seen = []
    server = ThreadingHTTPServer(("127.0.0.1", 0), _MessagesHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}", _MessagesHandler.requests_seen
    finally:
        server.shutdown()
        server.server_close()


def test_consecutive_general_turns_reach_the_model(fake_redis, messages_server, monkeypatch):
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(var, raising=False)
    base_url, seen = messages_server
    gw = AnthropicGateway("sk-ant-test", model="stub-model", base_url=base_url, timeout=5)
    _, client = make_client(fake_redis, gw)

    bodies = [client.post("/chat", json={"message": "my skin is dull"}).get_json() for _ in range(3)]

    assert [b.get("fallback") for b in bodies] == [None, None, None]
    assert [b["response"] for b in bodies] == [f"Rest and hydrate, turn {n}." for n in (1, 2, 3)]
    assert len(seen) == 3
    assert seen[0]["model"] == "stub-model"
    assert seen[0]["messages"] == [{"role": "user", "content": "my skin is dull"}]
