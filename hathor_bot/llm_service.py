# hathor_bot/llm_service.py
"""
Completion gateway
──────────────────
Thin async wrapper around the Anthropic Messages API. One call per general
chat turn: fixed system prompt in, plain text out. Every SDK failure is
re-raised as a CompletionError tagged with a CompletionErrorKind so callers
can apply an error policy without importing anthropic.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

import anthropic

from .enums import CompletionErrorKind
from .errors import CompletionError

log = logging.getLogger(__name__)


class CompletionGateway(Protocol):
    model: str

    async def complete(self, system_prompt: str, user_message: str) -> str:
        ...


def _error_code(exc: Exception) -> Optional[str]:
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("type"):
            return str(err["type"])
    return None


def classify_anthropic_error(exc: Exception) -> CompletionError:
    """Map an anthropic SDK exception onto a CompletionError."""
    if isinstance(exc, CompletionError):
        return exc

    status = getattr(exc, "status_code", None)
    message = str(exc) or exc.__class__.__name__

    if status == 402 or "credit" in message.lower():
        kind = CompletionErrorKind.QUOTA_EXCEEDED
    elif isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
        kind = CompletionErrorKind.INVALID_KEY
    elif isinstance(exc, anthropic.RateLimitError):
        kind = CompletionErrorKind.RATE_LIMITED
    elif isinstance(exc, anthropic.NotFoundError):
        kind = CompletionErrorKind.MODEL_NOT_FOUND
    elif isinstance(exc, (anthropic.APIConnectionError, anthropic.InternalServerError)):
        # APITimeoutError is a subclass of APIConnectionError
        kind = CompletionErrorKind.NETWORK
    else:
        kind = CompletionErrorKind.UNKNOWN

    return CompletionError(kind, message, code=_error_code(exc), status=status)


def _response_text(resp: Any) -> str:
    blocks = getattr(resp, "content", None) or []
    return "".join(
        getattr(b, "text", "") or ""
        for b in blocks
        if getattr(b, "type", None) == "text"
    )


class AnthropicGateway:
    """Completion gateway backed by anthropic.AsyncAnthropic.

    Each call opens and closes its own client, so no pooled connection
    outlives the event loop Flask runs the async view on.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        base_url: Optional[str] = None,
        client_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        if not api_key and client_factory is None:
            raise RuntimeError("Missing ANTHROPIC_API_KEY. Set it in environment or .env file.")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url
        self.client_factory = client_factory or self._new_client

    def _new_client(self) -> anthropic.AsyncAnthropic:
        # SDK retries stay off; the response generator owns the retry policy
        return anthropic.AsyncAnthropic(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    @classmethod
    def from_config(cls, cfg: Any) -> "AnthropicGateway":
        return cls(
            cfg.ANTHROPIC_API_KEY,
            model=cfg.LLM_MODEL,
            temperature=cfg.LLM_TEMPERATURE,
            max_tokens=cfg.LLM_MAX_TOKENS,
            timeout=cfg.LLM_TIMEOUT_SECONDS,
            base_url=cfg.ANTHROPIC_BASE_URL or None,
        )

    async def complete(self, system_prompt: str, user_message: str) -> str:
        try:
            async with self.client_factory() as client:
                resp = await client.messages.create(
                    model=self.model,
                    system=system_prompt,
                    messages=[{"role": "user", "content": user_message}],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
        except anthropic.APIError as exc:
            err = classify_anthropic_error(exc)
            log.warning(
                f"LLM_CALL_FAILED | kind={err.kind.value} | code={err.code} | "
                f"status={err.status} | model={self.model}"
            )
            raise err from exc

        text = _response_text(resp)
        if not text.strip():
            log.warning(f"LLM_EMPTY_RESPONSE | model={self.model}")
            raise CompletionError(
                CompletionErrorKind.MALFORMED_RESPONSE,
                "Completion response contained no text",
            )
        return text


def build_gateway(cfg: Any) -> Optional[AnthropicGateway]:
    """Gateway from config, or None when no API key is configured."""
    api_key = getattr(cfg, "ANTHROPIC_API_KEY", "") or ""
    if not api_key:
        log.warning("LLM_DISABLED | reason=missing_api_key | general replies will use fallback")
        return None
    if not api_key.startswith("sk-ant-"):
        log.warning("LLM_KEY_FORMAT | key does not start with 'sk-ant-'")
    return AnthropicGateway.from_config(cfg)
