# hathor_bot/routes/chat.py
"""
Chat endpoint
=============

POST /chat  {"message": "..."}  (+ optional session header)

Returns {response, success, ...flags}. Client mistakes are the only 4xx;
every other failure is answered with the fallback advice text so the
chat UI never shows a raw error.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict

from flask import Blueprint, Response, current_app, jsonify, request

from ..response_generator import FALLBACK_RESPONSE

log = logging.getLogger(__name__)
bp = Blueprint("chat", __name__)


# ─────────────────────────────────────────────────────────────
# Test endpoint
# ─────────────────────────────────────────────────────────────
@bp.get("/chat/test")
def chat_test():
    return {"message": "Backend server is running!"}


# ─────────────────────────────────────────────────────────────
# Runtime flags endpoint (debug, never includes key material)
# ─────────────────────────────────────────────────────────────
@bp.get("/chat/flags")
def chat_flags() -> Response:
    cfg = current_app.config
    payload = {
        "env": cfg.get("APP_ENV", "development"),
        "LLM_MODEL": cfg.get("LLM_MODEL", "unknown"),
        "LLM_MAX_RETRIES": cfg.get("LLM_MAX_RETRIES", 0),
        "CONTEXT_TTL_SECONDS": cfg.get("CONTEXT_TTL_SECONDS"),
        "EXTRACTOR_MATCH_BENEFITS": cfg.get("EXTRACTOR_MATCH_BENEFITS", True),
        "SESSION_HEADER": cfg.get("SESSION_HEADER", "X-Session-Id"),
        "api_key_configured": bool(cfg.get("ANTHROPIC_API_KEY")),
        "gateway_ready": current_app.extensions.get("gateway") is not None,
    }
    return jsonify(payload), 200


# ─────────────────────────────────────────────────────────────
# Main chat endpoint
# ─────────────────────────────────────────────────────────────
@bp.post("/chat")
async def chat() -> Response:
    started = time.time()

    data: Dict[str, Any] = request.get_json(force=True, silent=True) or {}
    message = data.get("message") if isinstance(data, dict) else None
    if not isinstance(message, str) or not message.strip():
        log.warning("CHAT_NO_MESSAGE | no message provided in request")
        return jsonify({"error": "No message provided", "success": False}), 400
    message = message.strip()

    session_id = "unknown"
    try:
        session_id = current_app.extensions["session_key_policy"](request)
        log.info(f"CHAT_REQUEST | session={session_id} | chars={len(message)} | preview='{message[:50]}'")

        bot_core = current_app.extensions["bot_core"]
        reply = await bot_core.process_message(message, session_id)

        log.info(
            f"CHAT_RESPONSE | session={session_id} | kind={reply.kind.value} | "
            f"elapsed={time.time() - started:.3f}s"
        )
        return jsonify(reply.to_payload()), 200

    except Exception as exc:  # noqa: BLE001
        log.exception(f"CHAT_UNEXPECTED_ERROR | session={session_id} | error={exc}")
        return jsonify({"response": FALLBACK_RESPONSE, "success": True, "fallback": True}), 200
