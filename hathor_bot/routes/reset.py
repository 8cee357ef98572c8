# hathor_bot/routes/reset.py
"""
/reset endpoint – clears a conversation context so a client can
start fresh without waiting for the TTL.

POST body (or the session header):
{
  "session_id": "abc123"
}
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

log = logging.getLogger(__name__)
bp = Blueprint("reset", __name__)


@bp.post("/reset")
def reset_session() -> tuple[Dict[str, Any], int]:
    data: Dict[str, Any] = request.get_json(force=True, silent=True) or {}
    header = current_app.config.get("SESSION_HEADER", "X-Session-Id")
    session_id = str(data.get("session_id") or request.headers.get(header) or "").strip()
    if not session_id:
        return jsonify({"error": "Missing session_id"}), 400

    try:
        store = current_app.extensions["store"]
        removed = store.evict(session_id)
        log.info(f"SESSION_RESET | session={session_id} | removed={removed}")
        return jsonify({"message": "Session reset successfully", "removed": removed}), 200
    except Exception as exc:  # noqa: BLE001
        log.exception("reset endpoint failed")
        return jsonify({"error": str(exc)}), 500
