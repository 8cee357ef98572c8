# hathor_bot/routes/health.py
"""
Simple readiness/liveness probe.

Returns HTTP 200 if:
• Flask is running
• Redis is reachable

Otherwise 500 (so the orchestrator can restart the pod). The `llm` field
only reports whether a completion gateway is configured.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify

log = logging.getLogger(__name__)
bp = Blueprint("health", __name__)


@bp.get("/health")
def health_check() -> tuple[Dict[str, Any], int]:
    store = current_app.extensions.get("store")
    llm_ready = current_app.extensions.get("gateway") is not None
    if store is None:
        return jsonify({"status": "unhealthy", "redis": "not_initialized", "llm": llm_ready}), 500

    try:
        store.redis.ping()
        return jsonify({"status": "healthy", "redis": "connected", "llm": llm_ready}), 200
    except Exception as exc:  # noqa: BLE001
        log.warning("Redis ping failed: %s", exc)
        return jsonify({"status": "unhealthy", "redis": "disconnected", "llm": llm_ready}), 500
