# hathor_bot/routes/purchases.py
"""
Purchases and subscription status.

POST /purchases               {"userId": "...", "items": [{"oilId": "...", "quantity": 2}]}
GET  /subscriptions/<user_id>
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from ..errors import StoreUnavailableError
from ..subscriptions import validate_items

log = logging.getLogger(__name__)
bp = Blueprint("purchases", __name__)

UNAVAILABLE = {
    "error": "Database service unavailable",
    "message": "The database connection is not established. Please try again later.",
}


@bp.post("/purchases")
def record_purchase():
    data: Dict[str, Any] = request.get_json(force=True, silent=True) or {}
    user_id = str(data.get("userId") or "").strip()
    if not user_id:
        return jsonify({"error": "Missing userId", "success": False}), 400
    try:
        items = validate_items(data.get("items"))
    except ValueError as exc:
        return jsonify({"error": str(exc), "success": False}), 400

    store = current_app.extensions["subscriptions"]
    try:
        result = store.record_purchase(user_id, items)
    except StoreUnavailableError:
        return jsonify(UNAVAILABLE), 503

    subscription = result["subscription"]
    message = (
        "Purchase recorded and free subscription activated"
        if subscription is not None
        else "Purchase recorded"
    )
    return jsonify({"success": True, "message": message, "subscription": subscription}), 200


@bp.get("/subscriptions/<user_id>")
def subscription_status(user_id: str):
    store = current_app.extensions["subscriptions"]
    try:
        subscription = store.get_subscription(user_id)
    except StoreUnavailableError:
        return jsonify({**UNAVAILABLE, "isActive": False}), 503

    if subscription is None:
        return jsonify({"isActive": False}), 200
    return jsonify(subscription), 200
