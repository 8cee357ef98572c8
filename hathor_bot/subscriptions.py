# hathor_bot/subscriptions.py
"""
Purchase history and the free-subscription perk.

A purchase of FREE_SUBSCRIPTION_THRESHOLD or more items (re)activates a
free subscription for FREE_SUBSCRIPTION_DAYS days. Storage is Redis:
``purchases:<user>`` is a JSON list, ``subscription:<user>`` a JSON object.
Neither key expires.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import redis
from redis.exceptions import RedisError

from .errors import StoreUnavailableError
from .redis_manager import RedisJsonStore

log = logging.getLogger(__name__)


def validate_items(items: Any) -> List[Dict[str, Any]]:
    """Normalised ``[{oilId, quantity}]`` list; ValueError when unusable."""
    if not isinstance(items, list) or not items:
        raise ValueError("items must be a non-empty list")
    cleaned: List[Dict[str, Any]] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValueError(f"items[{i}] must be an object")
        oil_id = str(item.get("oilId") or "").strip()
        quantity = item.get("quantity")
        if not oil_id:
            raise ValueError(f"items[{i}].oilId is required")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError(f"items[{i}].quantity must be a positive integer")
        cleaned.append({"oilId": oil_id, "quantity": quantity})
    return cleaned


class SubscriptionStore(RedisJsonStore):
    def __init__(self, client: redis.Redis, *, threshold: int = 3, free_days: int = 90):
        super().__init__(client)
        self.threshold = threshold
        self.free_days = free_days

    @staticmethod
    def _purchases_key(user_id: str) -> str:
        return f"purchases:{user_id}"

    @staticmethod
    def _subscription_key(user_id: str) -> str:
        return f"subscription:{user_id}"

    def record_purchase(self, user_id: str, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        total_items = sum(i["quantity"] for i in items)
        now = datetime.now(timezone.utc)
        purchase = {
            "userId": user_id,
            "items": items,
            "totalItems": total_items,
            "date": now.isoformat(),
        }

        subscription: Optional[Dict[str, Any]] = None
        if total_items >= self.threshold:
            subscription = {
                "userId": user_id,
                "isActive": True,
                "startDate": now.isoformat(),
                "endDate": (now + timedelta(days=self.free_days)).isoformat(),
                "isFree": True,
            }

        try:
            with self.redis.pipeline() as pipe:
                pipe.rpush(self._purchases_key(user_id), json.dumps(purchase))
                if subscription is not None:
                    pipe.set(self._subscription_key(user_id), json.dumps(subscription))
                pipe.execute()
        except RedisError as e:
            log.error(f"PURCHASE_SAVE_ERROR | user={user_id} | error={e}")
            raise StoreUnavailableError(str(e)) from e

        log.info(
            f"PURCHASE_RECORDED | user={user_id} | total_items={total_items} | "
            f"free_subscription={subscription is not None}"
        )
        return {"purchase": purchase, "subscription": subscription}

    def get_subscription(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            raw = self.redis.get(self._subscription_key(user_id))
        except RedisError as e:
            log.error(f"SUBSCRIPTION_LOAD_ERROR | user={user_id} | error={e}")
            raise StoreUnavailableError(str(e)) from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as je:
            log.warning(f"SUBSCRIPTION_JSON_ERROR | user={user_id} | error={je}")
            return None
