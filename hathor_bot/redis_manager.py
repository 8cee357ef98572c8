"""
Redis Manager
=============

Redis-backed conversation context store. Every write is a SETEX with the
configured TTL, so idle sessions expire on their own. Reads degrade to
"no context" when Redis misbehaves; writes report failure via their return
value and never raise into the chat path.
"""
from __future__ import annotations

import json
import logging
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

import redis
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from .models import ConversationContext

log = logging.getLogger(__name__)

CONTEXT_KEY_PREFIX = "hathor:context:"


def build_redis_client(cfg: Any) -> redis.Redis:
    return redis.Redis(
        host=cfg.REDIS_HOST,
        port=cfg.REDIS_PORT,
        db=cfg.REDIS_DB,
        decode_responses=cfg.REDIS_DECODE_RESPONSES,
        socket_timeout=10,
        socket_connect_timeout=5,
        retry_on_timeout=True,
        health_check_interval=30,
    )


class RedisJsonStore:
    """JSON get/set helpers with retry on transient connection errors."""

    def __init__(self, client: redis.Redis, *, max_retries: int = 3):
        self.redis = client
        self.max_retries = max_retries

    def _get_json_with_retry(self, key: str, *, default: Any = None) -> Any:
        for attempt in range(self.max_retries):
            try:
                raw = self.redis.get(key)
                if raw is None:
                    log.debug(f"REDIS_GET_NONE | key={key} | attempt={attempt + 1}")
                    return default
                try:
                    result = json.loads(raw)
                    log.debug(f"REDIS_GET_SUCCESS | key={key} | size={len(raw)} | attempt={attempt + 1}")
                    return result
                except json.JSONDecodeError as je:
                    log.warning(f"REDIS_GET_JSON_ERROR | key={key} | error={je}")
                    # Reset corrupted key
                    self.redis.delete(key)
                    return default

            except (ConnectionError, TimeoutError) as ce:
                log.warning(f"REDIS_GET_CONNECTION_ERROR | key={key} | attempt={attempt + 1} | error={ce}")
                if attempt == self.max_retries - 1:
                    return default
                time.sleep(0.1 * (attempt + 1))

            except RedisError as re:
                log.error(f"REDIS_GET_ERROR | key={key} | attempt={attempt + 1} | error={re}")
                return default

        return default

    def _set_json_with_retry(self, key: str, value: Any, *, ttl: timedelta | None) -> bool:
        for attempt in range(self.max_retries):
            try:
                json_data = json.dumps(value, ensure_ascii=False)
                if ttl is None:
                    result = self.redis.set(key, json_data)
                else:
                    result = self.redis.setex(key, int(ttl.total_seconds()), json_data)

                if result:
                    log.debug(f"REDIS_SET_SUCCESS | key={key} | size={len(json_data)} | ttl={ttl} | attempt={attempt + 1}")
                    return True
                log.warning(f"REDIS_SET_FAILED | key={key} | attempt={attempt + 1}")

            except (ConnectionError, TimeoutError) as ce:
                log.warning(f"REDIS_SET_CONNECTION_ERROR | key={key} | attempt={attempt + 1} | error={ce}")
                if attempt == self.max_retries - 1:
                    return False
                time.sleep(0.1 * (attempt + 1))

            except (RedisError, TypeError, ValueError) as e:
                log.error(f"REDIS_SET_ERROR | key={key} | attempt={attempt + 1} | error={e}")
                return False

        return False

    def health_check(self) -> Dict[str, Any]:
        health_data: Dict[str, Any] = {"ping_success": False, "error": None}
        try:
            health_data["ping_success"] = bool(self.redis.ping())
        except Exception as e:
            health_data["error"] = str(e)
        return health_data


class ConversationStore(RedisJsonStore):
    """Per-session ConversationContext with a sliding TTL."""

    def __init__(self, client: redis.Redis, *, ttl_seconds: int = 3600, max_retries: int = 3):
        super().__init__(client, max_retries=max_retries)
        self.ttl = timedelta(seconds=ttl_seconds)

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{CONTEXT_KEY_PREFIX}{session_id}"

    def get(self, session_id: str) -> Optional[ConversationContext]:
        data = self._get_json_with_retry(self._key(session_id))
        if not data:
            return None
        try:
            return ConversationContext.from_dict(data)
        except (KeyError, ValueError, TypeError) as e:
            log.warning(f"CONTEXT_DECODE_ERROR | session={session_id} | error={e}")
            return None

    def put(self, session_id: str, context: ConversationContext) -> bool:
        ok = self._set_json_with_retry(self._key(session_id), context.to_dict(), ttl=self.ttl)
        if ok:
            log.info(
                f"CONTEXT_SAVED | session={session_id} | type={context.last_response_type.value} | "
                f"prescription={context.prescription is not None} | ttl={int(self.ttl.total_seconds())}"
            )
        else:
            log.error(f"CONTEXT_SAVE_FAILED | session={session_id}")
        return ok

    def evict(self, session_id: str) -> bool:
        try:
            deleted = self.redis.delete(self._key(session_id))
            log.info(f"SESSION_DELETE_COMPLETE | session={session_id} | deleted_keys={deleted}")
            return bool(deleted)
        except RedisError as e:
            log.error(f"SESSION_DELETE_ERROR | session={session_id} | error={e}", exc_info=True)
            return False


# ─────────────────────────────────────────────────────────────
# Session key policy
# ─────────────────────────────────────────────────────────────

SessionKeyPolicy = Callable[[Any], str]


def header_session_policy(header: str = "X-Session-Id", default: str = "default") -> SessionKeyPolicy:
    """Session id from ``header`` on the request, else the shared ``default``."""

    def _policy(req: Any) -> str:
        value = (req.headers.get(header) or "").strip()
        return value or default

    return _policy
