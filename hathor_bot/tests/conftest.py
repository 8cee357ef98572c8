# hathor_bot/tests/conftest.py
"""
Shared fixtures: an in-memory Redis stand-in and a scripted completion
gateway, injected through create_app so no server or network is needed.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from hathor_bot import create_app
from hathor_bot.catalog import get_catalog


class FakeRedis:
    """The handful of redis.Redis commands the app uses, kept in dicts."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.lists: Dict[str, List[str]] = {}
        self.ttls: Dict[str, int] = {}
        self.down = False

    def _check(self):
        if self.down:
            raise RedisConnectionError("redis is down")

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value):
        self._check()
        self.data[key] = value
        self.ttls.pop(key, None)
        return True

    def setex(self, key, seconds, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = int(seconds)
        return True

    def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            if self.lists.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def rpush(self, key, *values):
        self._check()
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])

    def lrange(self, key, start, end):
        self._check()
        items = self.lists.get(key, [])
        return items[start:] if end == -1 else items[start:end + 1]

    def pipeline(self):
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, client: FakeRedis):
        self.client = client
        self.ops: List[tuple] = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.ops.clear()
        return False

    def rpush(self, key, *values):
        self.ops.append(("rpush", key, values))
        return self

    def set(self, key, value):
        self.ops.append(("set", key, value))
        return self

    def execute(self):
        self.client._check()
        results = []
        for op, key, arg in self.ops:
            if op == "rpush":
                results.append(self.client.rpush(key, *arg))
            else:
                results.append(self.client.set(key, arg))
        self.ops.clear()
        return results


class FakeGateway:
    """Completion gateway returning scripted replies (or raising them)."""

    model = "fake-model"

    def __init__(self, *replies: Any):
        self.replies: List[Any] = list(replies)
        self.calls: List[Dict[str, str]] = []

    async def complete(self, system_prompt: str, user_message: str) -> str:
        self.calls.append({"system": system_prompt, "user": user_message})
        reply = self.replies.pop(0) if len(self.replies) > 1 else (self.replies[0] if self.replies else "")
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def gateway():
    return FakeGateway("✨ Hathor's Beauty Advice ✨\n\n🌙 I Hear You, My Child\nRest and hydrate.")


def make_client(fake_redis: FakeRedis, gateway: Optional[FakeGateway], **kwargs):
    app = create_app("testing", redis_client=fake_redis, gateway=gateway, **kwargs)
    app.config["TESTING"] = True
    return app, app.test_client()


@pytest.fixture
def app_and_client(fake_redis, gateway):
    app, client = make_client(fake_redis, gateway)
    with client:
        yield app, client


@pytest.fixture
def client(app_and_client):
    return app_and_client[1]


@pytest.fixture
def client_factory(fake_redis):
    """Build a test client around a specific gateway (or None) and options."""
    def _factory(gateway_obj, **kwargs):
        return make_client(fake_redis, gateway_obj, **kwargs)[1]
    return _factory
