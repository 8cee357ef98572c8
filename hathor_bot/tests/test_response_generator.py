from __future__ import annotations

import asyncio

import pytest
from conftest import FakeGateway

from hathor_bot.catalog import PRODUCTS, CatalogStore
from hathor_bot.enums import CompletionErrorKind, ErrorAction, ResponseKind
from hathor_bot.errors import CompletionError
from hathor_bot.response_generator import (DOWNLOAD_HINT_MARKER,
                                           FALLBACK_RESPONSE,
                                           ResponseGenerator,
                                           default_error_policy)


def _gen(catalog, gateway=None, **kwargs) -> ResponseGenerator:
    return ResponseGenerator(catalog, gateway, system_prompt="SYSTEM", **kwargs)


# ─────────────────────────────────────────────────────────────
# Inventory / follow-up
# ─────────────────────────────────────────────────────────────
def test_inventory_lists_every_product_once(catalog):
    gw = FakeGateway("unused")
    text = _gen(catalog, gw).inventory()

    for product in catalog:
        assert text.count(f"[{product.name}]({product.link})") == 1
    assert "20. [Queen Tiye Hair Oil]" in text
    assert gw.calls == []


def test_inventory_groups_by_category_in_order(catalog):
    text = _gen(catalog).inventory()
    carrier = text.index("**CARRIER OILS (9 oils):**")
    essential = text.index("**ESSENTIAL OILS (9 oils):**")
    special = text.index("**SPECIAL OILS (2 oils):**")
    assert carrier < essential < special
    assert text.index("[Virgin Olive Oil]") < essential < text.index("[Rosemary Oil]")


def test_inventory_flags_sold_out_items(catalog):
    text = _gen(catalog).inventory()
    flagged = [line for line in text.splitlines() if line.endswith("**CURRENTLY SOLD OUT**")]
    assert len(flagged) == 4
    assert any("[Jasmine Oil]" in line for line in flagged)
    assert not any("[Moringa Oil]" in line for line in flagged)
    assert "(Set LE 1,200.00, 900 drops)" in text


def test_inventory_ends_with_download_hint(catalog):
    text = _gen(catalog).inventory()
    assert DOWNLOAD_HINT_MARKER in text
    assert text.index("With divine blessings") < text.index(DOWNLOAD_HINT_MARKER)


def test_follow_up_counts_come_from_catalog(catalog):
    text = _gen(catalog).follow_up()
    assert "- **9 Carrier Oils** (including 1 currently sold out)" in text
    assert "- **9 Essential Oils** (including 2 currently sold out)" in text
    assert "- **2 Special Oils** (including 1 currently sold out)" in text
    assert "**Total: 20 sacred oils**" in text
    assert "](http" not in text


def test_follow_up_with_smaller_catalog():
    small = CatalogStore(PRODUCTS[:3])
    text = _gen(small).follow_up()
    assert "**Total: 3 sacred oils**" in text
    assert "- **3 Carrier Oils**" in text
    assert "Essential Oils" not in text


# ─────────────────────────────────────────────────────────────
# General path
# ─────────────────────────────────────────────────────────────
def test_general_returns_model_text_verbatim(catalog):
    gw = FakeGateway("Use [Rose Oil](https://hathororganics.com/products/rose-oil).")
    out = asyncio.run(_gen(catalog, gw).general("my skin is dull"))
    assert out.kind == ResponseKind.GENERAL
    assert out.text == "Use [Rose Oil](https://hathororganics.com/products/rose-oil)."
    assert gw.calls == [{"system": "SYSTEM", "user": "my skin is dull"}]


@pytest.mark.parametrize(
    "reply",
    [
        CompletionError(CompletionErrorKind.QUOTA_EXCEEDED, "quota"),
        CompletionError(CompletionErrorKind.INVALID_KEY, "bad key"),
        "",
        RuntimeError("boom"),
    ],
)
def test_general_failures_use_fallback(catalog, reply):
    out = asyncio.run(_gen(catalog, FakeGateway(reply)).general("help"))
    assert out.kind == ResponseKind.FALLBACK
    assert out.text == FALLBACK_RESPONSE
    assert out.error is not None


def test_general_without_gateway_uses_fallback(catalog):
    out = asyncio.run(_gen(catalog, None).general("help"))
    assert out.text == FALLBACK_RESPONSE
    assert out.error is None


def test_rate_limit_is_retried_within_budget(catalog):
    gw = FakeGateway(CompletionError(CompletionErrorKind.RATE_LIMITED), "second time lucky")
    out = asyncio.run(_gen(catalog, gw, max_retries=1).general("help"))
    assert out.text == "second time lucky"
    assert len(gw.calls) == 2


def test_retry_budget_of_zero_falls_back_immediately(catalog):
    gw = FakeGateway(CompletionError(CompletionErrorKind.NETWORK), "never reached")
    out = asyncio.run(_gen(catalog, gw, max_retries=0).general("help"))
    assert out.is_fallback
    assert out.error.kind == CompletionErrorKind.NETWORK
    assert len(gw.calls) == 1


def test_propagate_policy_reraises(catalog):
    gw = FakeGateway(CompletionError(CompletionErrorKind.MODEL_NOT_FOUND))
    gen = _gen(catalog, gw, error_policy=lambda err: ErrorAction.PROPAGATE)
    with pytest.raises(CompletionError) as info:
        asyncio.run(gen.general("help"))
    assert info.value.kind == CompletionErrorKind.MODEL_NOT_FOUND


@pytest.mark.parametrize(
    "kind,action",
    [
        (CompletionErrorKind.RATE_LIMITED, ErrorAction.RETRY),
        (CompletionErrorKind.NETWORK, ErrorAction.RETRY),
        (CompletionErrorKind.QUOTA_EXCEEDED, ErrorAction.FALLBACK),
        (CompletionErrorKind.INVALID_KEY, ErrorAction.FALLBACK),
        (CompletionErrorKind.MALFORMED_RESPONSE, ErrorAction.FALLBACK),
        (CompletionErrorKind.MODEL_NOT_FOUND, ErrorAction.FALLBACK),
        (CompletionErrorKind.UNKNOWN, ErrorAction.FALLBACK),
    ],
)
def test_default_error_policy(kind, action):
    assert default_error_policy(CompletionError(kind)) == action
