"""
Hathor Advisor Application Factory
==================================

Wires the collaborators together and stores them in `app.extensions`:
- Redis conversation store + subscription store
- Completion gateway (None when no API key is configured)
- Response generator, recommendation extractor, document assembler
- HathorBotCore orchestrator
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask
from flask_cors import CORS

from .bot_core import HathorBotCore
from .catalog import get_catalog
from .config import get_config
from .document_builder import DocumentAssembler
from .llm_service import CompletionGateway, build_gateway
from .recommendation import RecommendationExtractor
from .redis_manager import (ConversationStore, SessionKeyPolicy,
                            build_redis_client, header_session_policy)
from .response_generator import ErrorPolicy, ResponseGenerator
from .subscriptions import SubscriptionStore
from .utils import iso_now

log = logging.getLogger(__name__)

_UNSET: Any = object()


def create_app(
    config_name: str = "production",
    *,
    redis_client: Any = None,
    gateway: Optional[CompletionGateway] = _UNSET,
    session_key_policy: Optional[SessionKeyPolicy] = None,
    error_policy: Optional[ErrorPolicy] = None,
) -> Flask:
    """
    App factory.

    INITIALIZATION ORDER:
    1. Config + CORS
    2. Redis connection & health check
    3. Completion gateway, generator, extractor, assembler, bot core
    4. Register routes and error handlers

    Passing ``gateway=None`` explicitly runs without a model (fallback replies
    only); leaving it unset builds one from config.
    """
    cfg = get_config(config_name)

    app = Flask(__name__)
    app.config.from_object(cfg)
    app.config["APP_ENV"] = config_name

    # CORS - the session header must be allowed for cross-origin chat clients
    origins_env = (cfg.CORS_ALLOW_ORIGINS or "").strip()
    allowed_origins = [o.strip() for o in origins_env.split(",") if o.strip()] or ["*"]
    CORS(
        app,
        resources={r"/*": {
            "origins": allowed_origins,
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", cfg.SESSION_HEADER],
            "expose_headers": ["Content-Disposition"],
        }},
        supports_credentials=False,
    )

    # ────────────────────────────────────────────────────────
    # STEP 1: Redis
    # ────────────────────────────────────────────────────────
    try:
        log.info("INIT_REDIS | starting Redis connection")
        client = redis_client if redis_client is not None else build_redis_client(cfg)
        store = ConversationStore(client, ttl_seconds=cfg.CONTEXT_TTL_SECONDS)

        health = store.health_check()
        if not health.get("ping_success", False):
            log.error(f"INIT_REDIS_FAILED | health={health}")
            raise RuntimeError(f"Redis connection failed: {health.get('error')}")
        log.info(f"INIT_REDIS_SUCCESS | ttl={cfg.CONTEXT_TTL_SECONDS}s")
    except Exception as e:
        log.error(f"INIT_REDIS_ERROR | error={e}", exc_info=True)
        raise RuntimeError(f"Failed to initialize Redis: {e}")

    # ────────────────────────────────────────────────────────
    # STEP 2: Core collaborators
    # ────────────────────────────────────────────────────────
    catalog = get_catalog()
    if gateway is _UNSET:
        gateway = build_gateway(cfg)

    generator = ResponseGenerator(
        catalog,
        gateway,
        error_policy=error_policy,
        max_retries=cfg.LLM_MAX_RETRIES,
    )
    extractor = RecommendationExtractor(catalog, match_benefits=cfg.EXTRACTOR_MATCH_BENEFITS)
    bot_core = HathorBotCore(store, generator, extractor)

    app.extensions["store"] = store
    app.extensions["gateway"] = gateway
    app.extensions["bot_core"] = bot_core
    app.extensions["document_assembler"] = DocumentAssembler(store)
    app.extensions["subscriptions"] = SubscriptionStore(
        client,
        threshold=cfg.FREE_SUBSCRIPTION_THRESHOLD,
        free_days=cfg.FREE_SUBSCRIPTION_DAYS,
    )
    app.extensions["session_key_policy"] = session_key_policy or header_session_policy(
        cfg.SESSION_HEADER, cfg.DEFAULT_SESSION_ID
    )
    log.info(
        f"INIT_BOT_CORE_SUCCESS | products={len(catalog)} | gateway={gateway is not None} | "
        f"match_benefits={cfg.EXTRACTOR_MATCH_BENEFITS}"
    )

    # ────────────────────────────────────────────────────────
    # STEP 3: Routes
    # ────────────────────────────────────────────────────────
    from .routes import register_routes

    registered = register_routes(app)
    log.info(f"REGISTER_ROUTES_SUCCESS | blueprints={registered}")

    # ────────────────────────────────────────────────────────
    # STEP 4: Error Handlers
    # ────────────────────────────────────────────────────────
    @app.errorhandler(500)
    def handle_internal_error(error):
        log.error(f"INTERNAL_ERROR | error={error}", exc_info=True)
        return {
            "error": "Internal server error",
            "timestamp": iso_now(),
            "details": str(error) if app.debug else "Contact support",
        }, 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return {
            "error": "Endpoint not found",
            "message": str(getattr(error, "description", "")) or "Not found",
            "timestamp": iso_now(),
        }, 404

    log.info(f"APP_INIT_COMPLETE | config={config_name} | extensions={list(app.extensions.keys())}")
    return app
