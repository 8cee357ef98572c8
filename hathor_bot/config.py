"""
Configuration for the Hathor advisor backend.
Class-based, read from the environment at import time.
"""
from __future__ import annotations

import logging
import os

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in _TRUTHY


class BaseConfig:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    JSON_SORT_KEYS: bool = False

    # Redis
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", 6379))
    REDIS_DB: int = int(os.getenv("REDIS_DB", 0))
    REDIS_DECODE_RESPONSES: bool = True

    # Conversation context
    CONTEXT_TTL_SECONDS: int = int(os.getenv("CONTEXT_TTL_SECONDS", 3600))
    SESSION_HEADER: str = os.getenv("SESSION_HEADER", "X-Session-Id")
    DEFAULT_SESSION_ID: str = os.getenv("DEFAULT_SESSION_ID", "default")

    # Anthropic - leave empty to run with fallback replies only
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")
    ANTHROPIC_BASE_URL: str = os.getenv("ANTHROPIC_BASE_URL", "")

    # LLM
    LLM_MODEL: str = os.getenv("LLM_MODEL", "claude-3-5-sonnet-20241022")
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.7"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "2000"))
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    LLM_MAX_RETRIES: int = int(os.getenv("LLM_MAX_RETRIES", "0"))

    # Recommendation extraction
    EXTRACTOR_MATCH_BENEFITS: bool = _flag("EXTRACTOR_MATCH_BENEFITS", "true")

    # Purchases
    FREE_SUBSCRIPTION_THRESHOLD: int = int(os.getenv("FREE_SUBSCRIPTION_THRESHOLD", "3"))
    FREE_SUBSCRIPTION_DAYS: int = int(os.getenv("FREE_SUBSCRIPTION_DAYS", "90"))

    # CORS
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "").strip()

    BOT_LOG_LEVEL: str = os.getenv("BOT_LOG_LEVEL", "STANDARD").upper()


class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True


class ProductionConfig(BaseConfig):
    DEBUG: bool = False
    CONTEXT_TTL_SECONDS: int = int(os.getenv("CONTEXT_TTL_SECONDS", "1800"))


class TestingConfig(BaseConfig):
    TESTING: bool = True
    REDIS_DB: int = 15
    ANTHROPIC_API_KEY: str = ""


def get_config(env: str | None = None) -> BaseConfig:
    """Get configuration instance directly - no complex manager."""
    env = (env or os.getenv("APP_ENV", os.getenv("FLASK_ENV", "development"))).lower()
    mapping = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
        "test": TestingConfig,
    }
    config_class = mapping.get(env, DevelopmentConfig)
    cfg = config_class()

    log = logging.getLogger(__name__)
    if not hasattr(get_config, "_logged_startup"):
        log.info(f"⚙️ CONFIG_STARTUP | env={env} | config_class={config_class.__name__}")
        log.info(
            f"🤖 LLM_CONFIG | model={cfg.LLM_MODEL} | temp={cfg.LLM_TEMPERATURE} | "
            f"max_tokens={cfg.LLM_MAX_TOKENS} | timeout={cfg.LLM_TIMEOUT_SECONDS}s | "
            f"retries={cfg.LLM_MAX_RETRIES} | key_configured={bool(cfg.ANTHROPIC_API_KEY)}"
        )
        log.info(
            f"💾 REDIS_CONFIG | host={cfg.REDIS_HOST} | port={cfg.REDIS_PORT} | "
            f"db={cfg.REDIS_DB} | context_ttl={cfg.CONTEXT_TTL_SECONDS}s"
        )
        log.info(
            f"🧾 PURCHASE_CONFIG | free_threshold={cfg.FREE_SUBSCRIPTION_THRESHOLD} | "
            f"free_days={cfg.FREE_SUBSCRIPTION_DAYS}"
        )
        get_config._logged_startup = True

    return cfg
