#!/usr/bin/env python3
"""
Hathor Advisor Entry Point
- Works under both Gunicorn (WSGI import) and python CLI.
- Ensures smart logging is initialized exactly once per process.
- Aligns Flask app logger with root logger for consistent output.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Tuple

from dotenv import load_dotenv
from flask import request

# Load env before any other imports that might read it
load_dotenv()

# Local imports after env load
from hathor_bot import create_app  # noqa: E402
from hathor_bot.utils.smart_logger import LogLevel, configure_logging  # noqa: E402

# --------------------------------------------------------------------------------------
# Logging initialization (one-time, safe under multiprocess servers like Gunicorn)
# --------------------------------------------------------------------------------------

_LOGGING_INITIALIZED = False  # process-level guard


def _to_python_level(level: LogLevel) -> int:
    return logging.DEBUG if level == LogLevel.DEBUG else logging.INFO


def setup_smart_logging() -> LogLevel:
    """
    Configure the smart logging system.
    Idempotent: won't add duplicate handlers if called multiple times.
    """
    global _LOGGING_INITIALIZED

    desired = os.getenv("BOT_LOG_LEVEL", "STANDARD").upper()
    valid = {lvl.name for lvl in LogLevel}
    if desired not in valid:
        print(f"Warning: Invalid BOT_LOG_LEVEL '{desired}'. Valid options: {', '.join(sorted(valid))}")
        log_level = LogLevel.STANDARD
    else:
        log_level = LogLevel[desired]

    if not _LOGGING_INITIALIZED:
        root = logging.getLogger()
        if not root.handlers:
            configure_logging(
                level=log_level,
                format_string="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                silence_external=True,
            )
        _LOGGING_INITIALIZED = True

    return log_level


# --------------------------------------------------------------------------------------
# Environment validation
# --------------------------------------------------------------------------------------

def validate_environment(strict: bool) -> None:
    """
    Validate env vars.
    - REDIS_HOST missing: exit when strict (CLI path), warn otherwise (WSGI path).
    - ANTHROPIC_API_KEY missing: always a warning; general advice uses the fallback reply.
    """
    logger = logging.getLogger(__name__)
    required = {"REDIS_HOST": "conversation context storage"}
    missing = [f"{k} (required for {v})" for k, v in required.items() if not os.getenv(k)]

    if missing:
        msg = "Missing required environment variables: " + ", ".join(missing)
        if strict:
            print("Error:", msg)
            sys.exit(1)
        logger.warning(msg)

    if not os.getenv("ANTHROPIC_API_KEY"):
        logger.warning("ANTHROPIC_API_KEY not set - general advice will use the fallback reply")


# --------------------------------------------------------------------------------------
# Flask application creation and alignment with logging
# --------------------------------------------------------------------------------------

def _wire_app_logger(app, log_level: LogLevel) -> None:
    """Route Flask's app.logger into the root handlers configured by smart logging."""
    if app.logger.handlers:
        app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(_to_python_level(log_level))


def create_application(strict_env: bool = False):
    """
    Create and configure the Flask application.
    - strict_env: whether to hard-fail on missing env (True for CLI, False for WSGI).
    """
    validate_environment(strict=strict_env)

    app = create_app(os.getenv("APP_ENV", "production"))

    log_level = setup_smart_logging()
    _wire_app_logger(app, log_level)

    @app.before_request
    def _log_request():
        app.logger.info("→ %s %s", request.method, request.path)

    return app


# --------------------------------------------------------------------------------------
# Local dev server (python run.py)
# --------------------------------------------------------------------------------------

def _resolve_server_config() -> Tuple[str, int, bool]:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "5000"))

    flask_debug = os.getenv("FLASK_DEBUG", "").lower()
    if flask_debug in ("1", "true", "yes", "on"):
        debug = True
    elif flask_debug in ("0", "false", "no", "off"):
        debug = False
    else:
        debug = os.getenv("APP_ENV", "development").lower() == "development"

    return host, port, debug


def _print_startup_info(host: str, port: int, debug: bool, log_level: LogLevel) -> None:
    print("Hathor Advisor Starting")
    print("=" * 60)
    print(f"Server:       http://{host}:{port}")
    print(f"Health check: http://{host}:{port}/health")
    print(f"Environment:  {os.getenv('APP_ENV', 'development')}")
    print(f"Debug mode:   {debug}")
    print(f"Log level:    {log_level.name}")
    print(f"Model:        {os.getenv('LLM_MODEL', 'claude-3-5-sonnet-20241022')}")
    print(f"Process ID:   {os.getpid()}")
    print("=" * 60)


def main() -> None:
    log_level = setup_smart_logging()
    app = create_application(strict_env=True)

    host, port, debug = _resolve_server_config()
    _print_startup_info(host, port, debug, log_level)

    try:
        app.run(
            host=host,
            port=port,
            debug=debug,
            use_reloader=False,  # Avoid double init/log handlers in dev
            threaded=True,
        )
    except KeyboardInterrupt:
        print("\nShutting down gracefully...")


# --------------------------------------------------------------------------------------
# WSGI entrypoint for Gunicorn: `gunicorn run:app`
# --------------------------------------------------------------------------------------
if __name__ == "__main__":
    main()
else:
    setup_smart_logging()
    app = create_application(strict_env=False)
