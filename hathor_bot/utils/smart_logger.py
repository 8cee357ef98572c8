# hathor_bot/utils/smart_logger.py
"""
Smart, modular logging for the advisor backend.
One-line emoji records per chat turn with configurable verbosity levels.
"""

import logging
import os
import sys
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, Optional


class LogLevel(Enum):
    MINIMAL = 1      # Only turn start/finish and errors
    STANDARD = 2     # Routing decisions and context writes
    DETAILED = 3     # Extraction details and timing
    DEBUG = 4        # Everything including gateway calls


class SmartLogger:
    def __init__(self, name: str, level: LogLevel = LogLevel.STANDARD):
        self.logger = logging.getLogger(name)
        self.level = level
        self._turns: Dict[str, str] = {}

    def set_level(self, level: LogLevel):
        """Change logging verbosity at runtime"""
        self.level = level

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.level.value >= required_level.value

    def _turn_id(self, session_id: str) -> str:
        timestamp = datetime.now().strftime('%H%M%S')
        return f"{session_id[-6:]}_{timestamp}"

    def _req(self, session_id: str) -> str:
        return self._turns.get(session_id, "unknown")

    def _clean_log(self, level: str, emoji: str, category: str, message: str, **kwargs):
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items() if v is not None)
        if details:
            full_message = f"{emoji} {category} | {message} | {details}"
        else:
            full_message = f"{emoji} {category} | {message}"
        getattr(self.logger, level.lower())(full_message)

    # ═══════════════════════════════════════════════════════════
    # TURN EVENTS
    # ═══════════════════════════════════════════════════════════

    def turn_start(self, session_id: str, message: str, has_context: bool):
        """Log the start of one chat turn"""
        if not self._should_log(LogLevel.MINIMAL):
            return
        req_id = self._turn_id(session_id)
        self._turns[session_id] = req_id
        preview = message[:50] + "..." if len(message) > 50 else message
        self._clean_log("info", "🚀", "TURN_START", f"'{preview}'",
                        req=req_id, context=has_context)

    def intent_classified(self, session_id: str, intent: str, previous: Optional[str] = None):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "🧠", "INTENT", intent,
                        req=self._req(session_id), previous=previous)

    def fallback_used(self, session_id: str, reason: str, code: Optional[str] = None):
        """Fallbacks are logged at every level"""
        self._clean_log("warning", "🪔", "FALLBACK", reason,
                        req=self._req(session_id), code=code)

    def prescription_extracted(self, session_id: str, products: Iterable[str], source: str):
        if not self._should_log(LogLevel.STANDARD):
            return
        names = list(products)
        self._clean_log("info", "🌿", "PRESCRIPTION", f"{len(names)} products",
                        req=self._req(session_id), source=source)
        if self._should_log(LogLevel.DETAILED):
            self._clean_log("debug", "📊", "PRESCRIPTION_DETAIL", "products",
                            req=self._req(session_id), names=names)

    def context_saved(self, session_id: str, response_type: str, has_prescription: bool):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "💾", "CONTEXT", "saved", req=self._req(session_id),
                        type=response_type, prescription=has_prescription)

    def response_generated(self, session_id: str, response_type: str, elapsed_time: float = None):
        """Log the end of a turn and drop its request id"""
        if not self._should_log(LogLevel.MINIMAL):
            return
        extras = {"req": self._req(session_id)}
        if elapsed_time is not None:
            extras["time"] = f"{elapsed_time:.3f}s"
        self._clean_log("info", "✅", "RESPONSE", response_type, **extras)
        self._turns.pop(session_id, None)

    def document_built(self, session_id: str, size_bytes: int, from_sample: bool):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "📜", "DOCUMENT", "built", session=session_id,
                        size=size_bytes, sample=from_sample)

    # ═══════════════════════════════════════════════════════════
    # WARNINGS
    # ═══════════════════════════════════════════════════════════

    def warning(self, session_id: str, warning_type: str, details: str = None):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("warning", "⚠️", "WARNING", warning_type,
                        req=self._req(session_id), details=details)


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL LOGGER INSTANCES AND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

_loggers: Dict[str, SmartLogger] = {}


def level_from_env(default: str = "STANDARD") -> LogLevel:
    return getattr(LogLevel, os.getenv('BOT_LOG_LEVEL', default).upper(), LogLevel.STANDARD)


def get_smart_logger(module_name: str, level: LogLevel = None) -> SmartLogger:
    """Get or create a smart logger for a module"""
    if module_name not in _loggers:
        _loggers[module_name] = SmartLogger(module_name, level or level_from_env())
    if level:
        _loggers[module_name].set_level(level)
    return _loggers[module_name]


def configure_logging(level: LogLevel = LogLevel.STANDARD,
                      format_string: str = None,
                      silence_external: bool = True):
    """Configure the entire logging system"""
    if not format_string:
        format_string = '%(asctime)s | %(message)s'

    logging.basicConfig(
        level=logging.DEBUG if level == LogLevel.DEBUG else logging.INFO,
        format=format_string,
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if silence_external:
        for noisy in ('httpcore', 'httpx', 'anthropic', 'werkzeug', 'urllib3', 'docx'):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    for smart_logger in _loggers.values():
        smart_logger.set_level(level)

    print(f"🔧 Smart logging configured at {level.name} level")
