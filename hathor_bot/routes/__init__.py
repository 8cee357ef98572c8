# hathor_bot/routes/__init__.py
"""
Blueprint auto-registration.

Put any flask.Blueprint in `hathor_bot/routes/<name>.py`
with the variable name **bp** and it will be discovered &
registered when `register_routes(app)` is called.

The app factory (hathor_bot.__init__.py) stores shared
objects like `store` and `bot_core` into `app.extensions`
so the individual route modules can access them via
`from flask import current_app`.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import List

from flask import Blueprint, Flask

log = logging.getLogger(__name__)


def register_routes(app: Flask) -> List[str]:
    registered: List[str] = []
    for _, name, _ in pkgutil.iter_modules(__path__):
        module: ModuleType = importlib.import_module(f"{__name__}.{name}")
        bp: Blueprint | None = getattr(module, "bp", None)
        if isinstance(bp, Blueprint):
            app.register_blueprint(bp)
            registered.append(name)
            log.debug(f"BLUEPRINT_REGISTERED | name={name}")
    return registered
