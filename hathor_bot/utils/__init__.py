# hathor_bot/utils/__init__.py
"""
Expose helpers at package-level for convenience:

    from hathor_bot.utils import convert_markdown_links
"""

from .helpers import (  # noqa: F401
    convert_markdown_links,
    iso_now,
    normalize_for_matching,
    strip_emphasis,
    strip_links,
)

__all__ = [
    "convert_markdown_links",
    "strip_links",
    "strip_emphasis",
    "normalize_for_matching",
    "iso_now",
]
