"""
Utility helpers
"""

from __future__ import annotations

import re
from datetime import datetime

# [text](http...) - the target must be an absolute http(s) URL
_MD_LINK = re.compile(r"\[([^\[\]]+)\]\((https?://[^\s)]+)\)")
_HTML_ANCHOR = re.compile(r"<a\b[^>]*>(.*?)</a>", re.I | re.S)
_HTML_TAG = re.compile(r"<[^>]+>")
_PAREN_URL = re.compile(r"\(\s*https?://[^)]*\)")
_BARE_URL = re.compile(r"https?://\S+")
_EMPHASIS = re.compile(r"[*_`]+")


def convert_markdown_links(text: str) -> str:
    """Rewrite markdown links as anchors that open in a new tab.

    Converted output contains no markdown-link syntax, so applying this
    twice is the same as applying it once.
    """
    if not text:
        return text or ""
    return _MD_LINK.sub(r'<a href="\2" target="_blank">\1</a>', text)


def strip_links(text: str) -> str:
    """Replace HTML anchors and markdown links with their visible text."""
    text = _HTML_ANCHOR.sub(r"\1", text or "")
    return _MD_LINK.sub(r"\1", text)


def strip_html(text: str) -> str:
    return _HTML_TAG.sub("", strip_links(text))


def strip_emphasis(text: str) -> str:
    return _EMPHASIS.sub("", text or "")


def normalize_for_matching(text: str) -> str:
    text = strip_html(text)
    text = _PAREN_URL.sub(" ", text)
    text = _BARE_URL.sub(" ", text)
    text = strip_emphasis(text)
    text = text.replace("[", " ").replace("]", " ")
    return re.sub(r"\s+", " ", text).strip().lower()


def iso_now() -> str:
    return datetime.now().isoformat()
