# hathor_bot/document_builder.py
"""
Document Assembler
──────────────────
Turns the advice text a session last saw into a downloadable .docx. Cold
sessions get SAMPLE_PRESCRIPTION_TEXT instead of an error.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from io import BytesIO
from typing import Iterable, Optional, Tuple

from docx import Document

from .errors import DocumentGenerationError
from .redis_manager import ConversationStore
from .response_generator import BANNER, DOWNLOAD_HINT_MARKER
from .utils import strip_emphasis, strip_links
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)
smart_log = get_smart_logger("document_builder")

DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOCX_FILENAME = "hathor-prescription.docx"

SECTION_GLYPHS: Tuple[str, ...] = ("🌙", "🌿", "⚱", "🌬", "💫", "🔮", "🌅", "📜")

_BULLET = re.compile(r"^\s*(?:[•\-*]|\d+\.)\s+")

SIGNATURE_LINES = (
    "May these sacred oils bring you beauty, balance and healing.",
    "With divine blessings,",
    "Hathor, Goddess of Beauty and Healing",
)

SAMPLE_PRESCRIPTION_TEXT = f"""{BANNER}

🌙 I Hear You, My Child
This is a sample prescription. Share your beauty concern with me in the chat and I will prepare one made for you.

🌿 Oils to Help You
• Sweet Almond Oil - gentle, deep hydration for dry skin
• Lavender Oil - calming care that soothes and heals

⚱️ How to Use the Oils
• Getting Ready: Mix 3-4 drops of Sweet Almond Oil with 1 drop of Lavender Oil
• How to Put On: Warm the blend between your palms and press gently into clean skin
• How Often: Daily, in the evening only
• How Long: 4-6 weeks
• Safety Rules: Perform a patch test first and always dilute essential oils

🔮 Where to Begin Your Journey
Sweet Almond Oil: https://hathororganics.com/products/sweet-almond-oil
Lavender Oil: https://hathororganics.com/products/lavender-oil

🌅 Ancient Wisdom from the Temple
The women of ancient Egypt kept their skin soft against the desert air with pressed almond oil."""


def strip_download_hint(text: str) -> str:
    return text.split(DOWNLOAD_HINT_MARKER, 1)[0].rstrip()


def classify_line(line: str) -> Tuple[Optional[str], str]:
    """(python-docx style name, cleaned text) for one advice line.

    Blank lines map to a ``None`` style.
    """
    stripped = line.strip()
    if not stripped:
        return None, ""

    bullet = _BULLET.match(stripped)
    if bullet:
        return "List Bullet", strip_emphasis(stripped[bullet.end():]).strip()

    clean = strip_emphasis(stripped).strip()
    if clean == BANNER:
        return "Title", clean
    if clean.startswith(SECTION_GLYPHS):
        return "Heading 1", clean
    return "Normal", clean


def render_docx(text: str, *, generated_at: Optional[datetime] = None) -> bytes:
    body = strip_download_hint(strip_links(text))
    generated_at = generated_at or datetime.now(timezone.utc)

    doc = Document()
    for style, content in _styled_lines(body.splitlines()):
        if style is None:
            doc.add_paragraph("")
        elif style == "Title":
            doc.add_heading(content, level=0)
        elif style == "Heading 1":
            doc.add_heading(content, level=1)
        else:
            doc.add_paragraph(content, style=style)

    doc.add_paragraph("")
    for line in SIGNATURE_LINES:
        doc.add_paragraph(line)
    doc.add_paragraph(f"Generated on {generated_at.strftime('%Y-%m-%d %H:%M UTC')}")

    bio = BytesIO()
    doc.save(bio)
    return bio.getvalue()


def _styled_lines(lines: Iterable[str]):
    for line in lines:
        yield classify_line(line)


class DocumentAssembler:
    def __init__(self, store: ConversationStore):
        self.store = store

    def build_document(self, session_id: str) -> bytes:
        """.docx bytes for the session's last reply, or for the sample text."""
        try:
            ctx = self.store.get(session_id)
            from_sample = ctx is None or not ctx.last_response
            text = SAMPLE_PRESCRIPTION_TEXT if from_sample else ctx.last_response
            data = render_docx(text)
        except Exception as e:
            log.error(f"DOCUMENT_BUILD_ERROR | session={session_id} | error={e}", exc_info=True)
            raise DocumentGenerationError(str(e)) from e

        smart_log.document_built(session_id, len(data), from_sample)
        return data
