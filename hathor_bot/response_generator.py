# hathor_bot/response_generator.py
"""
Response generation for every chat intent.

Inventory, follow-up and download replies are rendered from the catalog
with no model call. General replies go through the completion gateway;
any failure there ends in FALLBACK_RESPONSE, subject to the error policy.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .catalog import COLLECTION_URL, CatalogStore
from .enums import CompletionErrorKind, ErrorAction, ResponseKind
from .errors import CompletionError
from .llm_service import CompletionGateway, classify_anthropic_error
from .prompts import default_system_prompt

log = logging.getLogger(__name__)

BANNER = "✨ Hathor's Beauty Advice ✨"
SIGN_OFF = "With divine blessings,\nHathor"

DOWNLOAD_HINT_MARKER = "📜 Your Sacred Prescription"
DOWNLOAD_HINT = (
    f"{DOWNLOAD_HINT_MARKER}\n"
    "Your recommendations are ready to keep. Say \"download my prescription\" "
    "or use the download button to receive them as a document."
)

FALLBACK_RESPONSE = (
    f"{BANNER}\n\n"
    "🌙 I Hear You, My Child\n"
    "I understand your concern. However, I'm currently unable to provide personalized "
    "advice as my connection to the wisdom realm is temporarily disrupted.\n\n"
    "🌿 Please Try Again Later\n"
    "Please try again later when my connection to the realm of beauty wisdom is restored. "
    f"In the meantime, you can explore our collection of healing oils at {COLLECTION_URL}\n\n"
    f"{SIGN_OFF}"
)

ErrorPolicy = Callable[[CompletionError], ErrorAction]

_RETRYABLE = {CompletionErrorKind.RATE_LIMITED, CompletionErrorKind.NETWORK}


def default_error_policy(error: CompletionError) -> ErrorAction:
    """Retry transient failures, fall back on everything else."""
    if error.kind in _RETRYABLE:
        return ErrorAction.RETRY
    return ErrorAction.FALLBACK


def with_download_hint(text: str) -> str:
    return f"{text.rstrip()}\n\n{DOWNLOAD_HINT}"


@dataclass
class GeneratedText:
    text: str
    kind: ResponseKind
    error: Optional[CompletionError] = None

    @property
    def is_fallback(self) -> bool:
        return self.kind == ResponseKind.FALLBACK


class ResponseGenerator:
    def __init__(
        self,
        catalog: CatalogStore,
        gateway: Optional[CompletionGateway] = None,
        *,
        system_prompt: Optional[str] = None,
        error_policy: Optional[ErrorPolicy] = None,
        max_retries: int = 0,
    ) -> None:
        self.catalog = catalog
        self.gateway = gateway
        self.system_prompt = system_prompt or default_system_prompt()
        self.error_policy = error_policy or default_error_policy
        self.max_retries = max(0, int(max_retries))

    # ------------------------------------------------------------------
    # Deterministic replies
    # ------------------------------------------------------------------
    def inventory(self) -> str:
        total = len(self.catalog)
        lines: List[str] = [
            BANNER,
            "",
            "🌙 I Hear You, My Child",
            "You wish to know about my sacred collection of oils! Let me share with you "
            f"our complete inventory of {total} divine oils, each blessed with ancient "
            "Egyptian wisdom.",
            "",
            "🌿 Our Complete Sacred Collection",
        ]
        number = 0
        for category, products in self.catalog.by_category().items():
            if not products:
                continue
            lines.append("")
            lines.append(f"**{category.value.upper()} ({len(products)} oils):**")
            for p in products:
                number += 1
                benefits = ", ".join(p.benefits)
                benefits = benefits[:1].upper() + benefits[1:]
                sold_out = " **CURRENTLY SOLD OUT**" if p.sold_out else ""
                lines.append(f"{number}. [{p.name}]({p.link}) - {benefits} ({p.price_summary}){sold_out}")

        lines += [
            "",
            "🌅 Ancient Wisdom from the Temple",
            f"These {total} sacred oils represent the complete wisdom of ancient Egyptian "
            "beauty and healing arts, each blessed with divine powers to restore and "
            "transform your beauty journey.",
            "",
            SIGN_OFF,
        ]
        return with_download_hint("\n".join(lines))

    def follow_up(self) -> str:
        total = len(self.catalog)
        summary = []
        for category, products in self.catalog.by_category().items():
            if not products:
                continue
            sold_out = self.catalog.sold_out_count(category)
            note = f" (including {sold_out} currently sold out)" if sold_out else ""
            summary.append(f"- **{len(products)} {category.value}**{note}")

        return "\n".join([
            BANNER,
            "",
            "🌙 I Hear You, My Child",
            "Yes, beloved seeker! The sacred collection I just shared with you represents "
            f"our complete inventory of all {total} divine oils. This is our entire "
            "treasured collection:",
            "",
            "🌿 Complete Summary",
            *summary,
            "",
            f"**Total: {total} sacred oils** - this is our complete offering, each one "
            "carefully crafted with ancient Egyptian wisdom and modern purity standards.",
            "",
            "🌅 Ancient Wisdom from the Temple",
            f"These {total} oils represent the full breadth of our sacred collection. Each oil "
            "carries the blessings of ancient beauty secrets, ready to transform your "
            "beauty journey.",
            "",
            SIGN_OFF,
        ])

    def download_acknowledgement(self, has_prescription: bool) -> str:
        if has_prescription:
            body = (
                "Your sacred prescription is ready, beloved seeker. It holds the oils and "
                "rituals I shared with you. Use the download button to receive it as a document."
            )
        else:
            body = (
                "I have not yet prescribed oils for you in this conversation, beloved seeker. "
                "You may still download a sample prescription, or tell me about your concern "
                "and I will prepare one for you."
            )
        return "\n".join([BANNER, "", "📜 Your Sacred Prescription", body, "", SIGN_OFF])

    # ------------------------------------------------------------------
    # Model-backed replies
    # ------------------------------------------------------------------
    async def general(self, message: str) -> GeneratedText:
        """Model reply for ``message``, or the fallback text on any failure."""
        if self.gateway is None:
            log.warning("GENERAL_FALLBACK | reason=gateway_unavailable")
            return GeneratedText(FALLBACK_RESPONSE, ResponseKind.FALLBACK)

        attempt = 0
        while True:
            try:
                text = await self.gateway.complete(self.system_prompt, message)
                if not isinstance(text, str) or not text.strip():
                    raise CompletionError(
                        CompletionErrorKind.MALFORMED_RESPONSE,
                        "Completion gateway returned no text",
                    )
                return GeneratedText(text, ResponseKind.GENERAL)
            except Exception as exc:
                err = classify_anthropic_error(exc)
                action = self.error_policy(err)
                log.warning(
                    f"GENERAL_COMPLETION_FAILED | kind={err.kind.value} | code={err.code} | "
                    f"action={action.value} | attempt={attempt + 1}"
                )
                if action == ErrorAction.RETRY and attempt < self.max_retries:
                    attempt += 1
                    continue
                if action == ErrorAction.PROPAGATE:
                    if err is exc:
                        raise
                    raise err from exc
                return GeneratedText(FALLBACK_RESPONSE, ResponseKind.FALLBACK, error=err)
