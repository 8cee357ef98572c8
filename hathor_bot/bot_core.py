"""
Brain of the Hathor advisor: one chat turn, end to end.

Flow per message
────────────────
• Load the session's previous context (type drives follow-up detection)
• Classify: download > inventory > follow-up > general
• Deterministic reply, or a gateway call on the general path
• Extract a prescription from successful general replies only
• Persist the exact text the user sees (download turns persist nothing)
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from .enums import Intent, ResponseKind
from .intent_classifier import classify
from .models import ChatReply, ConversationContext, Prescription
from .recommendation import RecommendationExtractor
from .redis_manager import ConversationStore
from .response_generator import ResponseGenerator, with_download_hint
from .utils import convert_markdown_links
from .utils.smart_logger import get_smart_logger

log = logging.getLogger(__name__)

DOWNLOAD_URL = "/download-prescription"


def _prescription_flags(prescription: Optional[Prescription]) -> Dict[str, Any]:
    return {
        "prescriptionAvailable": prescription is not None,
        "prescriptionData": prescription.to_dict() if prescription else None,
    }


class HathorBotCore:
    def __init__(
        self,
        store: ConversationStore,
        generator: ResponseGenerator,
        extractor: RecommendationExtractor,
    ) -> None:
        self.store = store
        self.generator = generator
        self.extractor = extractor
        self.smart_log = get_smart_logger("bot_core")

    # ────────────────────────────────────────────────────────
    # Public entry point
    # ────────────────────────────────────────────────────────
    async def process_message(self, message: str, session_id: str) -> ChatReply:
        started = time.time()
        previous = self.store.get(session_id)
        previous_kind = previous.last_response_type if previous else None
        self.smart_log.turn_start(session_id, message, previous is not None)

        intent = classify(message, previous_kind)
        self.smart_log.intent_classified(
            session_id, intent.value, previous_kind.value if previous_kind else None
        )

        if intent == Intent.DOWNLOAD:
            reply = self._download_reply(previous)
        elif intent == Intent.INVENTORY:
            reply = ChatReply(
                text=convert_markdown_links(self.generator.inventory()),
                kind=ResponseKind.INVENTORY,
                flags={"inventoryComplete": True},
            )
        elif intent == Intent.FOLLOW_UP:
            reply = ChatReply(
                text=convert_markdown_links(self.generator.follow_up()),
                kind=ResponseKind.FOLLOW_UP,
                flags={"followUpConfirmed": True},
            )
        else:
            reply = await self._general_reply(message, session_id, previous)

        if reply.kind != ResponseKind.DOWNLOAD:
            self._remember(session_id, reply, previous)

        self.smart_log.response_generated(session_id, reply.kind.value, time.time() - started)
        return reply

    # ────────────────────────────────────────────────────────
    # Per-intent handlers
    # ────────────────────────────────────────────────────────
    async def _general_reply(
        self, message: str, session_id: str, previous: Optional[ConversationContext]
    ) -> ChatReply:
        carried = previous.prescription if previous else None
        generated = await self.generator.general(message)

        if generated.is_fallback:
            reason = generated.error.kind.value if generated.error else "gateway_unavailable"
            self.smart_log.fallback_used(session_id, reason, generated.error.code if generated.error else None)
            flags: Dict[str, Any] = {"fallback": True}
            if generated.error is not None:
                flags["error"] = generated.error.to_diagnostic()
            return ChatReply(
                text=convert_markdown_links(generated.text),
                kind=ResponseKind.FALLBACK,
                flags=flags,
                prescription=carried,
            )

        extracted = self.extractor.extract(generated.text, message)
        if extracted is not None:
            self.smart_log.prescription_extracted(session_id, extracted.product_names, extracted.source)
        prescription = extracted or carried

        body = with_download_hint(generated.text) if prescription else generated.text
        return ChatReply(
            text=convert_markdown_links(body),
            kind=ResponseKind.GENERAL,
            flags=_prescription_flags(prescription),
            prescription=prescription,
        )

    def _download_reply(self, previous: Optional[ConversationContext]) -> ChatReply:
        prescription = previous.prescription if previous else None
        flags = {"downloadRequested": True, **_prescription_flags(prescription), "downloadUrl": DOWNLOAD_URL}
        return ChatReply(
            text=self.generator.download_acknowledgement(prescription is not None),
            kind=ResponseKind.DOWNLOAD,
            flags=flags,
            prescription=prescription,
        )

    def _remember(
        self, session_id: str, reply: ChatReply, previous: Optional[ConversationContext]
    ) -> None:
        prescription = reply.prescription
        if prescription is None and previous is not None:
            prescription = previous.prescription
        ctx = ConversationContext(
            session_id=session_id,
            last_response_type=reply.kind,
            last_response=reply.text,
            prescription=prescription,
        )
        saved = self.store.put(session_id, ctx)
        if saved:
            self.smart_log.context_saved(session_id, reply.kind.value, prescription is not None)
        else:
            self.smart_log.warning(session_id, "CONTEXT_NOT_SAVED", "store write failed")
