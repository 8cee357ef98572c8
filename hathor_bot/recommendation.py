# hathor_bot/recommendation.py
"""
Recommendation Extractor
────────────────────────
• Detects which catalog products a generated advice reply recommends
• Best-effort substring matching on product names and benefit tags
• Keyword overrides keyed on the USER message replace the heuristic with a
  fixed, profile-driven prescription
• Isolated from the deterministic catalog paths so it can be tuned and
  tested on its own
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Tuple

from .ailments import get_ailment
from .catalog import CatalogStore
from .models import PrescribedProduct, Prescription
from .utils import normalize_for_matching

log = logging.getLogger(__name__)


DEFAULT_INSTRUCTIONS = {
    "frequency": "Daily, as part of your evening ritual",
    "application": "Evening ritual only. Warm a few drops between your palms and massage gently into clean skin or scalp.",
    "duration": "4-6 weeks, then review your results",
}

DEFAULT_PRECAUTIONS = [
    "Perform a patch test 24 hours before first use.",
    "Always dilute essential oils with a carrier oil.",
    "Apply in the evening only and avoid sun exposure after use.",
    "Avoid contact with eyes and discontinue use if irritation occurs.",
]


# ─────────────────────────────────────────────────────────────
# Keyword overrides
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class KeywordOverride:
    """Fixed prescription used when the user's message mentions a keyword."""
    name: str
    keywords: Tuple[str, ...]
    products: Tuple[str, ...]
    ailment: str

    @property
    def pattern(self) -> Pattern[str]:
        alternatives = "|".join(re.escape(k) for k in self.keywords)
        return re.compile(rf"\b(?:{alternatives})\b", re.I)

    def matches(self, user_message: str) -> bool:
        return bool(self.pattern.search(user_message or ""))


HAIR_LOSS_KEYWORDS = (
    "bald",
    "balding",
    "baldness",
    "hair loss",
    "losing my hair",
    "losing hair",
    "hair fall",
    "hair falling",
    "thinning hair",
    "receding hairline",
    "alopecia",
)

KEYWORD_OVERRIDES: Tuple[KeywordOverride, ...] = (
    KeywordOverride(
        name="hair_loss",
        keywords=HAIR_LOSS_KEYWORDS,
        products=("Garden Cress Oil", "Rosemary Oil", "Sesame Oil"),
        ailment="hair_loss",
    ),
)


class RecommendationExtractor:
    def __init__(
        self,
        catalog: CatalogStore,
        *,
        match_benefits: bool = True,
        overrides: Iterable[KeywordOverride] = KEYWORD_OVERRIDES,
    ) -> None:
        self.catalog = catalog
        self.match_benefits = match_benefits
        self.overrides: Tuple[KeywordOverride, ...] = tuple(overrides)

    def extract(self, response_text: str, user_message: str = "") -> Optional[Prescription]:
        """Prescription for one reply, or None when nothing matched.

        Overrides are checked against ``user_message`` first; when one fires
        the reply text is not inspected at all.
        """
        override = self.match_override(user_message)
        if override is not None:
            return self.apply_override(override)

        text = normalize_for_matching(response_text)
        if not text:
            return None

        matched: List[PrescribedProduct] = []
        for product in self.catalog:
            if self._mentions(text, product.name, product.benefits):
                matched.append(PrescribedProduct.from_product(product))

        if not matched:
            log.info(f"EXTRACT_NO_MATCH | chars={len(text)}")
            return None

        log.info(f"EXTRACT_MATCHED | count={len(matched)} | benefits={self.match_benefits}")
        return Prescription(
            products=matched,
            instructions=dict(DEFAULT_INSTRUCTIONS),
            precautions=list(DEFAULT_PRECAUTIONS),
            source="extracted",
        )

    def _mentions(self, text: str, name: str, benefits: Iterable[str]) -> bool:
        if name.lower() in text:
            return True
        if self.match_benefits:
            return any(b.lower() in text for b in benefits)
        return False

    def match_override(self, user_message: str) -> Optional[KeywordOverride]:
        for override in self.overrides:
            if override.matches(user_message):
                return override
        return None

    def apply_override(self, override: KeywordOverride) -> Prescription:
        profile = get_ailment(override.ailment)
        products: List[PrescribedProduct] = []
        for name in override.products:
            product = self.catalog.get(name)
            if product is None:
                log.warning(f"OVERRIDE_UNKNOWN_PRODUCT | rule={override.name} | product={name}")
                continue
            dosage = profile.measurements.get(name) if profile else None
            products.append(PrescribedProduct.from_product(product, dosage=dosage))

        if profile is not None:
            instructions = {
                "frequency": profile.frequency,
                "application": profile.application,
                "duration": profile.duration,
            }
            precautions = [profile.precautions] + DEFAULT_PRECAUTIONS[:2]
        else:
            instructions = dict(DEFAULT_INSTRUCTIONS)
            precautions = list(DEFAULT_PRECAUTIONS)

        log.info(f"EXTRACT_OVERRIDE | rule={override.name} | products={len(products)}")
        return Prescription(
            products=products,
            instructions=instructions,
            precautions=precautions,
            source=override.name,
        )
