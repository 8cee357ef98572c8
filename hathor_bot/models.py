"""
Dataclass models for catalog reference data, prescriptions and
per-session conversation context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .enums import ProductCategory, ResponseKind


# ─────────────────────────────────────────────────────────────
# Reference data (immutable)
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SizeTier:
    size: str
    price: str
    link: str
    drops_per_bottle: Optional[int] = None
    sold_out: bool = False

    def label(self) -> str:
        # A "Set" tier is described by its drop count instead of volume
        if self.size.endswith("ml") or self.drops_per_bottle is None:
            return f"{self.size} {self.price}"
        return f"{self.size} {self.price}, {self.drops_per_bottle} drops"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "price": self.price,
            "dropsPerBottle": self.drops_per_bottle,
            "link": self.link,
            "soldOut": self.sold_out,
        }


@dataclass(frozen=True)
class Product:
    name: str
    category: ProductCategory
    benefits: Tuple[str, ...]
    sizes: Tuple[SizeTier, ...]
    description: str = ""

    @property
    def link(self) -> str:
        return self.sizes[0].link

    @property
    def sold_out(self) -> bool:
        return all(s.sold_out for s in self.sizes)

    @property
    def price_summary(self) -> str:
        return ", ".join(s.label() for s in self.sizes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category.value,
            "benefits": list(self.benefits),
            "description": self.description,
            "sizes": [s.to_dict() for s in self.sizes],
        }


@dataclass(frozen=True)
class AilmentProfile:
    key: str
    description: str
    primary_products: Tuple[str, ...]
    supporting_products: Tuple[str, ...]
    application: str
    duration: str
    frequency: str
    precautions: str
    benefits: str
    measurements: Dict[str, str] = field(default_factory=dict)
    explanation: str = ""

    @property
    def recommended_products(self) -> List[str]:
        return list(self.primary_products) + list(self.supporting_products)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "recommended_oils": self.recommended_products,
            "treatment_plan": {
                "primary_oils": list(self.primary_products),
                "supporting_oils": list(self.supporting_products),
                "application": self.application,
                "duration": self.duration,
                "frequency": self.frequency,
                "precautions": self.precautions,
                "benefits": self.benefits,
                "measurements": dict(self.measurements),
            },
            "detailed_explanation": self.explanation,
        }


# ─────────────────────────────────────────────────────────────
# Derived payloads
# ─────────────────────────────────────────────────────────────
@dataclass
class PrescribedProduct:
    name: str
    category: str
    link: str
    prices: str
    sold_out: bool = False
    dosage: Optional[str] = None

    @classmethod
    def from_product(cls, product: Product, dosage: Optional[str] = None) -> "PrescribedProduct":
        return cls(
            name=product.name,
            category=product.category.value,
            link=product.link,
            prices=product.price_summary,
            sold_out=product.sold_out,
            dosage=dosage,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "category": self.category,
            "link": self.link,
            "prices": self.prices,
            "soldOut": self.sold_out,
        }
        if self.dosage:
            result["dosage"] = self.dosage
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrescribedProduct":
        return cls(
            name=data["name"],
            category=data.get("category", ""),
            link=data.get("link", ""),
            prices=data.get("prices", ""),
            sold_out=bool(data.get("soldOut", False)),
            dosage=data.get("dosage"),
        )


@dataclass
class Prescription:
    """Recommended products for one turn plus usage boilerplate."""
    products: List[PrescribedProduct]
    instructions: Dict[str, str]
    precautions: List[str]
    source: str = "extracted"

    @property
    def product_names(self) -> List[str]:
        return [p.name for p in self.products]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "products": [p.to_dict() for p in self.products],
            "instructions": dict(self.instructions),
            "precautions": list(self.precautions),
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Prescription":
        return cls(
            products=[PrescribedProduct.from_dict(p) for p in data.get("products", [])],
            instructions=dict(data.get("instructions", {})),
            precautions=list(data.get("precautions", [])),
            source=data.get("source", "extracted"),
        )


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ConversationContext:
    session_id: str
    last_response_type: ResponseKind
    last_response: str
    prescription: Optional[Prescription] = None
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "last_response_type": self.last_response_type.value,
            "last_response": self.last_response,
            "prescription": self.prescription.to_dict() if self.prescription else None,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationContext":
        raw_rx = data.get("prescription")
        return cls(
            session_id=data["session_id"],
            last_response_type=ResponseKind(data["last_response_type"]),
            last_response=data.get("last_response", ""),
            prescription=Prescription.from_dict(raw_rx) if raw_rx else None,
            timestamp=data.get("timestamp") or utc_now_iso(),
        )


@dataclass
class ChatReply:
    """Result of one chat turn, ready to be serialised for the client."""
    text: str
    kind: ResponseKind
    success: bool = True
    flags: Dict[str, Any] = field(default_factory=dict)
    prescription: Optional[Prescription] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"response": self.text, "success": self.success}
        payload.update(self.flags)
        return payload
