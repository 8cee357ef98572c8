"""
Catalog Store
=============

Static product catalog for Hathor Organics. Read-only at runtime; every
lookup preserves catalog order (carrier, essential, special).
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from .enums import ProductCategory
from .models import Product, SizeTier

STORE_URL = "https://hathororganics.com"
COLLECTION_URL = f"{STORE_URL}/collections/all"


def _link(name: str) -> str:
    return f"{STORE_URL}/products/{name.lower().replace(' ', '-')}"


def _oil(
    name: str,
    category: ProductCategory,
    benefits: Iterable[str],
    description: str,
    price_15ml: str,
    price_30ml: str,
    *,
    sold_out: bool = False,
) -> Product:
    link = _link(name)
    return Product(
        name=name,
        category=category,
        benefits=tuple(benefits),
        description=description,
        sizes=(
            SizeTier("15ml", price_15ml, link, drops_per_bottle=300, sold_out=sold_out),
            SizeTier("30ml", price_30ml, link, drops_per_bottle=600, sold_out=sold_out),
        ),
    )


C, E, S = ProductCategory.CARRIER, ProductCategory.ESSENTIAL, ProductCategory.SPECIAL

PRODUCTS: Tuple[Product, ...] = (
    # Carrier oils
    _oil("Moringa Oil", C,
         ["hair growth", "anti-aging", "moisturizing", "dandruff prevention", "acne treatment", "skin brightening"],
         "Cold-pressed moringa oil rich in antioxidants and vitamins",
         "LE 500.00", "LE 1,000.00"),
    _oil("Coconut Oil", C,
         ["moisturizing", "hair conditioning", "antibacterial", "skin healing", "makeup removal"],
         "Pure cold-pressed coconut oil for skin and hair care",
         "LE 200.00", "LE 400.00"),
    _oil("Sweet Almond Oil", C,
         ["moisturizing", "skin softening", "anti-inflammatory", "skin healing", "hair conditioning"],
         "Pure cold-pressed sweet almond oil for skin and hair care",
         "LE 400.00", "LE 800.00"),
    _oil("Sesame Oil", C,
         ["hair growth", "moisturizing", "anti-inflammatory", "UV protection", "acne treatment", "skin healing"],
         "Pure cold-pressed sesame oil with natural UV protection",
         "LE 300.00", "LE 600.00"),
    _oil("Argan Oil", C,
         ["hair conditioning", "skin moisturizing", "anti-aging", "nail health"],
         "Pure cold-pressed argan oil for hair, skin, and nails",
         "LE 480.00", "LE 960.00"),
    _oil("Cellulite Oil Mix", C,
         ["cellulite reduction", "skin tightening", "circulation improvement", "body contouring"],
         "Specialized oil blend for cellulite reduction and skin tightening",
         "LE 360.00", "LE 720.00"),
    _oil("Garden Cress Oil", C,
         ["hair growth", "scalp health", "dandruff prevention", "hair strengthening"],
         "Cold-pressed garden cress oil rich in nutrients for hair growth",
         "LE 300.00", "LE 600.00"),
    _oil("Black Seed Oil", C,
         ["immune support", "anti-inflammatory", "skin healing", "hair growth", "respiratory health"],
         "Pure black seed oil with powerful healing properties",
         "LE 500.00", "LE 1,000.00"),
    _oil("Virgin Olive Oil", C,
         ["moisturizing", "anti-aging", "skin healing", "hair conditioning"],
         "Pure virgin olive oil for skin and hair care",
         "LE 240.00", "LE 480.00", sold_out=True),
    # Essential oils
    _oil("Rosemary Oil", E,
         ["hair growth", "scalp circulation", "dandruff prevention", "hair strengthening"],
         "Pure rosemary oil for stimulating hair growth and scalp health",
         "LE 380.00", "LE 760.00"),
    _oil("Frankincense Oil", E,
         ["anti-aging", "skin regeneration", "stress relief", "meditation support"],
         "Pure frankincense oil for spiritual and skin wellness",
         "LE 1,000.00", "LE 2,000.00"),
    _oil("Lavender Oil", E,
         ["relaxation", "skin healing", "acne treatment", "sleep support"],
         "Pure lavender oil for aromatherapy and skin care",
         "LE 450.00", "LE 900.00"),
    _oil("Rose Oil", E,
         ["skin rejuvenation", "emotional balance", "anti-aging", "mood enhancement"],
         "Pure rose oil for skin and emotional wellness",
         "LE 750.00", "LE 1,500.00"),
    _oil("Cinnamon Oil", E,
         ["circulation improvement", "warming", "antimicrobial", "digestive support"],
         "Pure cinnamon oil with warming and antimicrobial properties",
         "LE 700.00", "LE 1,400.00", sold_out=True),
    _oil("Jasmine Oil", E,
         ["mood enhancement", "skin healing", "anti-aging", "stress relief"],
         "Pure jasmine oil for emotional and skin wellness",
         "LE 1,800.00", "LE 3,600.00", sold_out=True),
    _oil("Tea Tree Oil", E,
         ["acne treatment", "antifungal", "antibacterial", "scalp health"],
         "Pure tea tree oil for skin and scalp care",
         "LE 650.00", "LE 1,300.00"),
    _oil("Peppermint Oil", E,
         ["pain relief", "energy boosting", "cooling", "digestive support"],
         "Pure peppermint oil for pain relief and invigoration",
         "LE 350.00", "LE 700.00"),
    _oil("Clove Oil", E,
         ["pain relief", "antimicrobial", "dental health", "circulation improvement"],
         "Pure clove oil with powerful antimicrobial properties",
         "LE 700.00", "LE 1,400.00"),
    # Special oils
    Product(
        name="Acne Set",
        category=S,
        benefits=("acne treatment", "skin balancing", "anti-inflammatory", "healing"),
        description="Complete acne treatment set with specially formulated oils",
        sizes=(SizeTier("Set", "LE 1,200.00", _link("Acne Set"), drops_per_bottle=900),),
    ),
    _oil("Queen Tiye Hair Oil", S,
         ["hair growth", "scalp health", "hair strengthening", "ancient Egyptian formula"],
         "Special hair oil following an ancient Egyptian recipe for Queen Tiye",
         "LE 240.00", "LE 480.00", sold_out=True),
)


class CatalogStore:
    """Read-only lookup over a fixed product tuple."""

    def __init__(self, products: Iterable[Product] = PRODUCTS) -> None:
        self._products: Tuple[Product, ...] = tuple(products)
        self._by_name: Dict[str, Product] = {p.name.lower(): p for p in self._products}

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self):
        return iter(self._products)

    def get(self, name: str) -> Optional[Product]:
        return self._by_name.get((name or "").strip().lower())

    def by_category(self) -> Dict[ProductCategory, List[Product]]:
        """Products grouped by category, in ProductCategory declaration order."""
        grouped: Dict[ProductCategory, List[Product]] = {c: [] for c in ProductCategory}
        for p in self._products:
            grouped[p.category].append(p)
        return grouped

    def sold_out_count(self, category: Optional[ProductCategory] = None) -> int:
        return sum(
            1 for p in self._products
            if p.sold_out and (category is None or p.category == category)
        )

    def link_reference(self) -> Dict[str, str]:
        return {p.name: p.link for p in self._products}

    def to_prompt_data(self) -> Dict[str, list]:
        return {"oils": [p.to_dict() for p in self._products]}


_catalog: Optional[CatalogStore] = None


def get_catalog() -> CatalogStore:
    global _catalog
    if _catalog is None:
        _catalog = CatalogStore()
    return _catalog
