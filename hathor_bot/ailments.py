# hathor_bot/ailments.py
"""
Ailment knowledge base.

Serialised into the system prompt and used to parameterise keyword-override
prescriptions. Product names here are free text; several refer to oils that
are not (or not yet) in the catalog.
"""
from __future__ import annotations

from typing import Dict, Optional

from .models import AilmentProfile

EVENING_ONLY = "Evening ritual only"


def _profile(key: str, description: str, primary, supporting, **plan) -> AilmentProfile:
    return AilmentProfile(
        key=key,
        description=description,
        primary_products=tuple(primary),
        supporting_products=tuple(supporting),
        application=plan.pop("application", EVENING_ONLY),
        **plan,
    )


AILMENTS: Dict[str, AilmentProfile] = {
    p.key: p
    for p in (
        _profile(
            "acne",
            "A common skin condition characterized by pimples, blackheads, and inflammation",
            ["Sesame Oil", "Moringa Oil", "Tea Tree Essential Oil"],
            ["Argan Oil", "Lavender Essential Oil", "Rosemary Oil"],
            duration="4-6 weeks",
            frequency="Daily",
            precautions="Always dilute essential oils with carrier oils. Perform patch test before full application.",
            benefits="Purifies skin, regulates sebum production, reduces inflammation, prevents future breakouts",
            measurements={
                "Sesame Oil": "2-3 drops (2-6ml)",
                "Moringa Oil": "2-3 drops (2-6ml)",
                "Tea Tree Essential Oil": "1-2 drops (1-4ml) diluted",
                "Argan Oil": "1-2 drops (1-4ml)",
                "Lavender Essential Oil": "1 drop (1-2ml)",
                "Rosemary Oil": "1 drop (1-2ml)",
            },
            explanation=(
                "Sesame oil's anti-inflammatory properties and non-comedogenic nature make it ideal "
                "for acne-prone skin. Moringa oil helps balance natural oils and detoxify pores. Tea "
                "Tree Essential Oil has antibacterial properties that help treat acne. Argan oil's "
                "oleic and linoleic acids help balance the skin. Lavender and Rosemary oils act as "
                "refreshing astringents that balance and tone the skin."
            ),
        ),
        _profile(
            "dry_skin",
            "Skin lacking moisture, often feeling tight and flaky",
            ["Sweet Almond Oil"], [],
            duration="Ongoing",
            frequency="Daily",
            precautions="Use gentle application. Can be used more frequently if needed.",
            benefits="Deep hydration, improved skin barrier, reduced flakiness, enhanced skin tone",
            measurements={
                "Sweet Almond Oil": "Apply a small amount to face and body after bathing (e.g., 3-4 drops for face)",
            },
            explanation=(
                "Sweet Almond Oil was used in ancient Egypt to moisturize and protect skin from arid "
                "conditions. Its emollient properties improve complexion and skin tone."
            ),
        ),
        _profile(
            "sensitive_skin",
            "Skin prone to irritation, redness, and reactions",
            ["Sesame Oil", "Sweet Almond Oil"], ["Jojoba Oil"],
            duration="Ongoing",
            frequency="Daily",
            precautions="Always perform patch test. Start with minimal amounts.",
            benefits="Reduced irritation, improved skin barrier, gentle cleansing",
            measurements={
                "Sesame Oil": "1-2 drops (1-4ml)",
                "Sweet Almond Oil": "1-2 drops (1-4ml)",
                "Jojoba Oil": "1-2 drops (1-4ml)",
            },
            explanation=(
                "Sesame Oil is highly anti-inflammatory, making it ideal for sensitive skin. Sweet "
                "Almond Oil is very mild and hypoallergenic. Jojoba Oil mimics skin's natural sebum."
            ),
        ),
        _profile(
            "aging_skin",
            "Concerns related to fine lines, wrinkles, and skin aging",
            ["Rosehip Oil", "Frankincense Essential Oil"], [],
            duration="Ongoing",
            frequency="Daily",
            precautions=(
                "Use gentle application. Avoid eye area unless specified. "
                "Dilute essential oils with carrier oils."
            ),
            benefits="Reduced fine lines, improved skin elasticity, enhanced collagen production",
            measurements={
                "Rosehip Oil": "1-2 drops to face and neck daily",
                "Frankincense Essential Oil": "2-3 drops diluted in 1 tsp Sweet Almond Oil, apply to face",
            },
            explanation=(
                "Rosehip Oil, known as the 'Oil of Youth,' was used for rejuvenation. Frankincense "
                "has anti-inflammatory and healing properties, supporting aging skin."
            ),
        ),
        _profile(
            "sun_damage",
            "Skin damage caused by sun exposure, including sunburn, hyperpigmentation, and premature aging",
            ["Rosehip Oil"], [],
            duration="Ongoing",
            frequency="Daily",
            precautions="Apply after sun exposure. Use sunscreen during the day.",
            benefits="Heals sun-damaged skin, reduces hyperpigmentation, improves elasticity",
            measurements={"Rosehip Oil": "1-2 drops to affected areas daily"},
            explanation=(
                "Rosehip Oil was historically used to heal sun-damaged skin due to its high content "
                "of vitamins A and C, which promote skin repair and regeneration."
            ),
        ),
        _profile(
            "spots_on_face",
            "Dark spots or hyperpigmentation on the face",
            ["Sweet Almond Oil"], [],
            duration="4-6 weeks",
            frequency="2-3 times per week",
            precautions="Perform patch test. Avoid if allergic to honey.",
            benefits="Improves complexion, reduces dark spots",
            measurements={"Sweet Almond Oil": "1 tbsp mixed with 1 tbsp honey for a mask"},
            explanation=(
                "Sweet Almond Oil, combined with honey, creates a nourishing mask that helps even "
                "out skin tone and reduce dark spots."
            ),
        ),
        _profile(
            "general_moisturization",
            "General skin hydration and nourishment",
            ["Argan Oil", "Jojoba Oil"], [],
            duration="Ongoing",
            frequency="Daily",
            precautions="Use gentle application. Can be used more frequently if needed.",
            benefits="Hydrates and nourishes skin, improves skin barrier",
            measurements={
                "Argan Oil": "A few drops to face and body after cleansing",
                "Jojoba Oil": "A few drops to face and body after cleansing",
            },
            explanation=(
                "Argan Oil and Jojoba Oil provide deep hydration and nourishment without clogging pores."
            ),
        ),
        _profile(
            "hair_loss",
            "Thinning hair or balding concerns",
            ["Garden Cress Oil", "Rosemary Oil", "Rosehip Oil"],
            ["Sesame Oil", "Frankincense Oil", "Argan Oil"],
            duration="3-6 months",
            frequency="2-3 times per week",
            precautions="Massage gently into scalp. Avoid excessive pulling.",
            benefits="Stimulated hair growth, improved scalp circulation, strengthened hair follicles",
            measurements={
                "Garden Cress Oil": "4-5 drops (4-10ml)",
                "Rosemary Oil": "2-3 drops (2-6ml)",
                "Rosehip Oil": "2-3 drops (2-6ml)",
                "Sesame Oil": "2-3 drops (2-6ml)",
                "Frankincense Oil": "1-2 drops (1-4ml)",
                "Argan Oil": "2-3 drops (2-6ml)",
            },
            explanation=(
                "Garden Cress Oil is nutrient-rich and helps lengthen and grow hair. Rosemary Oil "
                "stimulates scalp circulation. Rosehip Oil promotes healthy hair growth due to its "
                "vitamin content. Sesame Oil's tranquilizing properties help relieve anxiety-related "
                "hair loss. Frankincense and Argan Oils provide additional nourishment."
            ),
        ),
        _profile(
            "dandruff",
            "Flaky, itchy scalp condition",
            ["Sesame Oil", "Garden Cress Oil", "Tea Tree Essential Oil"],
            ["Moringa Oil", "Lavender Essential Oil", "Argan Oil", "Rosemary Oil", "Jojoba Oil"],
            duration="4-8 weeks",
            frequency="2-3 times per week",
            precautions="Massage gently. Rinse thoroughly.",
            benefits="Reduced flaking, improved scalp health, balanced moisture",
            measurements={
                "Sesame Oil": "3-4 drops (3-8ml)",
                "Garden Cress Oil": "3-4 drops (3-8ml)",
                "Tea Tree Essential Oil": "2-3 drops (2-6ml) diluted",
                "Moringa Oil": "2-3 drops (2-6ml)",
                "Lavender Essential Oil": "1-2 drops (1-4ml)",
                "Argan Oil": "2-3 drops (2-6ml)",
                "Rosemary Oil": "1-2 drops (1-4ml)",
                "Jojoba Oil": "1 tbsp for dilution",
            },
            explanation=(
                "Sesame Oil keeps the scalp moisturized. Garden Cress Oil helps decrease dandruff by "
                "healing the scalp. Tea Tree Essential Oil has antifungal properties that combat "
                "dandruff-causing fungi."
            ),
        ),
        _profile(
            "dry_damaged_hair",
            "Hair that is dry, brittle, or damaged",
            ["Argan Oil", "Jojoba Oil"], [],
            duration="Ongoing",
            frequency="Weekly",
            precautions="Use as a hair treatment. Rinse out after application.",
            benefits="Restores moisture, repairs damage, adds shine",
            measurements={
                "Argan Oil": "Apply to hair and scalp post-wash, leave for 30 minutes, rinse",
                "Jojoba Oil": "Apply to hair and scalp post-wash, leave for 30 minutes, rinse",
            },
            explanation=(
                "Argan Oil and Jojoba Oil are rich in fatty acids and vitamins that help restore "
                "moisture and repair damaged hair."
            ),
        ),
        _profile(
            "hair_growth",
            "Promoting hair growth and strengthening hair",
            ["Rosehip Oil"], [],
            duration="3-6 months",
            frequency="1-2 times weekly",
            precautions="Massage into scalp. Leave overnight if possible.",
            benefits="Stimulates hair growth, strengthens hair follicles",
            measurements={"Rosehip Oil": "Massage into scalp, leave overnight, wash out in the morning"},
            explanation="Rosehip Oil's vitamins A, C, and E promote healthy hair growth and scalp health.",
        ),
        _profile(
            "scalp_health",
            "Maintaining a healthy scalp, reducing itchiness or flakiness",
            ["Tea Tree Essential Oil", "Jojoba Oil"], [],
            duration="4-8 weeks",
            frequency="2-3 times per week",
            precautions="Dilute essential oils with carrier oils. Massage gently into scalp.",
            benefits="Reduces flakiness, soothes itchiness, improves scalp health",
            measurements={
                "Tea Tree Essential Oil": "2-3 drops diluted in 1 tbsp Jojoba Oil",
                "Jojoba Oil": "1 tbsp",
            },
            explanation=(
                "Tea Tree Essential Oil has antifungal properties that help with scalp irritations, "
                "while Jojoba Oil moisturizes and balances the scalp."
            ),
        ),
        _profile(
            "general_body_care",
            "General body hydration and nourishment",
            ["Sweet Almond Oil", "Argan Oil"], [],
            duration="Ongoing",
            frequency="Daily",
            precautions="Use after showering. Can be used more frequently if needed.",
            benefits="Hydrates skin, improves skin tone, reduces dryness",
            measurements={
                "Sweet Almond Oil": "Apply to body after showering",
                "Argan Oil": "Apply to body after showering",
            },
            explanation="Sweet Almond Oil and Argan Oil leave skin soft and smooth.",
        ),
        _profile(
            "muscle_pain_relief",
            "Relieving sore muscles and joint pain",
            ["Peppermint Essential Oil"], ["Sweet Almond Oil"],
            duration="As needed",
            frequency="As needed",
            precautions="Dilute essential oils with carrier oils. Avoid if sensitive to menthol.",
            benefits="Provides cooling relief, reduces inflammation",
            measurements={"Peppermint Essential Oil": "2-3 drops", "Sweet Almond Oil": "1 tsp"},
            explanation="Peppermint Essential Oil has analgesic properties that relieve muscle pain.",
        ),
        _profile(
            "relaxation",
            "Promoting relaxation and stress relief",
            ["Lavender Essential Oil"], ["Sweet Almond Oil"],
            duration="As needed",
            frequency="As needed",
            precautions="Dilute essential oils with carrier oils. Can be used in diffusers or baths.",
            benefits="Calms mind and body, promotes better sleep",
            measurements={
                "Lavender Essential Oil": "2-3 drops in diffuser or diluted in bath",
                "Sweet Almond Oil": "1 tbsp for massage oil",
            },
            explanation="Lavender Essential Oil is well-known for its calming properties.",
        ),
    )
}


def get_ailment(key: str) -> Optional[AilmentProfile]:
    return AILMENTS.get(key)


def ailments_for_prompt() -> Dict[str, dict]:
    return {key: profile.to_dict() for key, profile in AILMENTS.items()}
