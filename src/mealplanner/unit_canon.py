"""
Canonical vocabulary for recipe import.

This file provides the authoritative vocabulary for:
- Units of measure (canonical forms + inflected variants)
- Recipe feature phrases (the "Cechy" section)
- Default ingredient category, meal types and tag colors

All names are Polish, matching the markdown dialect users write recipes in.
"""

from typing import Dict, List, Optional, Set, Tuple

# =============================================================================
# UNITS
# =============================================================================
# Canonical units, in the order they are offered in the meal form
CANON_UNITS: List[str] = [
    "g",
    "kg",
    "ml",
    "l",
    "szt",
    "łyżka",
    "łyżeczka",
    "szklanka",
    "opakowanie",
    "pęczek",
    "ząbek",
    "plaster",
    "kromka",
    "kostka",
    "garść",
    "szczypta",
    "listek",
    "gałązka",
    "łodyga",
    "puszka",
    "słoik",
    "woreczek",
    "porcja",
]

# Used when an ingredient line carries no unit token at all
GENERIC_UNIT = "szt"

# Units a reversed "name - (200g)" line may carry inside the parenthesis
PARENTHETICAL_UNITS: Set[str] = {"g", "kg", "ml", "l"}

# =============================================================================
# UNIT SYNONYMS
# =============================================================================
# Maps canonical unit -> set of inflected/plural variants that normalize to it
UNIT_SYNONYMS: Dict[str, Set[str]] = {
    "szt": {"sztuka", "sztuki", "sztuk", "szt."},
    "łyżka": {"łyżki", "łyżek", "łyżkę", "łyż."},
    "łyżeczka": {"łyżeczki", "łyżeczek", "łyżeczkę", "łyżecz."},
    "szklanka": {"szklanki", "szklanek", "szklankę"},
    "opakowanie": {"opakowania", "opakowań", "op."},
    "pęczek": {"pęczki", "pęczków"},
    "ząbek": {"ząbki", "ząbków"},
    "plaster": {"plastry", "plastrów", "plasterek", "plasterki", "plasterków"},
    "kromka": {"kromki", "kromek", "kromkę"},
    "kostka": {"kostki", "kostek", "kostkę"},
    "garść": {"garści", "garstka"},
    "szczypta": {"szczypty", "szczypt", "szczyptę"},
    "listek": {"listki", "listków"},
    "gałązka": {"gałązki", "gałązek", "gałązkę"},
    "łodyga": {"łodygi", "łodyg", "łodygę"},
    "puszka": {"puszki", "puszek", "puszkę"},
    "słoik": {"słoiki", "słoików", "słoiczek"},
    "woreczek": {"woreczki", "woreczków"},
    "porcja": {"porcje", "porcji", "porcję"},
    "kg": {"kilogram", "kilogramy", "kilogramów"},
    "g": {"gram", "gramy", "gramów", "gr"},
    "ml": {"mililitr", "mililitry", "mililitrów"},
    "l": {"litr", "litry", "litrów"},
}

# Flat lookup built once: lowercased variant -> canonical unit
_UNIT_LOOKUP: Dict[str, str] = {unit: unit for unit in CANON_UNITS}
for _canon, _variants in UNIT_SYNONYMS.items():
    for _variant in _variants:
        _UNIT_LOOKUP[_variant] = _canon


def known_unit_words() -> List[str]:
    """
    All unit words the forward ingredient grammar recognizes.

    Longest first, so a regex alternation prefers "łyżeczka" over "łyżka"
    and "kg" over "g".
    """
    return sorted(_UNIT_LOOKUP.keys(), key=len, reverse=True)


def canonical_unit(token: str) -> Optional[str]:
    """
    Look up the canonical form of a unit token.

    Args:
        token: Raw unit text (e.g., "Łyżki", "kromek", "g")

    Returns:
        Canonical unit if recognized, None otherwise

    Examples:
        canonical_unit("łyżki") -> "łyżka"
        canonical_unit("KROMEK") -> "kromka"
        canonical_unit("cups") -> None
    """
    return _UNIT_LOOKUP.get(token.lower().strip())


# =============================================================================
# FEATURE PHRASES
# =============================================================================
# Maps a "Cechy" list label (lowercased) -> ParsedRecipe flag attribute
FEATURE_FLAGS: Dict[str, str] = {
    "wegetariańskie": "is_vegetarian",
    "wegańskie": "is_vegan",
    "bezglutenowe": "is_gluten_free",
    "bez laktozy": "is_lactose_free",
    "szybkie": "is_quick",
    "meal prep": "is_meal_prep",
    "dla dzieci": "is_child_friendly",
}

# =============================================================================
# REFERENCE DATA DEFAULTS
# =============================================================================

# Category given to ingredients the importer creates
DEFAULT_INGREDIENT_CATEGORY = "Inne"

# (name, order) pairs seeded for a new account
DEFAULT_MEAL_TYPES: List[Tuple[str, int]] = [
    ("Śniadanie", 0),
    ("II śniadanie", 1),
    ("Obiad", 2),
    ("Kolacja", 3),
    ("Przekąska", 4),
]

DEFAULT_TAG_COLOR = "#6b7280"  # gray-500

# Palette new tags created by the importer draw from
TAG_COLORS: List[str] = [
    "#ef4444",  # red-500
    "#f59e0b",  # amber-500
    "#10b981",  # emerald-500
    "#3b82f6",  # blue-500
    "#8b5cf6",  # violet-500
    "#ec4899",  # pink-500
]
