"""
Parse markdown recipe documents into structured ParsedRecipe objects.

Python-first, regex-based parser - no I/O and no randomness, the same text
always yields the same recipes. Uses canonical vocabulary from unit_canon.py.

Document format:

    # Spaghetti Bolognese

    ## Info
    - Porcje: 4
    - Przygotowanie: 15 min
    - Gotowanie: 45 min
    - Typ: Obiad, Kolacja
    - Tagi: Włoskie, Makaron
    - Opis: Klasyczne włoskie danie

    ## Składniki
    - 500g mielona wołowina
    - 2 ząbki czosnek
    - makaron spaghetti - 200 g

    ## Instrukcje
    1. Podsmaż cebulę na oliwie
    2. ...

    ## Cechy
    - Dla dzieci

    ---

    # Kolejne danie
"""

import math
import re
import logging
from typing import Dict, List, Optional

from .data.models import ParsedIngredientLine, ParsedRecipe
from .unit_canon import (
    FEATURE_FLAGS,
    GENERIC_UNIT,
    PARENTHETICAL_UNITS,
    canonical_unit,
    known_unit_words,
)

logger = logging.getLogger(__name__)

EXAMPLE_DOCUMENT = """# Spaghetti Bolognese

## Info
- Porcje: 4
- Przygotowanie: 15 min
- Gotowanie: 45 min
- Typ: Obiad, Kolacja
- Tagi: Włoskie, Makaron
- Opis: Klasyczne włoskie danie

## Składniki
- 500g mielona wołowina
- 400g pomidory krojone
- 200g makaron spaghetti
- 1 szt cebula
- 2 ząbki czosnek
- 2 łyżki oliwy

## Instrukcje
1. Podsmaż cebulę na oliwie
2. Dodaj mięso i smaż do zbrązowienia
3. Dodaj pomidory i gotuj 30 min
4. Ugotuj makaron al dente
5. Podawaj makaron z sosem

## Cechy
- Dla dzieci

---

# Kolejne danie...
"""

# Patterns
RECIPE_SEPARATOR = re.compile(r"^[ \t]*-{3,}[ \t]*$", re.MULTILINE)
TITLE_PATTERN = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)
SECTION_PATTERN = re.compile(r"^##[ \t]+(.+?)\s*$")
LIST_MARKER = re.compile(r"^[-*]\s+")
FIRST_INTEGER = re.compile(r"(\d+)")
# Longer Porcje/time values are treated as missing (fits a 64-bit SQLite INTEGER)
MAX_INTEGER_DIGITS = 18

# "2 i 1/2", "1 1/2", "1/3", "1,5", "200"
AMOUNT = r"\d+\s+i\s+\d+/\d+|\d+\s+\d+/\d+|\d+/\d+|\d+(?:[.,]\d+)?"
MIXED_WORD_FRACTION = re.compile(r"^(\d+)\s+i\s+(\d+)/(\d+)$", re.IGNORECASE)
MIXED_FRACTION = re.compile(r"^(\d+)\s+(\d+)/(\d+)$")
SIMPLE_FRACTION = re.compile(r"^(\d+)/(\d+)$")
DECIMAL = re.compile(r"^\d+(?:[.,]\d+)?$")

_UNITS = "|".join(re.escape(unit) for unit in known_unit_words())
_PAREN_UNITS = "|".join(sorted(PARENTHETICAL_UNITS, key=len, reverse=True))

# 1. "mąka pszenna - 500 g (ok. 4 szklanki)"
REVERSED_WITH_AMOUNT = re.compile(
    rf"^(?P<name>.+?)\s+-\s+(?P<amount>{AMOUNT})\s*(?P<unit>[^\s()\d][^\s()]*)?"
    rf"\s*(?:\(.*\))?\s*$",
    re.IGNORECASE,
)
# 2. "pierś z kurczaka - (ok. 300g)"
REVERSED_PARENTHETICAL = re.compile(
    rf"^(?P<name>.+?)\s+-\s+\(\s*(?:ok\.\s*)?(?P<amount>\d+(?:[.,]\d+)?)\s*"
    rf"(?P<unit>{_PAREN_UNITS})\s*\)\s*$",
    re.IGNORECASE,
)
# 3. "500g mielona wołowina", "2 i 1/2 kromki chleba", "3 jajka"
FORWARD = re.compile(
    rf"^(?P<amount>{AMOUNT})(?:\s*(?P<unit>{_UNITS})\s+|\s+)(?P<name>\S.*)$",
    re.IGNORECASE,
)

# "(200g)", "(ok. 200g)", "(150ml)", "(ok. 150 ml)"
WEIGHT_ANNOTATION = re.compile(
    r"\(\s*(?:ok\.\s*)?\d+(?:[.,]\d+)?\s*(?:g|ml)\s*\)",
    re.IGNORECASE,
)


def parse_markdown_recipes(markdown: str) -> List[ParsedRecipe]:
    """
    Parse a markdown document into recipes.

    Args:
        markdown: Raw document text, recipes separated by "---" lines

    Returns:
        List of ParsedRecipe in document order. Sections without a
        "# title" heading are skipped.
    """
    text = markdown.replace("\r\n", "\n").replace("\r", "\n")
    sections = [s.strip() for s in RECIPE_SEPARATOR.split(text)]

    recipes = []
    for section in sections:
        if not section:
            continue
        recipe = parse_single_recipe(section)
        if recipe:
            recipes.append(recipe)
        else:
            logger.debug(f"Skipping section without title: {section[:40]!r}")

    return recipes


def parse_single_recipe(markdown: str) -> Optional[ParsedRecipe]:
    """
    Parse one recipe section.

    Returns:
        ParsedRecipe, or None if the section has no "# title" heading
    """
    title_match = TITLE_PATTERN.search(markdown)
    if not title_match:
        return None

    name = title_match.group(1).strip()
    if not name:
        return None

    recipe = ParsedRecipe(name=name)
    sections = _split_sections(markdown)

    info = sections.get("info")
    if info is not None:
        _apply_info(recipe, _list_items(info))

    ingredients = sections.get("składniki")
    if ingredients is not None:
        for line in ingredients.split("\n"):
            parsed = parse_ingredient_line(line)
            if parsed:
                recipe.ingredients.append(parsed)

    instructions = sections.get("instrukcje")
    if instructions:
        recipe.instructions = instructions

    features = sections.get("cechy")
    if features is not None:
        for label in _list_items(features):
            flag = FEATURE_FLAGS.get(label.lower())
            if flag:
                setattr(recipe, flag, True)

    return recipe


def _split_sections(markdown: str) -> Dict[str, str]:
    """
    Split a recipe into "## Section" bodies keyed by lowercased name.

    A body runs until the next "## " heading or the end of the recipe.
    The first occurrence of a repeated section name wins.
    """
    sections: Dict[str, str] = {}
    current: Optional[str] = None
    body: List[str] = []

    for line in markdown.split("\n"):
        heading = SECTION_PATTERN.match(line)
        if heading:
            if current is not None and current not in sections:
                sections[current] = "\n".join(body).strip()
            current = heading.group(1).lower()
            body = []
        elif current is not None:
            body.append(line)

    if current is not None and current not in sections:
        sections[current] = "\n".join(body).strip()

    return sections


def _list_items(section: str) -> List[str]:
    """Non-empty lines of a section with list markers removed."""
    items = []
    for line in section.split("\n"):
        item = LIST_MARKER.sub("", line.strip()).strip()
        if item:
            items.append(item)
    return items


def _apply_info(recipe: ParsedRecipe, lines: List[str]):
    """Apply "Key: value" lines from the Info section."""
    for line in lines:
        key, _, value = line.partition(":")
        key = key.strip().lower()
        value = value.strip()

        if key == "porcje":
            servings = _first_integer(value)
            recipe.servings = servings if servings and servings >= 1 else 1
        elif key == "przygotowanie":
            recipe.prep_time_minutes = _first_integer(value)
        elif key == "gotowanie":
            recipe.cook_time_minutes = _first_integer(value)
        elif key == "typ":
            recipe.meal_type_names = _split_names(value)
        elif key == "tagi":
            recipe.tag_names = _split_names(value)
        elif key == "opis":
            recipe.description = value


def _first_integer(value: str) -> Optional[int]:
    match = FIRST_INTEGER.search(value)
    if not match or len(match.group(1)) > MAX_INTEGER_DIGITS:
        return None
    return int(match.group(1))


def _split_names(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_ingredient_line(line: str) -> Optional[ParsedIngredientLine]:
    """
    Parse one ingredient line.

    Forms, first match wins:
        1. "<name> - <amount> [<unit>] [(...)]"
        2. "<name> - (<number><g|kg|ml|l>)"
        3. "<amount> [<unit>] <name>"
        4. anything else: whole line is the name, 1 szt

    Args:
        line: Raw line, optionally starting with a "-" or "*" list marker

    Returns:
        ParsedIngredientLine, or None for a blank line

    Examples:
        parse_ingredient_line("- 2 i 1/2 kromki chleba")
        -> ParsedIngredientLine(amount=2.5, unit="kromka", name="chleba")
        parse_ingredient_line("sól do smaku")
        -> ParsedIngredientLine(amount=1, unit="szt", name="sól do smaku")
    """
    text = LIST_MARKER.sub("", line.strip()).strip()
    if not text:
        return None

    match = REVERSED_WITH_AMOUNT.match(text)
    if match:
        amount = parse_amount(match.group("amount"))
        if amount is not None:
            return _make_line(amount, match.group("unit"), match.group("name"))

    match = REVERSED_PARENTHETICAL.match(text)
    if match:
        amount = parse_amount(match.group("amount"))
        if amount is not None:
            return _make_line(amount, match.group("unit"), match.group("name"))

    match = FORWARD.match(text)
    if match:
        amount = parse_amount(match.group("amount"))
        if amount is not None:
            return _make_line(amount, match.group("unit"), match.group("name"))

    return ParsedIngredientLine(amount=1, unit=GENERIC_UNIT, name=strip_weight_annotations(text))


def _make_line(amount: float, unit: Optional[str], name: str) -> ParsedIngredientLine:
    return ParsedIngredientLine(
        amount=amount,
        unit=normalize_unit(unit),
        name=strip_weight_annotations(name),
    )


def parse_amount(text: str) -> Optional[float]:
    """
    Parse a quantity token.

    Supported notations, tried in order:
        "2 i 1/2" -> 2.5 (mixed fraction, "i" = "and")
        "1 1/2"   -> 1.5
        "1/3"     -> 0.333...
        "1,5"     -> 1.5 (decimal with "," or ".")

    Returns:
        Positive float, or None when the token is not a usable quantity
        (no notation matches, zero denominator, too many digits,
        or value <= 0)
    """
    token = " ".join(text.split())

    try:
        match = MIXED_WORD_FRACTION.match(token) or MIXED_FRACTION.match(token)
        if match:
            whole, numerator, denominator = (int(g) for g in match.groups())
            value = whole + numerator / denominator if denominator else None
        else:
            match = SIMPLE_FRACTION.match(token)
            if match:
                numerator, denominator = (int(g) for g in match.groups())
                value = numerator / denominator if denominator else None
            elif DECIMAL.match(token):
                value = float(token.replace(",", "."))
            else:
                value = None
    except (OverflowError, ValueError):
        # Too many digits for int() or for a float result
        return None

    if value is None or not math.isfinite(value) or value <= 0:
        return None
    return value


def normalize_unit(unit: Optional[str]) -> str:
    """
    Normalize a unit token to its canonical form.

    Examples:
        normalize_unit("łyżki") -> "łyżka"
        normalize_unit(None) -> "szt"
        normalize_unit("Cups") -> "cups"  (unknown, passed through lowercased)
    """
    if unit is None or not unit.strip():
        return GENERIC_UNIT
    return canonical_unit(unit) or unit.strip().lower()


def strip_weight_annotations(name: str) -> str:
    """
    Remove "(200g)" / "(ok. 150ml)" style annotations and collapse whitespace.

    If nothing would be left of the name, the stripped text is kept as is.
    """
    cleaned = " ".join(WEIGHT_ANNOTATION.sub(" ", name).split())
    return cleaned or " ".join(name.split())
