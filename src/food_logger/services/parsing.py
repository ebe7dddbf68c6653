"""Parsing and normalization of free-text food descriptions."""

import re
from dataclasses import dataclass

from food_logger.domain.parsing import ParsedFood, Unit

_QUANTITY = r"(\d+(?:[.,]\d+)?)\s*"
_PUNCTUATION = re.compile(r"[()+.,;:!?]")
_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"[^\W_]+")

OUNCE_GRAMS = 28.35
POUND_GRAMS = 453.592


@dataclass(frozen=True)
class _UnitPattern:
    regex: re.Pattern[str]
    unit: Unit
    grams_per_unit: float | None = None


def _quantity_pattern(words: str) -> re.Pattern[str]:
    return re.compile(_QUANTITY + rf"({words})\b", re.IGNORECASE)


# Order matters: the first matching pattern wins.
_UNIT_PATTERNS: tuple[_UnitPattern, ...] = (
    _UnitPattern(_quantity_pattern("kg|kilogram|kilograms"), Unit.GRAM, 1000.0),
    _UnitPattern(_quantity_pattern("g|gram|grams"), Unit.GRAM, 1.0),
    _UnitPattern(_quantity_pattern("oz|ounce|ounces"), Unit.OUNCE, OUNCE_GRAMS),
    _UnitPattern(_quantity_pattern("lb|lbs|pound|pounds"), Unit.POUND, POUND_GRAMS),
    _UnitPattern(_quantity_pattern("ml|milliliter|milliliters"), Unit.MILLILITER),
    _UnitPattern(_quantity_pattern("cup|cups"), Unit.CUP),
    _UnitPattern(_quantity_pattern("tsp|teaspoon|teaspoons"), Unit.TEASPOON),
    _UnitPattern(_quantity_pattern("tbsp|tablespoon|tablespoons"), Unit.TABLESPOON),
    _UnitPattern(_quantity_pattern("piece|pieces|item|items"), Unit.PIECE),
    _UnitPattern(_quantity_pattern("slice|slices"), Unit.SLICE),
    _UnitPattern(
        _quantity_pattern("x|serving|servings|portion|portions"), Unit.SERVING
    ),
)
_SIZE_PATTERN = re.compile(r"\b(small|medium|large)\b", re.IGNORECASE)


def normalize_food_text(text: str) -> str:
    """Return the canonical cache key for a food name."""
    lowered = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def parse_food_input(raw: str) -> ParsedFood:
    """Split raw food text into quantity, unit and a normalized name.

    Never fails: text without a recognizable quantity is treated as one
    serving of the whole description.
    """
    text = raw.strip()
    for pattern in _UNIT_PATTERNS:
        match = pattern.regex.search(text)
        if match is None:
            continue
        amount = float(match.group(1).replace(",", "."))
        if amount <= 0:
            continue
        grams = (
            amount * pattern.grams_per_unit
            if pattern.grams_per_unit is not None
            else None
        )
        return _build(
            _strip_match(text, pattern.regex),
            amount=amount,
            unit=pattern.unit,
            grams=grams,
            serving_text=f"{amount:g} {match.group(2).lower()}",
        )

    size_match = _SIZE_PATTERN.search(text)
    if size_match is not None:
        size = size_match.group(1).lower()
        return _build(
            _strip_match(text, _SIZE_PATTERN),
            amount=1.0,
            unit=Unit(size),
            grams=None,
            serving_text=size,
        )

    return _build(text, amount=1.0, unit=Unit.SERVING, grams=None, serving_text=None)


def trigram_similarity(left: str, right: str) -> float:
    """Return a pg_trgm style similarity score between two strings."""
    left_grams = _trigrams(left)
    right_grams = _trigrams(right)
    union = left_grams | right_grams
    if not union:
        return 0.0
    return len(left_grams & right_grams) / len(union)


def _trigrams(text: str) -> set[str]:
    grams: set[str] = set()
    for word in _WORD.findall(text.lower()):
        padded = f"  {word} "
        grams.update(padded[index : index + 3] for index in range(len(padded) - 2))
    return grams


def _strip_match(text: str, regex: re.Pattern[str]) -> str:
    return _WHITESPACE.sub(" ", regex.sub(" ", text, count=1)).strip()


def _build(
    cleaned_text: str,
    *,
    amount: float,
    unit: Unit,
    grams: float | None,
    serving_text: str | None,
) -> ParsedFood:
    return ParsedFood(
        cleaned_text=cleaned_text,
        normalized=normalize_food_text(cleaned_text),
        amount=amount,
        unit=unit,
        grams=grams,
        serving_text=serving_text,
    )
