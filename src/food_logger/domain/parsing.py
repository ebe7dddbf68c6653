"""Structured representation of free-text food input."""

from dataclasses import dataclass
from enum import StrEnum


class Unit(StrEnum):
    """Units recognized in food descriptions."""

    SERVING = "serving"
    GRAM = "g"
    MILLILITER = "ml"
    CUP = "cup"
    TEASPOON = "tsp"
    TABLESPOON = "tbsp"
    OUNCE = "oz"
    POUND = "lb"
    PIECE = "piece"
    SLICE = "slice"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


GRAM_UNITS = frozenset({Unit.GRAM, Unit.OUNCE, Unit.POUND})


@dataclass(frozen=True)
class ParsedFood:
    """Food text split into quantity, unit and a cache-friendly name."""

    cleaned_text: str
    normalized: str
    amount: float = 1.0
    unit: Unit = Unit.SERVING
    grams: float | None = None
    serving_text: str | None = None
