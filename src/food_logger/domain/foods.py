"""Canonical food domain models."""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID


class FoodSource(StrEnum):
    """Origin of a canonical food's macros."""

    MANUAL = "manual"
    AI = "ai"


class MatchMethod(StrEnum):
    """How a cache lookup found its food item."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass(frozen=True)
class ServingSize:
    """Named portion of a food item with its weight in grams."""

    id: UUID
    food_item_id: UUID
    name: str
    grams: float
    is_default: bool = False


@dataclass(frozen=True)
class FoodItem:
    """Canonical food record with macros stored per 100 grams."""

    id: UUID
    name: str
    normalized: str
    kcal: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float | None = None
    source: FoodSource = FoodSource.AI
    confidence: float | None = None
    ai_model: str | None = None
    ai_prompt: str | None = None
    serving_sizes: list[ServingSize] = field(default_factory=list)


@dataclass(frozen=True)
class FoodMatch:
    """Result of a cache lookup."""

    item: FoodItem | None
    method: MatchMethod
    score: float


NO_MATCH = FoodMatch(item=None, method=MatchMethod.NONE, score=0.0)
