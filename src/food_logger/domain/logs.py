"""Food log domain models."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class LogStatus(StrEnum):
    """Lifecycle state of a food log."""

    PENDING = "pending"
    READY = "ready"
    ERROR = "error"


class Meal(StrEnum):
    """Meal slot a log belongs to."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class Nutrition:
    """Macros computed for an actual serving."""

    kcal: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float | None
    serving_unit: str
    serving_grams: float | None


@dataclass(frozen=True)
class FoodLog:
    """One logged food event."""

    id: UUID
    raw_text: str
    amount: float
    meal: Meal
    status: LogStatus
    logged_at: datetime
    serving_unit: str | None = None
    serving_grams: float | None = None
    kcal: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    fiber_g: float | None = None
    error_msg: str | None = None
    food_item_id: UUID | None = None
