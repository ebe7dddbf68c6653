"""Supabase repository for food logs."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from food_logger.domain.logs import FoodLog, LogStatus, Meal, Nutrition
from food_logger.services.logs import FoodLogRepository

_UNRESOLVED = [LogStatus.PENDING.value, LogStatus.ERROR.value]


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation for food logs.

    State writes only touch pending or failed rows, so a ready log is never
    overwritten by a late or duplicate delivery.
    """

    client: Client

    def create_log(
        self, raw_text: str, amount: float, meal: Meal, logged_at: datetime
    ) -> FoodLog:
        """Create a pending food log row and return it."""
        response = (
            self.client.table("food_logs")
            .insert(
                {
                    "raw_text": raw_text,
                    "amount": amount,
                    "meal": meal.value,
                    "status": LogStatus.PENDING.value,
                    "logged_at": logged_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food log")
        return _parse_log(response.data[0])

    def get_log(self, log_id: UUID) -> FoodLog | None:
        """Return a food log by id."""
        response = (
            self.client.table("food_logs")
            .select("*")
            .eq("id", str(log_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_log(response.data[0])

    def mark_ready(
        self, log_id: UUID, food_item_id: UUID, nutrition: Nutrition
    ) -> bool:
        """Store resolved nutrition unless the log is already ready."""
        response = (
            self.client.table("food_logs")
            .update(
                {
                    "status": LogStatus.READY.value,
                    "error_msg": None,
                    "food_item_id": str(food_item_id),
                    "serving_unit": nutrition.serving_unit,
                    "serving_grams": nutrition.serving_grams,
                    "kcal": nutrition.kcal,
                    "protein_g": nutrition.protein_g,
                    "carbs_g": nutrition.carbs_g,
                    "fat_g": nutrition.fat_g,
                    "fiber_g": nutrition.fiber_g,
                }
            )
            .eq("id", str(log_id))
            .in_("status", _UNRESOLVED)
            .execute()
        )
        return bool(response.data)

    def mark_error(self, log_id: UUID, message: str) -> bool:
        """Record a failure message unless the log is already ready."""
        response = (
            self.client.table("food_logs")
            .update({"status": LogStatus.ERROR.value, "error_msg": message})
            .eq("id", str(log_id))
            .in_("status", _UNRESOLVED)
            .execute()
        )
        return bool(response.data)

    def list_pending(self, created_before: datetime, limit: int) -> list[FoodLog]:
        """Return pending logs older than a cutoff, oldest first."""
        response = (
            self.client.table("food_logs")
            .select("*")
            .eq("status", LogStatus.PENDING.value)
            .lt("logged_at", created_before.isoformat())
            .order("logged_at", desc=False)
            .limit(limit)
            .execute()
        )
        return [_parse_log(row) for row in response.data or []]

    def list_ready_since(self, start: datetime) -> list[FoodLog]:
        """Return ready logs logged at or after a point in time."""
        response = (
            self.client.table("food_logs")
            .select("*")
            .eq("status", LogStatus.READY.value)
            .gte("logged_at", start.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_log(row) for row in response.data or []]


def _parse_log(row: dict[str, object]) -> FoodLog:
    food_item_id = row.get("food_item_id")
    return FoodLog(
        id=UUID(str(row["id"])),
        raw_text=str(row.get("raw_text", "")),
        amount=float(row.get("amount") or 1.0),
        meal=Meal(str(row.get("meal") or Meal.SNACK.value)),
        status=LogStatus(str(row.get("status") or LogStatus.PENDING.value)),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
        serving_unit=row.get("serving_unit"),
        serving_grams=_optional_float(row.get("serving_grams")),
        kcal=_optional_float(row.get("kcal")),
        protein_g=_optional_float(row.get("protein_g")),
        carbs_g=_optional_float(row.get("carbs_g")),
        fat_g=_optional_float(row.get("fat_g")),
        fiber_g=_optional_float(row.get("fiber_g")),
        error_msg=row.get("error_msg"),
        food_item_id=UUID(str(food_item_id)) if food_item_id else None,
    )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
