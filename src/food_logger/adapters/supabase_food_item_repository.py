"""Supabase implementation for canonical food items."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from food_logger.domain.foods import FoodItem, FoodSource, ServingSize
from food_logger.services.foods import FoodItemRepository

_FOOD_WITH_SERVINGS = "*, serving_sizes(*)"


@dataclass
class SupabaseFoodItemRepository(FoodItemRepository):
    """Supabase-backed repository for canonical food items.

    Similarity search relies on a `match_food_item(query, threshold)` database
    function returning `id` and pg_trgm `similarity` as `score`, ordered by
    score descending.
    """

    client: Client

    def get_by_normalized(self, normalized: str) -> FoodItem | None:
        """Return the food item with this normalized name, if any."""
        response = (
            self.client.table("food_items")
            .select(_FOOD_WITH_SERVINGS)
            .eq("normalized", normalized)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def get_by_id(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id, if present."""
        response = (
            self.client.table("food_items")
            .select(_FOOD_WITH_SERVINGS)
            .eq("id", str(food_item_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def find_similar(
        self, normalized: str, threshold: float
    ) -> tuple[UUID, float] | None:
        """Return the best trigram match above the threshold."""
        response = self.client.rpc(
            "match_food_item", {"query": normalized, "threshold": threshold}
        ).execute()
        if not response.data:
            return None
        row = response.data[0]
        return UUID(row["id"]), float(row["score"])

    def upsert_food(self, payload: dict[str, object]) -> FoodItem:
        """Insert or update a food item on its unique normalized name."""
        response = (
            self.client.table("food_items")
            .upsert(payload, on_conflict="normalized")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to upsert food item")
        row = response.data[0]
        item = self.get_by_id(UUID(row["id"]))
        return item if item is not None else _parse_food(row)

    def search_foods(self, query: str, normalized: str, limit: int) -> list[FoodItem]:
        """Return foods matching the query by display or normalized name."""
        name_pattern = _quoted(f"%{query}%")
        normalized_pattern = _quoted(f"%{normalized}%")
        filters = f"name.ilike.{name_pattern},normalized.ilike.{normalized_pattern}"
        response = (
            self.client.table("food_items")
            .select(_FOOD_WITH_SERVINGS)
            .or_(filters)
            .order("updated_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_food(row) for row in response.data or []]

    def list_serving_sizes(self, food_item_id: UUID) -> list[ServingSize]:
        """Return serving sizes for a food, defaults first."""
        response = (
            self.client.table("serving_sizes")
            .select("*")
            .eq("food_item_id", str(food_item_id))
            .order("is_default", desc=True)
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_serving(row) for row in response.data or []]

    def create_serving_size(
        self, food_item_id: UUID, name: str, grams: float, is_default: bool
    ) -> ServingSize:
        """Create a serving size and return it."""
        response = (
            self.client.table("serving_sizes")
            .insert(
                {
                    "food_item_id": str(food_item_id),
                    "name": name,
                    "grams": grams,
                    "is_default": is_default,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create serving size")
        return _parse_serving(response.data[0])

    def clear_default_serving(self, food_item_id: UUID) -> None:
        """Unset the default flag on every serving size of a food."""
        self.client.table("serving_sizes").update({"is_default": False}).eq(
            "food_item_id", str(food_item_id)
        ).execute()


def _parse_food(row: dict[str, object]) -> FoodItem:
    """Parse a food item row, with embedded serving sizes, into a domain model."""
    servings = sorted(
        (_parse_serving(serving) for serving in row.get("serving_sizes") or []),
        key=lambda serving: not serving.is_default,
    )
    return FoodItem(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        normalized=str(row.get("normalized", "")),
        kcal=float(row.get("kcal", 0.0)),
        protein_g=float(row.get("protein_g", 0.0)),
        carbs_g=float(row.get("carbs_g", 0.0)),
        fat_g=float(row.get("fat_g", 0.0)),
        fiber_g=_optional_float(row.get("fiber_g")),
        source=FoodSource(str(row.get("source") or FoodSource.AI.value)),
        confidence=_optional_float(row.get("confidence")),
        ai_model=row.get("ai_model"),
        ai_prompt=row.get("ai_prompt"),
        serving_sizes=servings,
    )


def _parse_serving(row: dict[str, object]) -> ServingSize:
    return ServingSize(
        id=UUID(str(row["id"])),
        food_item_id=UUID(str(row["food_item_id"])),
        name=str(row.get("name", "")),
        grams=float(row.get("grams", 0.0)),
        is_default=bool(row.get("is_default", False)),
    )


def _quoted(value: str) -> str:
    """Quote a value for a PostgREST logic filter."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
