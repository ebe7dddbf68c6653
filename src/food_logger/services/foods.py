"""Canonical food catalog: persistence interface and catalog operations."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from food_logger.domain.foods import FoodItem, ServingSize
from food_logger.services.parsing import normalize_food_text, trigram_similarity

COMMON_SERVING_SIZES: dict[str, list[dict[str, object]]] = {
    "fruits": [
        {"name": "small", "grams": 100},
        {"name": "medium", "grams": 150},
        {"name": "large", "grams": 200},
        {"name": "1 cup chopped", "grams": 140},
    ],
    "vegetables": [
        {"name": "1 cup raw", "grams": 100},
        {"name": "1 cup cooked", "grams": 150},
        {"name": "medium", "grams": 120},
    ],
    "grains": [
        {"name": "1 cup cooked", "grams": 200},
        {"name": "1/2 cup dry", "grams": 100},
        {"name": "1 slice", "grams": 30},
    ],
    "proteins": [
        {"name": "100g", "grams": 100},
        {"name": "1 piece", "grams": 150},
        {"name": "1 cup", "grams": 200},
    ],
    "dairy": [
        {"name": "1 cup", "grams": 240},
        {"name": "1 slice", "grams": 20},
        {"name": "1 tbsp", "grams": 15},
    ],
    "generic": [
        {"name": "100g", "grams": 100},
        {"name": "1 serving", "grams": 100},
    ],
}


class FoodItemRepository(Protocol):
    """Persistence interface for canonical food items."""

    def get_by_normalized(self, normalized: str) -> FoodItem | None:
        """Return the food item with this normalized name, if any."""

    def get_by_id(self, food_item_id: UUID) -> FoodItem | None:
        """Return a food item by id, if present."""

    def find_similar(
        self, normalized: str, threshold: float
    ) -> tuple[UUID, float] | None:
        """Return the id and score of the most similar food above threshold."""

    def upsert_food(self, payload: dict[str, object]) -> FoodItem:
        """Insert or update a food item keyed by its normalized name."""

    def search_foods(self, query: str, normalized: str, limit: int) -> list[FoodItem]:
        """Return foods whose name or normalized name contains the query."""

    def list_serving_sizes(self, food_item_id: UUID) -> list[ServingSize]:
        """Return serving sizes for a food, defaults first."""

    def create_serving_size(
        self, food_item_id: UUID, name: str, grams: float, is_default: bool
    ) -> ServingSize:
        """Create a serving size and return it."""

    def clear_default_serving(self, food_item_id: UUID) -> None:
        """Unset the default flag on every serving size of a food."""


@dataclass
class FoodCatalogService:
    """Read and administer canonical foods outside the estimation path."""

    repository: FoodItemRepository
    suggestion_limit: int = 8

    def suggest(self, query: str) -> list[FoodItem]:
        """Return foods matching a query, most similar first."""
        normalized = normalize_food_text(query)
        if not normalized:
            return []
        items = self.repository.search_foods(
            query.strip(), normalized, self.suggestion_limit
        )
        return sorted(
            items,
            key=lambda item: trigram_similarity(item.normalized, normalized),
            reverse=True,
        )

    def add_serving_size(
        self, food_item_id: UUID, name: str, grams: float, is_default: bool = False
    ) -> ServingSize:
        """Create a serving size, keeping at most one default per food."""
        if grams <= 0:
            raise ValueError("Serving size grams must be positive")
        if is_default:
            self.repository.clear_default_serving(food_item_id)
        return self.repository.create_serving_size(
            food_item_id, name.strip(), grams, is_default
        )

    def list_serving_sizes(self, food_item_id: UUID) -> list[ServingSize]:
        """Return serving sizes for a food item."""
        return self.repository.list_serving_sizes(food_item_id)

    @staticmethod
    def common_serving_sizes() -> dict[str, list[dict[str, object]]]:
        """Return suggested serving sizes grouped by food category."""
        return COMMON_SERVING_SIZES
