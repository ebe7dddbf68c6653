"""Food catalog endpoints: suggestions and serving sizes."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Request

from food_logger.api.models import ServingSizeRequest  # noqa: TC001

if TYPE_CHECKING:
    from food_logger.containers import AppContainer
    from food_logger.domain.foods import FoodItem, ServingSize

router = APIRouter(prefix="/api", tags=["foods"])


@router.get("/suggest")
async def suggest(request: Request, q: str = "") -> dict[str, object]:
    """Return cached foods matching a partial name."""
    container: AppContainer = request.app.state.container
    query = q.strip()
    if not query:
        return {"items": []}
    items = container.catalog_service.suggest(query)
    return {"items": [food_payload(item) for item in items]}


@router.post("/serving-sizes")
async def create_serving_size(
    body: ServingSizeRequest, request: Request
) -> dict[str, object]:
    """Create a serving size for a food item."""
    container: AppContainer = request.app.state.container
    serving = container.catalog_service.add_serving_size(
        body.food_item_id, body.name, body.grams, body.is_default
    )
    return {"serving_size": serving_payload(serving)}


@router.get("/serving-sizes")
async def list_serving_sizes(
    food_item_id: UUID, request: Request
) -> dict[str, object]:
    """Return serving sizes for a food item."""
    container: AppContainer = request.app.state.container
    servings = container.catalog_service.list_serving_sizes(food_item_id)
    return {"serving_sizes": [serving_payload(serving) for serving in servings]}


@router.get("/serving-sizes/common")
async def common_serving_sizes(request: Request) -> dict[str, object]:
    """Return suggested serving sizes by food category."""
    container: AppContainer = request.app.state.container
    return {"categories": container.catalog_service.common_serving_sizes()}


def food_payload(item: FoodItem) -> dict[str, object]:
    """Serialize a food item for JSON responses."""
    return {
        "id": str(item.id),
        "name": item.name,
        "normalized": item.normalized,
        "kcal": item.kcal,
        "protein_g": item.protein_g,
        "carbs_g": item.carbs_g,
        "fat_g": item.fat_g,
        "fiber_g": item.fiber_g,
        "source": item.source.value,
        "confidence": item.confidence,
        "serving_sizes": [serving_payload(serving) for serving in item.serving_sizes],
    }


def serving_payload(serving: ServingSize) -> dict[str, object]:
    """Serialize a serving size for JSON responses."""
    return {
        "id": str(serving.id),
        "food_item_id": str(serving.food_item_id),
        "name": serving.name,
        "grams": serving.grams,
        "is_default": serving.is_default,
    }
