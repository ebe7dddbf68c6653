"""Request bodies for the HTTP API."""

from uuid import UUID

from pydantic import BaseModel, Field


class LogFoodRequest(BaseModel):
    """Body of POST /api/log."""

    text: str = ""
    amount: float | None = None
    tz: str | None = None


class ServingSizeRequest(BaseModel):
    """Body of POST /api/serving-sizes."""

    food_item_id: UUID
    name: str = Field(min_length=1)
    grams: float = Field(gt=0)
    is_default: bool = False
