"""Models for estimator output and background jobs."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MacroEstimate(BaseModel):
    """Nutrition estimate returned by an estimation provider."""

    name: str
    kcal: float = Field(ge=0.0)
    protein_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)
    fiber_g: float | None = Field(default=None, ge=0.0)
    confidence: float = Field(ge=0.0, le=1.0)
    assumptions: str | None = None


class EstimationJob(BaseModel):
    """Request to resolve the nutrition of a pending log."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    log_id: UUID
