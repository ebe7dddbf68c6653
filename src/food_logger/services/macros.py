"""Rescaling of macro estimates to the per-100g storage basis."""

from food_logger.domain.estimates import MacroEstimate

BASIS_GRAMS = 100.0


def to_per_100g(estimate: MacroEstimate, grams: float | None = None) -> MacroEstimate:
    """Rescale an estimate made for `grams` of food to a 100 g basis."""
    if grams is None or grams <= 0 or grams == BASIS_GRAMS:
        return estimate
    factor = BASIS_GRAMS / grams
    return estimate.model_copy(
        update={
            "kcal": estimate.kcal * factor,
            "protein_g": estimate.protein_g * factor,
            "carbs_g": estimate.carbs_g * factor,
            "fat_g": estimate.fat_g * factor,
            "fiber_g": (
                estimate.fiber_g * factor if estimate.fiber_g is not None else None
            ),
        }
    )
