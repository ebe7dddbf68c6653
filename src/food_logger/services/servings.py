"""Serving-size resolution and nutrition computation."""

from dataclasses import dataclass, replace

from food_logger.domain.foods import FoodItem, ServingSize
from food_logger.domain.logs import Nutrition
from food_logger.domain.parsing import GRAM_UNITS, ParsedFood, Unit
from food_logger.services.macros import BASIS_GRAMS

_SHARED_KEYWORDS = ("cup", "slice", "piece")
_SIZE_UNITS = frozenset({Unit.SMALL, Unit.MEDIUM, Unit.LARGE})


@dataclass(frozen=True)
class ServingMatch:
    """Chosen serving size and how many of it were eaten."""

    serving_size: ServingSize
    multiplier: float


def find_matching_serving_size(
    parsed: ParsedFood, serving_sizes: list[ServingSize]
) -> ServingMatch | None:
    """Pick the serving size that best describes the parsed input."""
    if not serving_sizes:
        return None

    if parsed.grams and parsed.unit in GRAM_UNITS:
        grams = parsed.grams
        closest = min(serving_sizes, key=lambda serving: abs(serving.grams - grams))
        return ServingMatch(serving_size=closest, multiplier=grams / closest.grams)

    if parsed.serving_text:
        wanted = parsed.serving_text.lower()
        for serving in serving_sizes:
            if _serving_name_matches(serving.name.lower(), wanted):
                return ServingMatch(serving_size=serving, multiplier=parsed.amount)

    default = next(
        (serving for serving in serving_sizes if serving.is_default), serving_sizes[0]
    )
    return ServingMatch(serving_size=default, multiplier=parsed.amount)


def calculate_nutrition(
    item: FoodItem, serving_size: ServingSize, multiplier: float
) -> Nutrition:
    """Scale per-100g macros to the grams eaten for a serving size."""
    grams_consumed = serving_size.grams * multiplier
    return _scaled(
        item,
        grams_consumed / BASIS_GRAMS,
        serving_unit=serving_size.name,
        serving_grams=grams_consumed,
    )


def resolve_nutrition(
    parsed: ParsedFood, item: FoodItem, amount: float | None = None
) -> Nutrition:
    """Compute nutrition for parsed input, falling back to weight or count.

    A quantity typed in the text always wins. `amount` replaces the count
    only when the text carries no number of its own.
    """
    if amount is not None and amount > 0 and not _has_typed_quantity(parsed):
        parsed = replace(parsed, amount=amount)
    match = find_matching_serving_size(parsed, item.serving_sizes)
    if match is not None:
        return calculate_nutrition(item, match.serving_size, match.multiplier)
    if parsed.grams:
        return _scaled(
            item,
            parsed.grams / BASIS_GRAMS,
            serving_unit=f"{parsed.grams:g}g",
            serving_grams=parsed.grams,
        )
    return _scaled(item, parsed.amount, serving_unit="serving", serving_grams=None)


def _has_typed_quantity(parsed: ParsedFood) -> bool:
    return parsed.serving_text is not None and parsed.unit not in _SIZE_UNITS


def _serving_name_matches(name: str, wanted: str) -> bool:
    if wanted in name or name in wanted:
        return True
    return any(keyword in wanted and keyword in name for keyword in _SHARED_KEYWORDS)


def _scaled(
    item: FoodItem, factor: float, *, serving_unit: str, serving_grams: float | None
) -> Nutrition:
    return Nutrition(
        kcal=item.kcal * factor,
        protein_g=item.protein_g * factor,
        carbs_g=item.carbs_g * factor,
        fat_g=item.fat_g * factor,
        fiber_g=item.fiber_g * factor if item.fiber_g is not None else None,
        serving_unit=serving_unit,
        serving_grams=serving_grams,
    )
