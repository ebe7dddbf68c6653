"""Estimation pipeline that resolves pending food logs."""

import logging
from dataclasses import dataclass
from uuid import UUID

from food_logger.domain.foods import FoodItem, FoodSource
from food_logger.domain.logs import FoodLog, LogStatus
from food_logger.domain.parsing import ParsedFood
from food_logger.services.estimators import Estimator
from food_logger.services.foods import FoodItemRepository
from food_logger.services.logs import FoodLogRepository
from food_logger.services.macros import to_per_100g
from food_logger.services.matching import FoodMatcher
from food_logger.services.parsing import parse_food_input
from food_logger.services.servings import resolve_nutrition

_logger = logging.getLogger(__name__)


@dataclass
class EstimationService:
    """Drive a food log from pending to ready or error.

    Safe to call any number of times for the same log: ready logs are left
    untouched and the repository never overwrites a ready row. A log that
    ended in error is retried by delivering its id again. Concurrent misses
    for one food converge on a single canonical row through the upsert keyed
    by normalized name.
    """

    log_repository: FoodLogRepository
    food_repository: FoodItemRepository
    matcher: FoodMatcher
    estimator: Estimator

    async def process(self, log_id: UUID) -> FoodLog | None:
        """Resolve nutrition for a log, recording failures on the log."""
        log = self.log_repository.get_log(log_id)
        if log is None:
            _logger.warning("Estimation skipped, log not found: %s", log_id)
            return None
        if log.status == LogStatus.READY:
            _logger.info("Estimation skipped, log %s is already ready", log_id)
            return log

        try:
            parsed = parse_food_input(log.raw_text)
            item = self.matcher.find_best(parsed.normalized).item
            if item is None:
                item = await self._estimate_and_store(log.raw_text, parsed)
            nutrition = resolve_nutrition(parsed, item, amount=log.amount)
            updated = self.log_repository.mark_ready(log_id, item.id, nutrition)
        except Exception as exc:
            message = str(exc) or "Estimation failed"
            _logger.warning("Estimation failed for log %s: %s", log_id, message)
            self.log_repository.mark_error(log_id, message)
            raise

        if not updated:
            _logger.info("Log %s was resolved concurrently", log_id)
        else:
            _logger.info(
                "Estimated log %s -> %s (%.0f kcal)", log_id, item.name, nutrition.kcal
            )
        return self.log_repository.get_log(log_id)

    async def _estimate_and_store(self, raw_text: str, parsed: ParsedFood) -> FoodItem:
        estimate = await self.estimator.estimate(raw_text)
        per_100g = to_per_100g(estimate, parsed.grams)
        return self.food_repository.upsert_food(
            {
                "name": per_100g.name or parsed.cleaned_text or raw_text,
                "normalized": parsed.normalized,
                "kcal": per_100g.kcal,
                "protein_g": per_100g.protein_g,
                "carbs_g": per_100g.carbs_g,
                "fat_g": per_100g.fat_g,
                "fiber_g": per_100g.fiber_g,
                "source": FoodSource.AI.value,
                "confidence": per_100g.confidence,
                "ai_model": self.estimator.model,
                "ai_prompt": self.estimator.build_prompt(raw_text),
            }
        )
