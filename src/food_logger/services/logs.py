"""Food logging service: instant cache hits, background estimation otherwise."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from food_logger.domain.foods import FoodMatch
from food_logger.domain.logs import FoodLog, Meal, Nutrition
from food_logger.domain.parsing import ParsedFood
from food_logger.services.executors import EstimationExecutor
from food_logger.services.matching import FoodMatcher
from food_logger.services.parsing import parse_food_input
from food_logger.services.servings import resolve_nutrition

BREAKFAST_UNTIL_HOUR = 11
LUNCH_UNTIL_HOUR = 15
DINNER_UNTIL_HOUR = 21

_logger = logging.getLogger(__name__)


class FoodLogRepository(Protocol):
    """Persistence interface for food logs."""

    def create_log(
        self, raw_text: str, amount: float, meal: Meal, logged_at: datetime
    ) -> FoodLog:
        """Create a pending food log and return it."""

    def get_log(self, log_id: UUID) -> FoodLog | None:
        """Return a food log by id, if present."""

    def mark_ready(
        self, log_id: UUID, food_item_id: UUID, nutrition: Nutrition
    ) -> bool:
        """Store nutrition on an unresolved log; return False if it was ready."""

    def mark_error(self, log_id: UUID, message: str) -> bool:
        """Record a failure on an unresolved log; return False if it was ready."""

    def list_pending(self, created_before: datetime, limit: int) -> list[FoodLog]:
        """Return pending logs created before a point in time, oldest first."""

    def list_ready_since(self, start: datetime) -> list[FoodLog]:
        """Return ready logs logged at or after a point in time."""


@dataclass(frozen=True)
class LoggedFood:
    """Outcome of logging a food description."""

    log: FoodLog
    parsed: ParsedFood
    match: FoodMatch


@dataclass
class FoodLogService:
    """Create food logs and hand unknown foods to the estimation executor."""

    repository: FoodLogRepository
    matcher: FoodMatcher
    executor: EstimationExecutor
    default_timezone: str = "UTC"

    async def log_food(
        self, raw_text: str, amount: float | None = None, timezone: str | None = None
    ) -> LoggedFood:
        """Log a food, resolving it now on a cache hit or in the background."""
        text = raw_text.strip()
        if not text:
            raise ValueError("Missing text")
        tz = resolve_timezone(timezone or self.default_timezone)
        parsed = parse_food_input(text)
        if not parsed.normalized:
            raise ValueError("Missing food name")
        resolved_amount = amount if amount is not None and amount > 0 else parsed.amount
        now = datetime.now(tz=tz)

        log = self.repository.create_log(
            raw_text=text,
            amount=resolved_amount,
            meal=infer_meal(now),
            logged_at=now.astimezone(UTC),
        )
        match = self.matcher.find_best(parsed.normalized)
        if match.item is not None:
            nutrition = resolve_nutrition(parsed, match.item, amount=resolved_amount)
            self.repository.mark_ready(log.id, match.item.id, nutrition)
            _logger.info(
                "Logged %r from cache (%s, score=%.2f)",
                text,
                match.method,
                match.score,
            )
        else:
            await self.executor.submit(log.id)

        current = self.repository.get_log(log.id) or log
        return LoggedFood(log=current, parsed=parsed, match=match)

    def get_log(self, log_id: UUID) -> FoodLog | None:
        """Return a food log by id."""
        return self.repository.get_log(log_id)

    def list_today(self, timezone: str | None = None) -> list[FoodLog]:
        """Return today's ready logs in the given timezone, oldest first."""
        tz = resolve_timezone(timezone or self.default_timezone)
        start = datetime.now(tz=tz).replace(hour=0, minute=0, second=0, microsecond=0)
        logs = self.repository.list_ready_since(start.astimezone(UTC))
        return sorted(logs, key=lambda log: log.logged_at)


def infer_meal(moment: datetime) -> Meal:
    """Guess the meal slot from the local time of day."""
    if moment.hour < BREAKFAST_UNTIL_HOUR:
        return Meal.BREAKFAST
    if moment.hour < LUNCH_UNTIL_HOUR:
        return Meal.LUNCH
    if moment.hour < DINNER_UNTIL_HOUR:
        return Meal.DINNER
    return Meal.SNACK


def resolve_timezone(name: str) -> ZoneInfo:
    """Return a ZoneInfo, raising ValueError for unknown names."""
    try:
        return ZoneInfo(name)
    except Exception as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc
