"""Cache lookup of canonical foods by normalized name."""

import logging
from dataclasses import dataclass

from food_logger.domain.foods import NO_MATCH, FoodMatch, MatchMethod
from food_logger.services.foods import FoodItemRepository

DEFAULT_SIMILARITY_THRESHOLD = 0.62

_logger = logging.getLogger(__name__)


@dataclass
class FoodMatcher:
    """Find the canonical food for a normalized name.

    Exact key lookups win; otherwise the store's trigram similarity search is
    used and accepted only strictly above the threshold. Lookup errors are
    reported as a miss so estimation can still proceed.
    """

    repository: FoodItemRepository
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD

    def find_best(self, normalized: str) -> FoodMatch:
        """Return the best cached food item for a normalized name."""
        try:
            return self._lookup(normalized)
        except Exception:
            _logger.warning(
                "Food cache lookup failed for %r, treating as miss",
                normalized,
                exc_info=True,
            )
            return NO_MATCH

    def _lookup(self, normalized: str) -> FoodMatch:
        if not normalized:
            return NO_MATCH
        exact = self.repository.get_by_normalized(normalized)
        if exact is not None:
            return FoodMatch(item=exact, method=MatchMethod.EXACT, score=1.0)

        similar = self.repository.find_similar(normalized, self.similarity_threshold)
        if similar is None:
            return NO_MATCH
        food_item_id, score = similar
        if score <= self.similarity_threshold:
            return NO_MATCH
        item = self.repository.get_by_id(food_item_id)
        if item is None:
            return NO_MATCH
        _logger.info(
            "Fuzzy food match: %r -> %r (score=%.3f)", normalized, item.normalized, score
        )
        return FoodMatch(item=item, method=MatchMethod.FUZZY, score=score)
