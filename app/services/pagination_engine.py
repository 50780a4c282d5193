# app/services/pagination_engine.py
"""
Per-criteria pagination over the curated meal store.

For every CriteriaKey the engine remembers:
  - the total row count (cached until clear_all),
  - the offset of the next page,
  - how many rows have been shown toward exhaustion.

"Continue" reads the next page from the stored offset. "Get new" jumps to a
random offset for variety but restarts the shown count from that page, so
exhaustion is always judged against what the user has actually seen.

State is in-memory and assumes one writer per criteria at a time.
"""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.models.suggestion import CriteriaKey, MealSuggestion, PaginationState, SuggestionPage
from app.services.errors import StoreQueryError
from app.services.fallback_catalog import store_fallback
from app.services.field_estimator import transform_store_row
from app.services.meal_store import MealStore

logger = logging.getLogger(__name__)


class PaginationEngine:

    def __init__(self, store: Optional[MealStore] = None, rng: Optional[Any] = None):
        self.store = store or MealStore()
        # anything with randrange(start, stop); seed it for deterministic tests
        self.rng = rng or random.Random()
        self._totals: Dict[CriteriaKey, int] = {}
        self._states: Dict[CriteriaKey, PaginationState] = {}

    # -----------------------
    # Internal helpers
    # -----------------------
    async def _total(self, criteria: CriteriaKey) -> int:
        cached = self._totals.get(criteria)
        if cached is not None:
            return cached
        total = await self.store.count(criteria)
        self._totals[criteria] = total
        logger.debug("Cached total=%d for %s", total, criteria)
        return total

    def _state(self, criteria: CriteriaKey) -> PaginationState:
        state = self._states.get(criteria)
        if state is None:
            state = PaginationState()
            self._states[criteria] = state
        return state

    def _fallback_page(self, criteria: CriteriaKey, count: int) -> SuggestionPage:
        return SuggestionPage(
            suggestions=[store_fallback(criteria.meal_type)],
            has_more=False,
            total_available=1,
            requested=count,
            actual=1,
            remaining=0,
        )

    def _transform(self, rows: List[Dict[str, Any]]) -> List[MealSuggestion]:
        suggestions: List[MealSuggestion] = []
        for row in rows:
            try:
                suggestions.append(transform_store_row(row))
            except ValidationError as exc:
                logger.warning("Skipping store row id=%r: %s", row.get("id"), exc)
        return suggestions

    # -----------------------
    # Public API
    # -----------------------
    async def get_total_available(self, criteria: CriteriaKey) -> int:
        """Cached row count for `criteria`; 0 (not cached) when the store fails."""
        try:
            return await self._total(criteria)
        except StoreQueryError as exc:
            logger.warning("Could not count suggestions for %s: %s", criteria, exc)
            return 0

    async def get_suggestions(
        self, criteria: CriteriaKey, count: int, get_new: bool = False
    ) -> SuggestionPage:
        try:
            total = await self._total(criteria)
        except StoreQueryError as exc:
            logger.warning("Store unavailable for %s, serving fallback: %s", criteria, exc)
            return self._fallback_page(criteria, count)

        state = self._state(criteria)
        if get_new:
            offset = self.rng.randrange(0, max(1, total - count))
        else:
            offset = state.current_offset

        actual = min(count, max(0, total - offset))
        if actual <= 0:
            return SuggestionPage(
                suggestions=[],
                has_more=False,
                total_available=total,
                requested=count,
                actual=0,
                remaining=0,
                total_shown=state.shown_count,
            )

        try:
            rows = await self.store.fetch_page(criteria, offset, actual)
        except StoreQueryError as exc:
            logger.warning("Page query failed for %s, serving fallback: %s", criteria, exc)
            return self._fallback_page(criteria, count)

        suggestions = self._transform(rows)

        state.current_offset = offset + actual
        shown = actual if get_new else state.shown_count + actual
        state.shown_count = min(shown, total)

        page = SuggestionPage(
            suggestions=suggestions,
            has_more=total > state.shown_count,
            total_available=total,
            requested=count,
            actual=actual,
            remaining=max(0, total - state.shown_count),
            total_shown=state.shown_count,
        )
        logger.info(
            "Served %d/%d store suggestions for %s (offset=%d, shown=%d/%d)",
            actual,
            count,
            criteria,
            offset,
            state.shown_count,
            total,
        )
        return page

    def reset_criteria(self, criteria: CriteriaKey) -> None:
        """Forget offset and shown count for `criteria`; the cached total stays."""
        self._states.pop(criteria, None)

    def clear_all(self) -> None:
        self._totals.clear()
        self._states.clear()

    def snapshot(self, criteria: CriteriaKey) -> PaginationState:
        """Copy of the current state for `criteria` (defaults when untouched)."""
        state = self._states.get(criteria)
        return state.model_copy() if state else PaginationState()
