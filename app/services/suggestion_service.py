# app/services/suggestion_service.py
"""
Entry point used by the API: store first, generation once the store has
nothing left for the criteria.

Generated suggestions are produced in batches and kept in a per-criteria
pool with its own offset, so consecutive generated pages do not repeat
themselves. A pool is regenerated once all of it has been shown and is
dropped by reset_criteria / clear_all together with the store state.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from app.config.settings import settings
from app.models.suggestion import CriteriaKey, MealSuggestion, SuggestionPage
from app.services.errors import GenerativeServiceUnavailable
from app.services.fallback_catalog import pad_with_fallbacks
from app.services.generation_orchestrator import GenerationOrchestrator
from app.services.pagination_engine import PaginationEngine

logger = logging.getLogger(__name__)


class SuggestionService:

    def __init__(
        self,
        engine: Optional[PaginationEngine] = None,
        orchestrator: Optional[GenerationOrchestrator] = None,
        pool_size: Optional[int] = None,
    ):
        self.engine = engine or PaginationEngine()
        self.orchestrator = orchestrator or GenerationOrchestrator()
        self._pool_size = pool_size
        self._pools: Dict[CriteriaKey, List[MealSuggestion]] = {}
        self._pool_offsets: Dict[CriteriaKey, int] = {}

    @property
    def pool_size(self) -> int:
        return self._pool_size or settings.ai_pool_size

    # -----------------------
    # Generated pool
    # -----------------------
    async def _ensure_pool(self, criteria: CriteriaKey) -> List[MealSuggestion]:
        pool = self._pools.get(criteria)
        if pool is not None and self._pool_offsets.get(criteria, 0) < len(pool):
            return pool
        if pool is not None:
            logger.info("Generated pool exhausted for %s, regenerating", criteria)
        pool = await self.orchestrator.generate_suggestions(criteria, self.pool_size)
        self._pools[criteria] = pool
        self._pool_offsets[criteria] = 0
        logger.info("Generated pool of %d suggestions for %s", len(pool), criteria)
        return pool

    def _catalog_page(self, count: int, store_total: int) -> SuggestionPage:
        suggestions = pad_with_fallbacks([], count) if settings.enable_fallback_suggestions else []
        return SuggestionPage(
            suggestions=suggestions,
            has_more=False,
            total_available=store_total + len(suggestions),
            requested=count,
            actual=len(suggestions),
            remaining=0,
            total_shown=store_total + len(suggestions),
            ai_generated=True,
        )

    async def _generated_page(
        self, criteria: CriteriaKey, count: int, store_total: int = 0
    ) -> SuggestionPage:
        if not settings.enable_ai_suggestions:
            logger.info("AI suggestions disabled, serving fallback catalog for %s", criteria)
            return self._catalog_page(count, store_total)
        try:
            pool = await self._ensure_pool(criteria)
        except GenerativeServiceUnavailable as exc:
            logger.warning("Generative service unavailable, serving fallback catalog: %s", exc)
            return self._catalog_page(count, store_total)

        offset = self._pool_offsets.get(criteria, 0)
        batch = pool[offset:offset + count]
        offset += len(batch)
        self._pool_offsets[criteria] = offset

        total_shown = store_total + offset
        return SuggestionPage(
            suggestions=batch,
            has_more=offset < len(pool),
            total_available=max(store_total + len(pool), total_shown),
            requested=count,
            actual=len(batch),
            remaining=max(0, len(pool) - offset),
            total_shown=total_shown,
            ai_generated=True,
        )

    # -----------------------
    # Public API
    # -----------------------
    async def get_suggestions(
        self, criteria: CriteriaKey, count: int, get_new: bool = False
    ) -> SuggestionPage:
        if not settings.enable_database_suggestions:
            return await self._generated_page(criteria, count)

        if settings.enable_ai_suggestions:
            # exhaustion is judged before "get new" picks a random store offset
            total = await self.engine.get_total_available(criteria)
            shown = self.engine.snapshot(criteria).shown_count
            if total > 0 and shown >= total:
                logger.info("All %d store suggestions shown for %s", total, criteria)
                return await self._generated_page(criteria, count, total)

        page = await self.engine.get_suggestions(criteria, count, get_new)
        if page.actual > 0 or not settings.enable_ai_suggestions:
            return page

        logger.info("Store exhausted for %s, switching to generated suggestions", criteria)
        return await self._generated_page(criteria, count, page.total_available)

    async def pregenerate(self, criteria: CriteriaKey) -> int:
        """Fill the generated pool for `criteria` ahead of store exhaustion; returns how many are unshown."""
        if not settings.enable_ai_suggestions:
            return 0
        try:
            pool = await self._ensure_pool(criteria)
        except GenerativeServiceUnavailable as exc:
            logger.warning("Could not pregenerate suggestions for %s: %s", criteria, exc)
            return 0
        return len(pool) - self._pool_offsets.get(criteria, 0)

    async def get_total_available(self, criteria: CriteriaKey) -> int:
        return await self.engine.get_total_available(criteria)

    def reset_criteria(self, criteria: CriteriaKey) -> None:
        self.engine.reset_criteria(criteria)
        self._pools.pop(criteria, None)
        self._pool_offsets.pop(criteria, None)

    def clear_all(self) -> None:
        self.engine.clear_all()
        self._pools.clear()
        self._pool_offsets.clear()

    async def generate_suggestions(self, criteria: CriteriaKey, count: int) -> List[MealSuggestion]:
        """Direct generation; GenerativeServiceUnavailable propagates."""
        return await self.orchestrator.generate_suggestions(criteria, count)
