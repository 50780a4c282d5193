# app/services/meal_store.py
"""
Read-only access to the curated meal table in Supabase.

- Blocking supabase-py calls run in the default threadpool.
- Count and page queries share one filter builder, so a page can never
  disagree with the count it was computed from.
- Any failure is raised as StoreQueryError; callers decide how to degrade.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from app.config.settings import settings
from app.config.supabase import supabase_client
from app.models.suggestion import CriteriaKey
from app.services.errors import StoreQueryError

logger = logging.getLogger(__name__)


def ingredient_filter(tokens: List[str]) -> str:
    """PostgREST `or` expression: array-contains or description-ilike per token."""
    conditions: List[str] = []
    for token in tokens:
        conditions.append(f"ingredients.cs.{{{token}}}")
        conditions.append(f"description.ilike.%{token}%")
    return ",".join(conditions)


class MealStore:

    def __init__(self, client: Optional[Any] = None, table: Optional[str] = None):
        self._client = client
        self.table = table or settings.meal_table

    @property
    def client(self) -> Optional[Any]:
        if self._client is not None:
            return self._client
        # resolved per call so a late-configured client is picked up
        return getattr(supabase_client, "client", None)

    # -----------------------
    # Internal helpers
    # -----------------------
    async def _exec_in_thread(self, fn, *args, **kwargs):
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))

    def _require_client(self) -> Any:
        client = self.client
        if client is None:
            raise StoreQueryError("supabase_client_unavailable")
        return client

    def _apply_filters(self, qb: Any, criteria: CriteriaKey) -> Any:
        qb = qb.eq("meal_type", criteria.meal_type).eq(
            "dietary_preference", criteria.dietary_preference
        )
        tokens = criteria.ingredient_tokens()
        if tokens:
            qb = qb.or_(ingredient_filter(tokens))
        return qb

    # -----------------------
    # Public API
    # -----------------------
    async def count(self, criteria: CriteriaKey) -> int:
        """Exact number of rows matching `criteria`."""
        client = self._require_client()
        try:
            qb = self._apply_filters(
                client.table(self.table).select("id", count="exact"), criteria
            )
            resp = await self._exec_in_thread(qb.execute)
        except Exception as exc:
            logger.exception("Count query failed for %s: %s", criteria, exc)
            raise StoreQueryError(f"count_failed: {exc}") from exc

        total = getattr(resp, "count", None)
        if total is None and isinstance(resp, dict):
            total = resp.get("count")
        return max(0, int(total or 0))

    async def fetch_page(self, criteria: CriteriaKey, offset: int, limit: int) -> List[Dict[str, Any]]:
        """Rows [offset, offset + limit) ordered by name ascending."""
        if limit <= 0:
            return []
        client = self._require_client()
        try:
            qb = self._apply_filters(client.table(self.table).select("*"), criteria)
            qb = qb.order("name", desc=False).range(offset, offset + limit - 1)
            resp = await self._exec_in_thread(qb.execute)
        except Exception as exc:
            logger.exception(
                "Page query failed for %s (offset=%d, limit=%d): %s",
                criteria,
                offset,
                limit,
                exc,
            )
            raise StoreQueryError(f"page_failed: {exc}") from exc

        rows = (
            getattr(resp, "data", None)
            or (resp.get("data") if isinstance(resp, dict) else None)
            or []
        )
        return list(rows)
