# app/config/supabase.py
"""
Supabase client singleton and lightweight health check.

This module:
  - Keeps initialization synchronous (main.py uses run_in_executor to call health_check).
  - Exposes a global SupabaseClient with `.client`, `.health_check()` and `.diagnostics()`.
  - Never logs secrets; diagnostics return structural info only.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from supabase import Client, create_client

from app.config.settings import settings

logger = logging.getLogger(__name__)

# https + project ref + .supabase.co
_SUPABASE_URL_RE = re.compile(r"^https://[A-Za-z0-9\-]+\.supabase\.co/?$")


class SupabaseClient:
    """
    Lightweight wrapper around the supabase-py `Client`.

    Use:
        from app.config.supabase import supabase_client
        client = supabase_client.client  # may be None if not configured
    """

    def __init__(self) -> None:
        self._client: Optional[Client] = None
        self._initialized: bool = False
        self._initialize_client()

    def _validate_url(self, url: Optional[str]) -> bool:
        return bool(url and _SUPABASE_URL_RE.match(url))

    def _initialize_client(self) -> None:
        if self._initialized and self._client is not None:
            return

        supabase_url = settings.supabase_url or ""
        supabase_key = settings.supabase_key or ""

        if not supabase_url or not supabase_key:
            logger.debug(
                "Supabase credentials not present at init: url=%r key_present=%s",
                supabase_url,
                bool(supabase_key),
            )
            self._client = None
            self._initialized = True
            return

        if not self._validate_url(supabase_url):
            logger.error(
                "Supabase URL format invalid: %r. Expected https://<project>.supabase.co",
                supabase_url,
            )
            self._client = None
            self._initialized = True
            return

        try:
            self._client = create_client(supabase_url, supabase_key)
            logger.info(
                "Initialized Supabase client for host=%s", urlparse(supabase_url).netloc
            )
        except Exception as exc:
            logger.exception("Failed to initialize Supabase client: %s", exc)
            self._client = None
        self._initialized = True

    @property
    def client(self) -> Optional[Client]:
        """Return the underlying supabase client or None when not configured."""
        if self._client is None and not self._initialized:
            self._initialize_client()
        return self._client

    def diagnostics(self) -> Dict[str, Any]:
        """Non-sensitive diagnostics, safe for logs and API responses."""
        diag: Dict[str, Any] = {
            "configured": bool(settings.supabase_url and settings.supabase_key),
            "client_present": self._client is not None,
            "table": settings.meal_table,
            "host": None,
        }
        if settings.supabase_url:
            diag["host"] = urlparse(settings.supabase_url).netloc
        return diag

    def health_check(self) -> bool:
        """
        Synchronous health check: one cheap count query against the meal table.

        Any exception or error-shaped response counts as unhealthy.
        """
        client = self.client
        if client is None:
            logger.debug("Supabase health_check: no client configured")
            return False

        try:
            res = (
                client.table(settings.meal_table)
                .select("id", count="exact")
                .limit(1)
                .execute()
            )
            if getattr(res, "error", None):
                logger.warning("Supabase health_check returned error object: %s", res.error)
                return False
            return True
        except Exception as exc:
            logger.exception("Exception during Supabase health_check: %s", exc)
            return False


# Single module-level instance for easy import
supabase_client = SupabaseClient()
