# app/services/generation_orchestrator.py
"""
Generate distinct meal suggestions from the OpenAI chat API.

Each invocation:
- calls the service at most min(2 * count, generation_max_attempts) times,
- stops starting new attempts once generation_max_time_seconds has elapsed
  (a call already in flight is allowed to finish),
- feeds every reply through the ExtractionPipeline and FieldEstimator,
- drops names already accepted in this invocation (case-insensitive),
- pads any shortfall from the static fallback catalog.

Only a missing or rejected credential surfaces to the caller, as
GenerativeServiceUnavailable. Everything else degrades to fallbacks.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Set

import openai
from openai import OpenAI
from pydantic import ValidationError

from app.config.settings import settings
from app.models.suggestion import CriteriaKey, MealSuggestion
from app.services.errors import ExtractionFailure, GenerativeServiceUnavailable
from app.services.extraction_pipeline import ExtractionPipeline
from app.services.fallback_catalog import pad_with_fallbacks
from app.services.field_estimator import normalize_generated
from app.services.prompts import SYSTEM_INSTRUCTION, build_variety_prompt

logger = logging.getLogger(__name__)


def _mask_key(k: Optional[str]) -> str:
    if not k:
        return "(none)"
    if len(k) <= 8:
        return k
    return f"{k[:4]}...{k[-4:]}"


def _reply_text(resp: Any) -> Optional[str]:
    """Pull choices[0].message.content out of an SDK object or a plain dict."""
    choices = getattr(resp, "choices", None)
    if choices is None and isinstance(resp, dict):
        choices = resp.get("choices")
    if not choices:
        return None

    choice = choices[0]
    message = getattr(choice, "message", None)
    if message is None and isinstance(choice, dict):
        message = choice.get("message")
    if message is None:
        return None

    content = getattr(message, "content", None)
    if content is None and isinstance(message, dict):
        content = message.get("content")
    return content if isinstance(content, str) else None


class GenerationOrchestrator:

    def __init__(
        self,
        openai_client: Optional[Any] = None,
        model: Optional[str] = None,
        max_attempts: Optional[int] = None,
        max_time_seconds: Optional[float] = None,
        pipeline: Optional[ExtractionPipeline] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        # created lazily so the app can start without OPENAI_API_KEY
        self._client = openai_client
        self.model = model or settings.openai_model
        self.max_attempts = max_attempts if max_attempts is not None else settings.generation_max_attempts
        self.max_time_seconds = (
            max_time_seconds
            if max_time_seconds is not None
            else settings.generation_max_time_seconds
        )
        self.pipeline = pipeline or ExtractionPipeline()
        self.clock = clock

    # -----------------------
    # Internal helpers
    # -----------------------
    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client

        if not settings.openai_api_key:
            raise GenerativeServiceUnavailable("OPENAI_API_KEY is not configured")
        try:
            self._client = OpenAI(api_key=settings.openai_api_key)
            logger.info("OpenAI client created (key=%s)", _mask_key(settings.openai_api_key))
        except openai.OpenAIError as exc:
            logger.exception("Failed creating OpenAI client: %s", exc)
            raise GenerativeServiceUnavailable(str(exc)) from exc
        return self._client

    async def _exec_in_thread(self, fn, *args, **kwargs):
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))

    async def _request(self, client: Any, prompt: str) -> Any:
        return await self._exec_in_thread(
            client.chat.completions.create,
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
            presence_penalty=settings.generation_presence_penalty,
            frequency_penalty=settings.generation_frequency_penalty,
            timeout=settings.openai_request_timeout,
        )

    # -----------------------
    # Public API
    # -----------------------
    async def generate_suggestions(self, criteria: CriteriaKey, count: int) -> List[MealSuggestion]:
        """
        Return up to `count` distinct suggestions. Never raises for a shortfall.

        Raises:
            GenerativeServiceUnavailable: no key configured, or the key is rejected.
        """
        if count <= 0:
            return []

        client = self._get_client()
        budget = min(2 * count, max(1, self.max_attempts))
        started = self.clock()

        accepted: List[MealSuggestion] = []
        seen: Set[str] = set()
        attempts = 0

        while len(accepted) < count and attempts < budget:
            elapsed = self.clock() - started
            if elapsed >= self.max_time_seconds:
                logger.warning(
                    "Generation time budget exhausted after %d attempts (%.1fs) for %s",
                    attempts,
                    elapsed,
                    criteria,
                )
                break

            prompt = build_variety_prompt(criteria, attempts, [s.name for s in accepted])
            attempts += 1

            try:
                resp = await self._request(client, prompt)
            except openai.AuthenticationError as exc:
                logger.error(
                    "OpenAI rejected the API key (key=%s): %s",
                    _mask_key(settings.openai_api_key),
                    exc,
                )
                raise GenerativeServiceUnavailable("OpenAI authentication failed") from exc
            except openai.APIError as exc:
                logger.warning("Generation attempt %d failed: %s", attempts, exc)
                continue
            except Exception as exc:
                logger.exception("Generation attempt %d raised unexpectedly: %s", attempts, exc)
                continue

            content = _reply_text(resp)
            if not content:
                logger.warning("Generation attempt %d returned no content", attempts)
                continue

            try:
                record = self.pipeline.extract(content)
                suggestion = normalize_generated(record, criteria, source="AI")
            except ExtractionFailure as exc:
                logger.info("Discarding attempt %d: %s", attempts, exc)
                continue
            except ValidationError as exc:
                logger.info("Discarding attempt %d, record rejected: %s", attempts, exc)
                continue

            key = suggestion.name.strip().lower()
            if key in seen:
                logger.debug("Duplicate suggestion %r dropped", suggestion.name)
                continue
            seen.add(key)
            accepted.append(suggestion)

        if len(accepted) < count:
            logger.info(
                "Generated %d/%d suggestions in %d attempts, padding from fallback catalog",
                len(accepted),
                count,
                attempts,
            )
        return pad_with_fallbacks(accepted, count)
