# app/services/errors.py
"""
Error taxonomy for the suggestion core.

Only GenerativeServiceUnavailable is meant to reach callers of the
orchestrator; the others are caught where they are raised from.
"""
from __future__ import annotations

from typing import Optional


class MealSuggestionError(Exception):
    """Base class for suggestion-core errors."""


class ExtractionFailure(MealSuggestionError):
    """Every extraction strategy failed to recover a non-empty name."""

    def __init__(self, msg: str, raw_preview: Optional[str] = None):
        super().__init__(msg)
        self.raw_preview = raw_preview


class StoreQueryError(MealSuggestionError):
    """The backing store could not answer a count or page query."""


class GenerativeServiceUnavailable(MealSuggestionError):
    """No generative call can succeed: missing or rejected credential."""
