"""Data models for the meal suggestion service."""
from app.models.suggestion import (
    ContentAnalysis,
    CriteriaKey,
    MealSuggestion,
    PaginationState,
    SuggestionPage,
)

__all__ = [
    "ContentAnalysis",
    "CriteriaKey",
    "MealSuggestion",
    "PaginationState",
    "SuggestionPage",
]
