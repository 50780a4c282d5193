"""
Pydantic models for meal suggestions and per-criteria pagination state.
"""
from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Difficulty = Literal["Easy", "Medium", "Hard"]
Cost = Literal["Low", "Moderate", "High"]
Source = Literal["Database", "AI", "Fallback", "Community"]

MAX_TAGS = 5


def default_nutrition() -> Dict[str, str]:
    return {"calories": "400", "protein": "15g", "carbs": "60g", "fat": "18g"}


class MealSuggestion(BaseModel):
    """A single suggestion as shown to the user, whatever its origin."""

    name: str
    description: str = ""
    prep_time: str = "30 mins"
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    nutrition_info: Dict[str, str] = Field(default_factory=default_nutrition)
    difficulty: Difficulty = "Medium"
    cuisine: str = "Nigerian"
    tags: List[str] = Field(default_factory=list)
    serving_size: str = "2-4 people"
    estimated_cost: Cost = "Moderate"
    is_ai_generated: bool = False
    source: Source = "AI"
    id: Optional[Union[int, str]] = None

    @field_validator("name")
    @classmethod
    def name_must_be_present(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name must be a non-empty string")
        return v

    @field_validator("tags")
    @classmethod
    def cap_tags(cls, v: List[str]) -> List[str]:
        return v[:MAX_TAGS]


class CriteriaKey(BaseModel):
    """Identity of one pagination session. Values are compared verbatim."""

    model_config = ConfigDict(frozen=True)

    meal_type: str
    dietary_preference: str
    cuisine: str = ""
    ingredients_text: str = ""

    def ingredient_tokens(self) -> List[str]:
        """Lower-cased, trimmed, non-empty comma-separated ingredient tokens."""
        return [
            t.strip()
            for t in (self.ingredients_text or "").lower().split(",")
            if t.strip()
        ]

    def __str__(self) -> str:
        return f"{self.meal_type}-{self.dietary_preference}-{self.cuisine}-{self.ingredients_text}"


class PaginationState(BaseModel):
    current_offset: int = 0
    shown_count: int = 0


class ContentAnalysis(BaseModel):
    """Structural flags for one raw reply; computed fresh, never stored."""

    is_valid_json: bool = False
    has_known_quote_defect: bool = False
    is_repairable: bool = False
    has_name_field: bool = False
    has_description_field: bool = False


class SuggestionPage(BaseModel):
    """Result of one paginated request, serialised with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    suggestions: List[MealSuggestion] = Field(default_factory=list)
    has_more: bool = False
    total_available: int = 0
    requested: int = 0
    actual: int = 0
    remaining: int = 0
    total_shown: Optional[int] = None
    ai_generated: bool = False
