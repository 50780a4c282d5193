# app/services/field_estimator.py
"""
Fill optional meal fields from ingredient/instruction counts and keywords.

Two entry points share the heuristics:
  - normalize_generated(): a record recovered from a generative reply
  - transform_store_row(): a row read from the curated store
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.models.suggestion import MAX_TAGS, CriteriaKey, MealSuggestion

logger = logging.getLogger(__name__)

DIFFICULTIES = ("Easy", "Medium", "Hard")
COSTS = ("Low", "Moderate", "High")

PROTEIN_KEYWORDS = ("meat", "fish", "chicken")
CARB_KEYWORDS = ("rice", "yam", "plantain")
COSTLY_KEYWORDS = ("meat", "fish", "palm oil", "stockfish")

# ingredient keyword -> tag, in the order tags are added
INGREDIENT_TAGS = (
    ("fish", "Seafood"),
    ("chicken", "Poultry"),
    ("beef", "Beef"),
    ("plantain", "Plantain"),
    ("rice", "Rice"),
    ("yam", "Yam"),
    ("soup", "Soup"),
    ("pepper", "Spicy"),
)

DEFAULT_INSTRUCTIONS = [
    "Prepare the ingredients as specified.",
    "In a large pot, heat the oil over medium heat.",
    "Add the onions and cook until fragrant.",
    "Add the meat (if using) and cook until browned.",
    "Add the vegetables and spices. Stir well.",
    "Pour in the water or stock. Cover and simmer for 20-30 minutes.",
    "Add the salt and pepper to taste.",
    "Serve hot with rice or bread.",
    "Enjoy your meal!",
]


def _string_list(x: Optional[Any]) -> List[str]:
    if not x:
        return []
    if isinstance(x, list):
        return [str(i).strip() for i in x if str(i).strip()]
    # stored as comma-separated text
    if isinstance(x, str):
        return [p.strip() for p in x.split(",") if p.strip()]
    return []


def _mentions(ingredients: Iterable[str], keywords: Sequence[str]) -> bool:
    lowered = [i.lower() for i in ingredients]
    return any(k in i for i in lowered for k in keywords)


def _coerce_choice(value: Any, choices: Sequence[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    v = value.strip().lower()
    for choice in choices:
        if v == choice.lower():
            return choice
    return None


def _prep_minutes(prep_time: Optional[str], default: int = 30) -> int:
    m = re.match(r"\s*(\d+)", prep_time or "")
    return int(m.group(1)) if m else default


# -----------------------
# Count-based estimates (generation path)
# -----------------------
def estimate_difficulty(ingredients: List[str], instructions: List[str]) -> str:
    if not ingredients or not instructions:
        return "Medium"
    if len(ingredients) <= 5 and len(instructions) <= 5:
        return "Easy"
    if len(ingredients) > 10 and len(instructions) > 10:
        return "Hard"
    return "Medium"


def estimate_cost(ingredients: List[str], instructions: List[str]) -> str:
    if not ingredients or not instructions:
        return "Moderate"
    if len(ingredients) <= 5 and len(instructions) <= 5:
        return "Low"
    if len(ingredients) > 10 and len(instructions) > 10:
        return "High"
    return "Moderate"


def estimate_serving_size(ingredients: List[str], instructions: List[str]) -> str:
    if not ingredients or not instructions:
        return "2-4 people"
    if len(ingredients) <= 5 and len(instructions) <= 5:
        return "1-2 people"
    if len(ingredients) > 10 and len(instructions) > 10:
        return "6-8 people"
    return "2-4 people"


def estimate_nutrition(ingredients: List[str]) -> Dict[str, str]:
    nutrition = {
        "calories": "300-400",
        "protein": "10-15g",
        "carbs": "40-60g",
        "fat": "10-20g",
    }
    if _mentions(ingredients, PROTEIN_KEYWORDS):
        nutrition["protein"] = "20-30g"
        nutrition["calories"] = "400-500"
    if _mentions(ingredients, CARB_KEYWORDS):
        nutrition["carbs"] = "50-70g"
    if _mentions(ingredients, ("palm oil",)):
        nutrition["fat"] = "15-25g"
    return nutrition


def generate_tags(cuisine: Optional[str], difficulty: Optional[str]) -> List[str]:
    tags = ["Nigerian", "Authentic", "Traditional"]
    for extra in (cuisine, difficulty):
        if extra and extra not in tags:
            tags.append(extra)
    return tags[:MAX_TAGS]


# -----------------------
# Store-row estimates
# -----------------------
def estimate_store_difficulty(prep_time: Optional[str], ingredients: List[str]) -> str:
    minutes = _prep_minutes(prep_time)
    if minutes > 90 or len(ingredients) > 12:
        return "Hard"
    if minutes > 45 or len(ingredients) > 8:
        return "Medium"
    return "Easy"


def estimate_store_cost(ingredients: List[str]) -> str:
    return "Moderate" if _mentions(ingredients, COSTLY_KEYWORDS) else "Low"


def estimate_store_serving_size(ingredients: List[str]) -> str:
    if len(ingredients) > 10:
        return "4-6 people"
    if len(ingredients) > 6:
        return "3-4 people"
    return "2-3 people"


def generate_store_tags(row: Dict[str, Any], ingredients: List[str]) -> List[str]:
    tags = ["Nigerian", "Authentic"]
    meal_type = row.get("meal_type")
    if meal_type:
        tags.append(str(meal_type).capitalize())
    diet = row.get("dietary_preference")
    if diet and diet != "any":
        tags.append(str(diet).capitalize())
    for keyword, tag in INGREDIENT_TAGS:
        if _mentions(ingredients, (keyword,)):
            tags.append(tag)
    return tags[:MAX_TAGS]


# -----------------------
# Entry points
# -----------------------
def normalize_generated(
    record: Dict[str, Any],
    criteria: Optional[CriteriaKey] = None,
    source: str = "AI",
) -> MealSuggestion:
    """Build a complete MealSuggestion from a recovered record, estimating what is missing."""
    raw_ingredients = _string_list(record.get("ingredients"))
    raw_instructions = _string_list(record.get("instructions"))

    difficulty = (
        _coerce_choice(record.get("difficulty"), DIFFICULTIES)
        or _coerce_choice(record.get("difficulty_"), DIFFICULTIES)
        or estimate_difficulty(raw_ingredients, raw_instructions)
    )
    cost = _coerce_choice(record.get("estimated_cost"), COSTS) or estimate_cost(
        raw_ingredients, raw_instructions
    )
    cuisine = (
        record.get("cuisine")
        or record.get("cuisine_")
        or (criteria.cuisine if criteria and criteria.cuisine else None)
        or "Nigerian"
    )

    nutrition = estimate_nutrition(raw_ingredients)
    given = record.get("nutrition_info")
    if isinstance(given, dict):
        nutrition.update({k: str(v) for k, v in given.items() if v not in (None, "")})

    tags = _string_list(record.get("tags")) or _string_list(record.get("tags_text"))

    return MealSuggestion(
        name=str(record.get("name") or ""),
        description=str(record.get("description") or "A delicious Nigerian meal"),
        prep_time=str(record.get("prep_time") or "30 mins"),
        ingredients=raw_ingredients,
        instructions=raw_instructions or list(DEFAULT_INSTRUCTIONS),
        nutrition_info=nutrition,
        difficulty=difficulty,
        cuisine=str(cuisine),
        tags=tags or generate_tags(str(cuisine), difficulty),
        serving_size=str(
            record.get("serving_size")
            or estimate_serving_size(raw_ingredients, raw_instructions)
        ),
        estimated_cost=cost,
        is_ai_generated=source == "AI",
        source=source,
    )


def transform_store_row(row: Dict[str, Any]) -> MealSuggestion:
    """Turn a curated store row into a MealSuggestion (source=Database)."""
    ingredients = _string_list(row.get("ingredients"))
    prep_time = row.get("prep_time") or "30 mins"

    return MealSuggestion(
        name=str(row.get("name") or ""),
        description=str(row.get("description") or ""),
        prep_time=str(prep_time),
        ingredients=ingredients,
        # the curated table carries no instructions
        instructions=[],
        nutrition_info=estimate_nutrition(ingredients),
        difficulty=estimate_store_difficulty(prep_time, ingredients),
        cuisine="Nigerian",
        tags=generate_store_tags(row, ingredients),
        serving_size=estimate_store_serving_size(ingredients),
        estimated_cost=estimate_store_cost(ingredients),
        is_ai_generated=False,
        source="Database",
        id=row.get("id"),
    )
