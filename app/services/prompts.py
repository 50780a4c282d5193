# app/services/prompts.py
"""
Request text for the generative service.

Only the shape of the request matters to the rest of the core: a system
instruction, a base prompt for the criteria, and per-attempt variety text.
"""
from __future__ import annotations

from typing import Iterable

from app.models.suggestion import CriteriaKey

SYSTEM_INSTRUCTION = (
    "You are an expert culinary assistant specializing in authentic Nigerian and "
    "African cooking traditions. Always provide unique, varied suggestions that are "
    "practical, flavorful and culturally authentic. Avoid repeating meal names. "
    "Provide accurate, safe, step-by-step cooking instructions with specific times "
    "and visual cues for doneness.\n\n"
    "You must respond with ONLY valid JSON. No extra text, no markdown, no code "
    "blocks. The response must start with { and end with }. All strings must be "
    "quoted with single double quotes, not double double quotes."
)

VARIETY_HINTS = (
    "Try a traditional Nigerian cooking method with authentic ingredients",
    "Focus on seasonal Nigerian ingredients and local produce",
    "Use traditional cooking techniques like slow cooking or smoking",
    "Create a comfort food that reflects Nigerian home cooking",
    "Experiment with traditional Nigerian spices and herbs",
    "Make it a one-pot meal using traditional Nigerian methods",
    "Add a traditional Nigerian sauce or condiment",
    "Use traditional Nigerian grains or proteins",
    "Create a variation of a classic Nigerian dish",
    "Focus on authentic presentation and traditional serving methods",
)

DIETARY_INFO = {
    "any": "no dietary restrictions",
    "vegetarian": "vegetarian (no meat or fish)",
    "vegan": "vegan (plant-based only)",
    "gluten-free": "gluten-free",
    "low-carb": "low-carbohydrate",
    "high-protein": "high-protein",
    "halal": "halal (permissible under Islamic dietary laws)",
    "no-pork": "no pork products",
    "no-beef": "no beef products",
    "pescatarian": "pescatarian (fish and seafood allowed, no other meat)",
    "low-spice": "low spice tolerance",
    "no-seafood": "no seafood or fish",
}

RESPONSE_FORMAT = """Respond with ONLY a valid JSON object in this exact format:

{
  "name": "Authentic Nigerian meal name",
  "description": "Flavors, textures and cultural significance",
  "prep_time": "X mins",
  "ingredients": ["ingredient 1", "ingredient 2", "ingredient 3"],
  "instructions": ["Step 1: ...", "Step 2: ...", "Step 3: ..."],
  "nutrition_info": {"calories": "...", "protein": "...g", "carbs": "...g", "fat": "...g"},
  "difficulty": "Easy/Medium/Hard",
  "cuisine": "%s",
  "tags": ["tag1", "tag2", "tag3"],
  "serving_size": "number of people",
  "estimated_cost": "Low/Moderate/High"
}

Use "Egusi Soup", never "" "Egusi Soup" "". No trailing commas. No line breaks
inside string values."""


def build_meal_prompt(criteria: CriteriaKey) -> str:
    diet = DIETARY_INFO.get(criteria.dietary_preference, criteria.dietary_preference)
    cuisine_info = (
        f"preferably {criteria.cuisine} cuisine" if criteria.cuisine else "any Nigerian cuisine"
    )
    ingredients_info = (
        f" Use these available ingredients: {criteria.ingredients_text}."
        if criteria.ingredients_text
        else ""
    )
    cuisine_label = f"{criteria.cuisine} cuisine" if criteria.cuisine else "Nigerian"
    return (
        f"Generate an authentic Nigerian meal suggestion for {criteria.meal_type} "
        f"that is {diet}, {cuisine_info}.{ingredients_info}\n\n"
        + RESPONSE_FORMAT % cuisine_label
    )


def build_variety_prompt(criteria: CriteriaKey, index: int, used_names: Iterable[str]) -> str:
    """Base prompt plus the rotating hint for attempt `index` and the names to avoid."""
    hint = VARIETY_HINTS[index % len(VARIETY_HINTS)]
    used = ", ".join(used_names)
    return (
        f"{build_meal_prompt(criteria)}\n\n"
        f"Variety hint: {hint}\n\n"
        f"Important: Avoid these already used meal names: {used}\n\n"
        "Make this suggestion completely different from the previous ones."
    )
