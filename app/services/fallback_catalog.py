# app/services/fallback_catalog.py
"""
Static suggestions used when neither the store nor the generative service
can satisfy a request.
"""
from __future__ import annotations

from typing import Any, Dict, List

from app.models.suggestion import MealSuggestion

FALLBACK_CATALOG: List[Dict[str, Any]] = [
    {
        "name": "Traditional Nigerian Breakfast",
        "description": "A hearty Nigerian breakfast with pap and akara",
        "prep_time": "30 mins",
        "ingredients": ["Corn flour", "Black-eyed peas", "Onions", "Pepper", "Palm oil"],
        "instructions": ["Prepare pap with corn flour", "Make akara with beans", "Serve hot"],
        "nutrition_info": {"calories": "350", "protein": "12g", "carbs": "55g", "fat": "15g"},
        "difficulty": "Medium",
        "cuisine": "Nigerian Traditional",
        "tags": ["Traditional", "Breakfast"],
        "serving_size": "2 people",
        "estimated_cost": "Low",
    },
    {
        "name": "Nigerian Lunch Special",
        "description": "Delicious Nigerian lunch with rice and stew",
        "prep_time": "45 mins",
        "ingredients": ["Rice", "Tomatoes", "Beef", "Onions", "Palm oil", "Seasoning"],
        "instructions": ["Cook rice", "Prepare tomato stew", "Serve together"],
        "nutrition_info": {"calories": "500", "protein": "20g", "carbs": "70g", "fat": "22g"},
        "difficulty": "Medium",
        "cuisine": "Nigerian Traditional",
        "tags": ["Traditional", "Lunch"],
        "serving_size": "4 people",
        "estimated_cost": "Moderate",
    },
    {
        "name": "Nigerian Dinner Delight",
        "description": "Comforting Nigerian dinner with yam and sauce",
        "prep_time": "35 mins",
        "ingredients": ["White yam", "Tomatoes", "Onions", "Pepper", "Vegetable oil"],
        "instructions": ["Boil yam", "Prepare sauce", "Serve hot"],
        "nutrition_info": {"calories": "400", "protein": "15g", "carbs": "60g", "fat": "18g"},
        "difficulty": "Easy",
        "cuisine": "Nigerian Traditional",
        "tags": ["Traditional", "Dinner"],
        "serving_size": "3 people",
        "estimated_cost": "Low",
    },
    {
        "name": "Egusi Soup with Pounded Yam",
        "description": "Traditional Nigerian soup with ground melon seeds and smooth pounded yam",
        "prep_time": "60 mins",
        "ingredients": ["Egusi seeds", "Palm oil", "Spinach", "Meat", "Yam", "Pepper", "Onions"],
        "instructions": ["Grind egusi seeds", "Prepare soup base", "Pound yam", "Serve together"],
        "nutrition_info": {"calories": "450", "protein": "18g", "carbs": "55g", "fat": "20g"},
        "difficulty": "Hard",
        "cuisine": "Nigerian Traditional",
        "tags": ["Traditional", "Soup", "Yam"],
        "serving_size": "4 people",
        "estimated_cost": "Moderate",
    },
    {
        "name": "Jollof Rice with Grilled Fish",
        "description": "Spicy Nigerian jollof rice served with perfectly grilled fish",
        "prep_time": "50 mins",
        "ingredients": ["Basmati rice", "Tomatoes", "Red bell peppers", "Fish", "Onions", "Spices"],
        "instructions": ["Prepare jollof base", "Cook rice", "Grill fish", "Serve together"],
        "nutrition_info": {"calories": "520", "protein": "25g", "carbs": "75g", "fat": "18g"},
        "difficulty": "Medium",
        "cuisine": "Nigerian Traditional",
        "tags": ["Traditional", "Rice", "Fish"],
        "serving_size": "4 people",
        "estimated_cost": "Moderate",
    },
    {
        "name": "Amala with Ewedu and Gbegiri",
        "description": "Traditional Yoruba meal with yam flour, jute leaves, and bean soup",
        "prep_time": "40 mins",
        "ingredients": ["Yam flour", "Jute leaves", "Beans", "Palm oil", "Meat", "Pepper"],
        "instructions": ["Prepare amala", "Cook ewedu", "Make gbegiri", "Serve together"],
        "nutrition_info": {"calories": "480", "protein": "16g", "carbs": "68g", "fat": "19g"},
        "difficulty": "Medium",
        "cuisine": "Yoruba Traditional",
        "tags": ["Traditional", "Yoruba", "Soup"],
        "serving_size": "3 people",
        "estimated_cost": "Low",
    },
    {
        "name": "Abacha and Ugba",
        "description": "Traditional Igbo cassava flakes with oil bean seeds",
        "prep_time": "25 mins",
        "ingredients": ["Cassava flakes", "Oil bean seeds", "Palm oil", "Pepper", "Stockfish"],
        "instructions": ["Soak cassava flakes", "Prepare sauce", "Mix together", "Serve"],
        "nutrition_info": {"calories": "380", "protein": "14g", "carbs": "45g", "fat": "16g"},
        "difficulty": "Easy",
        "cuisine": "Igbo Traditional",
        "tags": ["Traditional", "Igbo", "Cassava"],
        "serving_size": "2 people",
        "estimated_cost": "Low",
    },
    {
        "name": "Tuwo Shinkafa with Miyan Kuka",
        "description": "Hausa rice pudding with baobab leaf soup",
        "prep_time": "55 mins",
        "ingredients": ["Rice flour", "Baobab leaves", "Meat", "Palm oil", "Pepper", "Onions"],
        "instructions": ["Prepare tuwo", "Cook miyan kuka", "Serve together"],
        "nutrition_info": {"calories": "420", "protein": "17g", "carbs": "62g", "fat": "16g"},
        "difficulty": "Medium",
        "cuisine": "Hausa Traditional",
        "tags": ["Traditional", "Hausa", "Soup"],
        "serving_size": "4 people",
        "estimated_cost": "Low",
    },
    {
        "name": "Banga Soup with Starch",
        "description": "Traditional Delta palm nut soup with cassava starch",
        "prep_time": "70 mins",
        "ingredients": ["Palm nuts", "Cassava starch", "Fish", "Pepper", "Onions", "Spices"],
        "instructions": ["Extract palm nut juice", "Prepare soup", "Make starch", "Serve"],
        "nutrition_info": {"calories": "460", "protein": "20g", "carbs": "58g", "fat": "22g"},
        "difficulty": "Hard",
        "cuisine": "Delta Traditional",
        "tags": ["Traditional", "Delta", "Soup"],
        "serving_size": "4 people",
        "estimated_cost": "Moderate",
    },
    {
        "name": "Ofada Rice with Ayamase",
        "description": "Local rice with green pepper sauce and assorted meat",
        "prep_time": "65 mins",
        "ingredients": ["Ofada rice", "Green peppers", "Assorted meat", "Palm oil", "Onions"],
        "instructions": ["Cook ofada rice", "Prepare ayamase sauce", "Serve together"],
        "nutrition_info": {"calories": "540", "protein": "22g", "carbs": "72g", "fat": "24g"},
        "difficulty": "Medium",
        "cuisine": "Nigerian Traditional",
        "tags": ["Traditional", "Rice", "Pepper"],
        "serving_size": "4 people",
        "estimated_cost": "Moderate",
    },
]

# one fixed suggestion per meal type, served when the store cannot be queried
STORE_FALLBACKS: Dict[str, Dict[str, Any]] = {
    "breakfast": {
        "name": "Jollof Rice with Fried Plantain",
        "description": "Classic Nigerian jollof rice served with sweet fried plantain",
        "prep_time": "45 mins",
        "ingredients": [
            "Basmati rice",
            "Tomatoes",
            "Red bell peppers",
            "Onions",
            "Chicken stock",
            "Bay leaves",
            "Ripe plantain",
            "Vegetable oil",
        ],
        "nutrition_info": {"calories": "450", "protein": "12g", "carbs": "65g", "fat": "18g"},
        "difficulty": "Medium",
        "tags": ["Nigerian", "Traditional", "Rice"],
        "serving_size": "4 people",
        "estimated_cost": "Moderate",
    },
    "lunch": {
        "name": "Efo Riro with Semovita",
        "description": "Rich Yoruba spinach stew served with a smooth semovita swallow",
        "prep_time": "50 mins",
        "ingredients": ["Spinach", "Palm oil", "Locust beans", "Tatashe", "Onions", "Semovita"],
        "nutrition_info": {"calories": "430", "protein": "16g", "carbs": "58g", "fat": "19g"},
        "difficulty": "Medium",
        "tags": ["Nigerian", "Traditional", "Soup"],
        "serving_size": "3-4 people",
        "estimated_cost": "Moderate",
    },
    "dinner": {
        "name": "Yam Porridge",
        "description": "Soft yam cooked down in a peppery palm oil sauce",
        "prep_time": "40 mins",
        "ingredients": ["Yam", "Palm oil", "Pepper", "Onions", "Crayfish", "Spinach"],
        "nutrition_info": {"calories": "410", "protein": "10g", "carbs": "66g", "fat": "15g"},
        "difficulty": "Easy",
        "tags": ["Nigerian", "Traditional", "Yam"],
        "serving_size": "3-4 people",
        "estimated_cost": "Low",
    },
}


def catalog_suggestions() -> List[MealSuggestion]:
    return [
        MealSuggestion(**entry, is_ai_generated=False, source="Fallback")
        for entry in FALLBACK_CATALOG
    ]


def pad_with_fallbacks(collected: List[MealSuggestion], count: int) -> List[MealSuggestion]:
    """
    Top `collected` up to `count` from the catalog, skipping names already present.
    May return fewer than `count` once the catalog runs out.
    """
    result = list(collected)
    seen = {s.name.strip().lower() for s in result}
    for suggestion in catalog_suggestions():
        if len(result) >= count:
            break
        key = suggestion.name.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(suggestion)
    return result


def store_fallback(meal_type: str) -> MealSuggestion:
    entry = STORE_FALLBACKS.get((meal_type or "").lower(), STORE_FALLBACKS["breakfast"])
    return MealSuggestion(
        **entry,
        instructions=[],
        cuisine="Nigerian",
        is_ai_generated=False,
        source="Fallback",
    )
