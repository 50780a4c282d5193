"""
Meal suggestion endpoints: paginated store suggestions with generated backfill.
"""
import logging
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from app.models.suggestion import CriteriaKey, MealSuggestion, SuggestionPage
from app.services.errors import GenerativeServiceUnavailable
from app.services.suggestion_service import SuggestionService

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_suggestion_service() -> SuggestionService:
    return SuggestionService()


class CriteriaBody(BaseModel):
    meal_type: str
    dietary_preference: str = "any"
    cuisine: str = ""
    ingredients: str = ""

    def to_key(self) -> CriteriaKey:
        return CriteriaKey(
            meal_type=self.meal_type,
            dietary_preference=self.dietary_preference,
            cuisine=self.cuisine,
            ingredients_text=self.ingredients,
        )


class GenerateBody(CriteriaBody):
    count: int = Field(default=3, ge=1, le=10)


def criteria_from_query(
    meal_type: str = Query(..., min_length=1),
    dietary_preference: str = Query("any"),
    cuisine: str = Query(""),
    ingredients: str = Query(""),
) -> CriteriaKey:
    return CriteriaKey(
        meal_type=meal_type,
        dietary_preference=dietary_preference,
        cuisine=cuisine,
        ingredients_text=ingredients,
    )


@router.get("", response_model=SuggestionPage, response_model_by_alias=True)
async def get_suggestions(
    criteria: CriteriaKey = Depends(criteria_from_query),
    count: int = Query(3, ge=1, le=20),
    get_new: bool = Query(False),
    service: SuggestionService = Depends(get_suggestion_service),
):
    """Next page for the criteria, or a fresh random page when get_new is set."""
    return await service.get_suggestions(criteria, count, get_new)


@router.get("/count")
async def get_total_available(
    criteria: CriteriaKey = Depends(criteria_from_query),
    service: SuggestionService = Depends(get_suggestion_service),
):
    total = await service.get_total_available(criteria)
    return {"totalAvailable": total}


@router.post("/reset")
async def reset_criteria(
    body: CriteriaBody,
    service: SuggestionService = Depends(get_suggestion_service),
):
    service.reset_criteria(body.to_key())
    return {"status": "ok"}


@router.post("/pregenerate")
async def pregenerate(
    body: CriteriaBody,
    service: SuggestionService = Depends(get_suggestion_service),
):
    pooled = await service.pregenerate(body.to_key())
    return {"pooled": pooled}


@router.post("/generate", response_model=List[MealSuggestion])
async def generate_suggestions(
    body: GenerateBody,
    service: SuggestionService = Depends(get_suggestion_service),
):
    try:
        return await service.generate_suggestions(body.to_key(), body.count)
    except GenerativeServiceUnavailable as exc:
        logger.warning("Generate request rejected: %s", exc)
        raise HTTPException(status_code=503, detail="Generative service unavailable")
