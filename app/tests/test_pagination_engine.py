# tests/test_pagination_engine.py
from types import SimpleNamespace

import pytest

from app.models.suggestion import CriteriaKey
from app.services.meal_store import MealStore
from app.services.pagination_engine import PaginationEngine

BREAKFAST = CriteriaKey(meal_type="breakfast", dietary_preference="any")


@pytest.fixture
def seed(fake_client, make_row):
    def _seed(names, **kw):
        fake_client.meal_table.rows.extend(make_row(n, **kw) for n in names)
    return _seed


@pytest.mark.asyncio
async def test_sequential_pages_walk_the_store(fake_client, fake_store, seed):
    # inserted out of order; pages come back sorted by name
    seed(["C", "A", "B"])
    engine = PaginationEngine(store=fake_store)

    seen = []
    for _ in range(3):
        page = await engine.get_suggestions(BREAKFAST, 1, False)
        seen.append((page.suggestions[0].name, page.total_shown, page.has_more))

    assert seen == [("A", 1, True), ("B", 2, True), ("C", 3, False)]

    last = await engine.get_suggestions(BREAKFAST, 1, False)
    assert last.actual == 0
    assert last.suggestions == []
    assert last.has_more is False
    assert last.remaining == 0
    assert last.total_available == 3


@pytest.mark.asyncio
async def test_page_fields(fake_client, fake_store, seed):
    seed(["Akara", "Moi Moi", "Pap", "Yam and Egg"])
    engine = PaginationEngine(store=fake_store)

    page = await engine.get_suggestions(BREAKFAST, 3, False)

    assert page.requested == 3
    assert page.actual == 3
    assert page.total_available == 4
    assert page.remaining == 1
    assert page.has_more is True
    assert all(s.source == "Database" for s in page.suggestions)

    page = await engine.get_suggestions(BREAKFAST, 3, False)
    assert page.actual == 1
    assert [s.name for s in page.suggestions] == ["Yam and Egg"]
    assert page.has_more is False


@pytest.mark.asyncio
async def test_get_new_restarts_shown_count(fake_client, fake_store, seed, fixed_rng):
    seed([f"Meal {i:02d}" for i in range(10)])
    rng = fixed_rng(5)
    engine = PaginationEngine(store=fake_store, rng=rng)

    await engine.get_suggestions(BREAKFAST, 2, False)
    await engine.get_suggestions(BREAKFAST, 2, False)
    assert engine.snapshot(BREAKFAST).shown_count == 4

    page = await engine.get_suggestions(BREAKFAST, 3, True)

    assert rng.calls == [(0, 7)]
    assert [s.name for s in page.suggestions] == ["Meal 05", "Meal 06", "Meal 07"]
    assert page.total_shown == 3
    assert page.remaining == 7
    assert page.has_more is True
    assert engine.snapshot(BREAKFAST).current_offset == 8


@pytest.mark.asyncio
async def test_get_new_range_never_empty(fake_client, fake_store, seed, fixed_rng):
    seed(["A", "B"])
    rng = fixed_rng(0)
    engine = PaginationEngine(store=fake_store, rng=rng)

    page = await engine.get_suggestions(BREAKFAST, 5, True)

    assert rng.calls == [(0, 1)]
    assert page.actual == 2
    assert page.has_more is False


@pytest.mark.asyncio
async def test_reset_replays_first_call_and_keeps_count_cache(fake_client, fake_store, seed):
    seed(["A", "B", "C"])
    engine = PaginationEngine(store=fake_store)

    first = await engine.get_suggestions(BREAKFAST, 1, False)
    await engine.get_suggestions(BREAKFAST, 1, False)

    engine.reset_criteria(BREAKFAST)
    again = await engine.get_suggestions(BREAKFAST, 1, False)

    assert again.model_dump() == first.model_dump()
    assert engine.snapshot(BREAKFAST).current_offset == 1
    assert fake_client.meal_table.count_calls == 1


@pytest.mark.asyncio
async def test_total_is_cached_until_clear_all(fake_client, fake_store, seed):
    seed(["A", "B"])
    engine = PaginationEngine(store=fake_store)

    assert await engine.get_total_available(BREAKFAST) == 2
    seed(["C"])
    assert await engine.get_total_available(BREAKFAST) == 2
    assert fake_client.meal_table.count_calls == 1

    engine.clear_all()
    assert await engine.get_total_available(BREAKFAST) == 3
    assert fake_client.meal_table.count_calls == 2


@pytest.mark.asyncio
async def test_criteria_are_independent_sessions(fake_client, fake_store, seed):
    seed(["A", "B"])
    seed(["Ofada Rice"], meal_type="lunch")
    engine = PaginationEngine(store=fake_store)
    lunch = CriteriaKey(meal_type="lunch", dietary_preference="any")

    await engine.get_suggestions(BREAKFAST, 1, False)
    page = await engine.get_suggestions(lunch, 1, False)

    assert page.suggestions[0].name == "Ofada Rice"
    assert page.total_shown == 1
    assert engine.snapshot(BREAKFAST).shown_count == 1


@pytest.mark.asyncio
async def test_ingredient_tokens_filter_count_and_page(fake_client, fake_store, make_row):
    fake_client.meal_table.rows.extend(
        [
            make_row("Dodo", ingredients=["plantain", "oil"]),
            make_row("Boli", ingredients=["corn"], description="Roasted ripe plantain with pepper"),
            make_row("Akara", ingredients=["beans", "onions"]),
        ]
    )
    engine = PaginationEngine(store=fake_store)
    criteria = CriteriaKey(meal_type="breakfast", dietary_preference="any", ingredients_text=" Plantain, ")

    assert await engine.get_total_available(criteria) == 2
    page = await engine.get_suggestions(criteria, 5, False)
    assert [s.name for s in page.suggestions] == ["Boli", "Dodo"]


@pytest.mark.asyncio
async def test_count_failure_serves_fallback(fake_client, fake_store, seed):
    seed(["A"])
    fake_client.meal_table.fail_count = True
    engine = PaginationEngine(store=fake_store)
    dinner = CriteriaKey(meal_type="dinner", dietary_preference="any")

    page = await engine.get_suggestions(dinner, 3, False)

    assert page.actual == 1
    assert page.has_more is False
    assert page.suggestions[0].source == "Fallback"
    assert page.suggestions[0].name == "Yam Porridge"

    # failures are not cached
    assert await engine.get_total_available(BREAKFAST) == 0
    fake_client.meal_table.fail_count = False
    assert await engine.get_total_available(BREAKFAST) == 1


@pytest.mark.asyncio
async def test_page_failure_leaves_state_untouched(fake_client, fake_store, seed):
    seed(["A", "B"])
    fake_client.meal_table.fail_page = True
    engine = PaginationEngine(store=fake_store)

    page = await engine.get_suggestions(BREAKFAST, 1, False)

    assert page.suggestions[0].name == "Jollof Rice with Fried Plantain"
    assert engine.snapshot(BREAKFAST).current_offset == 0
    assert engine.snapshot(BREAKFAST).shown_count == 0


@pytest.mark.asyncio
async def test_unconfigured_store_serves_fallback(monkeypatch):
    monkeypatch.setattr("app.services.meal_store.supabase_client", SimpleNamespace(client=None))
    engine = PaginationEngine(store=MealStore())

    page = await engine.get_suggestions(BREAKFAST, 2, False)

    assert page.actual == 1
    assert page.suggestions[0].source == "Fallback"
    assert await engine.get_total_available(BREAKFAST) == 0


@pytest.mark.asyncio
async def test_empty_store(fake_store):
    engine = PaginationEngine(store=fake_store)

    page = await engine.get_suggestions(BREAKFAST, 2, True)

    assert page.actual == 0
    assert page.has_more is False
    assert page.total_available == 0
