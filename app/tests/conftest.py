# tests/conftest.py
from types import SimpleNamespace

import pytest

from app.config.settings import settings
from app.services.meal_store import MealStore


@pytest.fixture(autouse=True)
def patch_settings(monkeypatch):
    """
    Provide sane defaults for settings used by services.
    Tests can override attributes with monkeypatch as needed.
    """
    monkeypatch.setattr(settings, "openai_api_key", "sk-test-0000-key", raising=False)
    monkeypatch.setattr(settings, "openai_model", "gpt-4o", raising=False)
    monkeypatch.setattr(settings, "meal_table", "meal_suggestions", raising=False)
    monkeypatch.setattr(settings, "enable_database_suggestions", True, raising=False)
    monkeypatch.setattr(settings, "enable_ai_suggestions", True, raising=False)
    monkeypatch.setattr(settings, "enable_fallback_suggestions", True, raising=False)
    monkeypatch.setattr(settings, "ai_pool_size", 12, raising=False)
    monkeypatch.setattr(settings, "generation_max_attempts", 3, raising=False)
    monkeypatch.setattr(settings, "generation_max_time_seconds", 20.0, raising=False)
    return monkeypatch


# --- Fake Supabase query builder ---
class FakeQuery:
    """Just enough of the PostgREST builder: eq / or_ / order / range / limit / execute."""

    def __init__(self, table, count=None):
        self._table = table
        self._count = count
        self._eq = []
        self._or = []
        self._order = None
        self._range = None

    def eq(self, column, value):
        self._eq.append((column, value))
        return self

    def or_(self, expr):
        for cond in expr.split(","):
            column, op, value = cond.split(".", 2)
            self._or.append((column, op, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, n):
        self._range = (0, n - 1)
        return self

    def _matches_or(self, row):
        for column, op, value in self._or:
            if op == "cs":
                wanted = value.strip("{}")
                if wanted in (row.get(column) or []):
                    return True
            elif op == "ilike":
                needle = value.strip("%").lower()
                if needle in (row.get(column) or "").lower():
                    return True
        return False

    def execute(self):
        self._table.calls.append("count" if self._count else "page")
        if self._table.fail_count and self._count:
            raise RuntimeError("connection refused")
        if self._table.fail_page and not self._count:
            raise RuntimeError("connection reset by peer")

        rows = [r for r in self._table.rows if all(r.get(c) == v for c, v in self._eq)]
        if self._or:
            rows = [r for r in rows if self._matches_or(r)]
        if self._order:
            column, desc = self._order
            rows = sorted(rows, key=lambda r: r.get(column) or "", reverse=desc)
        total = len(rows)
        if self._range:
            start, end = self._range
            rows = rows[start:end + 1]
        return SimpleNamespace(data=rows, count=total if self._count else None)


class FakeTable:

    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.calls = []
        self.fail_count = False
        self.fail_page = False

    def select(self, *args, count=None):
        return FakeQuery(self, count=count)

    @property
    def count_calls(self):
        return self.calls.count("count")


class FakeClient:

    def __init__(self, rows=None):
        self.meal_table = FakeTable(rows)

    def table(self, name):
        assert name == "meal_suggestions"
        return self.meal_table


def _make_row(name, meal_type="breakfast", dietary_preference="any", **extra):
    row = {
        "id": extra.pop("id", name.lower().replace(" ", "-")),
        "name": name,
        "description": extra.pop("description", f"{name} the way it is made at home"),
        "prep_time": extra.pop("prep_time", "30 mins"),
        "ingredients": extra.pop("ingredients", ["onions", "pepper"]),
        "meal_type": meal_type,
        "dietary_preference": dietary_preference,
    }
    row.update(extra)
    return row


@pytest.fixture
def make_row():
    return _make_row


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def fake_store(fake_client):
    return MealStore(client=fake_client)


# --- OpenAI client shaped like the SDK ---
class DummyOpenAI:
    """
    `replies` items are strings (returned as message content), exceptions
    (raised) or callables taking the request kwargs.
    """

    def __init__(self, replies=None, clock=None, latency=0.0):
        self.replies = list(replies or [])
        self.requests = []
        self.clock = clock
        self.latency = latency
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, *args, **kwargs):
        self.requests.append(kwargs)
        if self.clock is not None:
            self.clock.advance(self.latency)
        reply = self.replies[(len(self.requests) - 1) % len(self.replies)]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(kwargs)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=reply))]
        )


class FakeClock:

    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def dummy_openai():
    return DummyOpenAI


@pytest.fixture
def fake_clock():
    return FakeClock()


class FixedRng:
    """randrange() stub that returns `value` and records its arguments."""

    def __init__(self, value=0):
        self.value = value
        self.calls = []

    def randrange(self, start, stop):
        self.calls.append((start, stop))
        return self.value


@pytest.fixture
def fixed_rng():
    return FixedRng
