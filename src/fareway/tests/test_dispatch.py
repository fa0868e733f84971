"""Tests for the validation & dispatch engine."""

from __future__ import annotations

import asyncio

import pytest
from pydantic import BaseModel

from fareway.foundation.errors import ErrorCode, StoreError
from fareway.foundation.registry import ToolDefinition, ToolRegistry
from fareway.io.cache import MemoryCache, ToolCache
from fareway.io.store import MemoryRecordStore
from fareway.runtime import Dispatcher
from fareway.runtime.observability import CaptureRenderer
from fareway.tools import build_registry
from fareway.tools.params import SearchCoursesParams

from conftest import OPERATOR_ID, course_id, make_store

VALID_CALLS = [
    ("search_courses", {"region": "ireland"}),
    ("search_courses", {"course_type": "links", "max_price_cents": "30000"}),
    ("get_course_details", {"course_id": course_id(3)}),
    ("get_recommended_courses", {"region": "Ireland", "budget_tier": "standard"}),
    ("search_accommodations", {"region": "kerry"}),
    ("get_golf_resorts", {}),
    ("get_supplier_rates", {"operator_id": OPERATOR_ID, "supplier_type": "any"}),
    ("get_operator_suppliers", {"operator_id": OPERATOR_ID}),
]

INVALID_CALLS = [
    ("get_course_details", {}),
    ("get_course_details", {"course_id": "not-a-uuid"}),
    ("get_recommended_courses", {"region": "Kerry", "budget_tier": "platinum"}),
    ("search_courses", {"course_type": "desert"}),
    ("search_courses", {"limit": 0}),
    ("search_courses", {"limit": 101}),
    ("find_course_by_name", {"course_name": "   "}),
    ("has_negotiated_rate", {"operator_id": OPERATOR_ID}),
]


class FailingCache(ToolCache):
    """Cache whose writes blow up with something the backend did not absorb."""

    backend = "broken"

    async def get(self, key: str, *, timeout: float | None = None) -> str | None:
        return None

    async def set(self, key: str, value: str, ttl: float | None = None, *, timeout: float | None = None) -> None:
        raise RuntimeError("cache exploded")

    async def clear_prefix(self, prefix: str) -> int:
        return 0


# ═════════════════════════════════════════════════════════════════════════════
# Cache equivalence and idempotence
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize(("name", "args"), VALID_CALLS)
async def test_cache_on_off_equivalence(name: str, args: dict) -> None:
    """Disabled cache, cache miss and cache hit all yield the same data."""
    plain = Dispatcher(build_registry(), make_store())
    cached_store = make_store()
    cached = Dispatcher(build_registry(), cached_store, MemoryCache())

    baseline = await plain.execute(name, args)
    miss = await cached.execute(name, args)
    hit = await cached.execute(name, args)

    assert baseline.success, baseline.error
    assert baseline.data == miss.data == hit.data
    assert not baseline.cached
    assert not miss.cached
    assert hit.cached
    assert cached_store.call_count == 1


@pytest.mark.asyncio
async def test_repeated_uncached_calls_are_idempotent(uncached_dispatcher: Dispatcher, store: MemoryRecordStore) -> None:
    first = await uncached_dispatcher.execute("find_course_by_name", {"course_name": "course 1"})
    second = await uncached_dispatcher.execute("find_course_by_name", {"course_name": "course 1"})
    assert first.data == second.data
    assert store.call_count == 2


@pytest.mark.asyncio
async def test_non_cacheable_tools_bypass_cache(dispatcher: Dispatcher, store: MemoryRecordStore) -> None:
    args = {"operator_id": OPERATOR_ID, "supplier_id": course_id(3)}
    await dispatcher.execute("has_negotiated_rate", args)
    again = await dispatcher.execute("has_negotiated_rate", args)
    assert not again.cached
    assert store.call_count == 2


@pytest.mark.asyncio
async def test_equivalent_arguments_share_cache_entry(dispatcher: Dispatcher, store: MemoryRecordStore) -> None:
    await dispatcher.execute("search_courses", {"region": "Ireland", "limit": 20})
    hit = await dispatcher.execute("search_courses", {"limit": "20", "region": "Ireland"})
    assert hit.cached
    assert store.call_count == 1


# ═════════════════════════════════════════════════════════════════════════════
# Validation happens before any store access
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize(("name", "args"), INVALID_CALLS)
async def test_invalid_arguments_never_reach_store(dispatcher: Dispatcher, store: MemoryRecordStore, name: str, args: dict) -> None:
    result = await dispatcher.execute(name, args)
    assert not result.success
    assert result.error_code == ErrorCode.INVALID_PARAMS
    assert result.error.startswith("invalid argument")
    assert store.call_count == 0


@pytest.mark.asyncio
async def test_message_names_invalid_field(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("get_recommended_courses", {"region": "Kerry", "budget_tier": "platinum"})
    assert "budget_tier" in result.error


@pytest.mark.asyncio
@pytest.mark.parametrize("args", [["region"], "region=Kerry", 42])
async def test_non_object_arguments_rejected(dispatcher: Dispatcher, store: MemoryRecordStore, args: object) -> None:
    result = await dispatcher.execute("search_courses", args)  # type: ignore[arg-type]
    assert result.error_code == ErrorCode.INVALID_PARAMS
    assert store.call_count == 0


@pytest.mark.asyncio
async def test_missing_arguments_mean_empty_object(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("search_courses", None)
    assert result.success
    assert result.metadata["count"] == 20


@pytest.mark.asyncio
async def test_unknown_tool(dispatcher: Dispatcher, store: MemoryRecordStore) -> None:
    result = await dispatcher.execute("does_not_exist", {"x": 1})
    assert not result.success
    assert result.error == "unknown tool: does_not_exist"
    assert result.error_code == ErrorCode.UNKNOWN_TOOL
    assert "duration_ms" in result.metadata
    assert store.call_count == 0


# ═════════════════════════════════════════════════════════════════════════════
# Handler failures become envelopes
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_store_failure_becomes_envelope() -> None:
    store = make_store(fail_with=StoreError("Database error: connection reset"))
    result = await Dispatcher(build_registry(), store, MemoryCache()).execute("search_courses", {})
    assert not result.success
    assert result.error == "Database error: connection reset"
    assert result.error_code == ErrorCode.STORE_ERROR


@pytest.mark.asyncio
async def test_not_found_lookup(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("get_course_details", {"course_id": "00000000-0000-4000-8000-000000000000"})
    assert not result.success
    assert result.error_code == ErrorCode.NOT_FOUND


@pytest.mark.asyncio
async def test_failures_are_not_cached(dispatcher: Dispatcher) -> None:
    args = {"course_id": "00000000-0000-4000-8000-000000000000"}
    await dispatcher.execute("get_course_details", args)
    again = await dispatcher.execute("get_course_details", args)
    assert not again.cached
    assert not again.success


class _NoParams(BaseModel):
    pass


def _registry_with(handler) -> ToolRegistry:
    return ToolRegistry([
        ToolDefinition(name="probe", description="Test probe tool", params_schema=_NoParams, handler=handler),
    ])


@pytest.mark.asyncio
async def test_unexpected_exception_is_classified(captured_logs: CaptureRenderer) -> None:
    async def boom(params: _NoParams, ctx: object) -> None:
        raise ConnectionError("connection refused by upstream")

    result = await Dispatcher(_registry_with(boom), MemoryRecordStore()).execute("probe", {})
    assert not result.success
    assert result.error == "connection refused by upstream"
    assert result.error_code == ErrorCode.NETWORK_ERROR
    assert "handler raised" in captured_logs.events("error")


@pytest.mark.asyncio
async def test_deadline_stops_slow_handler() -> None:
    async def slow(params: _NoParams, ctx: object) -> None:
        await asyncio.sleep(5)

    dispatcher = Dispatcher(_registry_with(slow), MemoryRecordStore(), default_timeout=10)
    result = await dispatcher.execute("probe", {}, timeout=0.05)
    assert not result.success
    assert result.error_code == ErrorCode.TIMEOUT
    assert result.metadata["duration_ms"] < 5000


@pytest.mark.asyncio
async def test_handler_sees_remaining_deadline() -> None:
    seen: list[float | None] = []

    async def record(params: _NoParams, ctx) -> list:
        seen.append(ctx.timeout)
        return []

    await Dispatcher(_registry_with(record), MemoryRecordStore(), default_timeout=3).execute("probe", {})
    assert seen[0] is not None and 0 < seen[0] <= 3


@pytest.mark.asyncio
async def test_cache_write_failure_does_not_change_result(captured_logs: CaptureRenderer) -> None:
    store = make_store()
    result = await Dispatcher(build_registry(), store, FailingCache()).execute("search_courses", {"region": "Ireland"})
    assert result.success
    assert result.metadata["count"] == 3
    assert "cache set failed" in captured_logs.events("warning")


@pytest.mark.asyncio
async def test_corrupt_cache_entry_is_a_miss(captured_logs: CaptureRenderer) -> None:
    store = make_store()
    cache = MemoryCache()
    dispatcher = Dispatcher(build_registry(), store, cache)
    key = dispatcher.cache_key(dispatcher.registry["search_courses"], SearchCoursesParams(region="Ireland"))
    await cache.set(key, "not json{")

    result = await dispatcher.execute("search_courses", {"region": "Ireland"})
    assert result.success
    assert not result.cached
    assert result.metadata["count"] == 3
    assert len(store.queries) == 1
    assert "cache entry unreadable" in captured_logs.events("warning")

    healed = await dispatcher.execute("search_courses", {"region": "Ireland"})
    assert healed.cached
    assert healed.data == result.data


# ═════════════════════════════════════════════════════════════════════════════
# Observability
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_outcomes_logged_with_duration(dispatcher: Dispatcher, captured_logs: CaptureRenderer) -> None:
    await dispatcher.execute("search_courses", {"region": "Ireland"})
    await dispatcher.execute("get_recommended_courses", {"region": "Kerry", "budget_tier": "platinum"})

    ok, failed = [e for e in captured_logs.entries if e.event.startswith("tool execution")]
    assert ok.context["tool"] == "search_courses"
    assert ok.context["success"] is True
    assert "duration_ms" in ok.context
    assert failed.context["success"] is False
    # Argument keys only, never values
    assert failed.context["arg_keys"] == ["budget_tier", "region"]
    assert "platinum" not in str(failed.context)


@pytest.mark.asyncio
async def test_every_result_carries_duration(dispatcher: Dispatcher) -> None:
    for name, args in [*VALID_CALLS, *INVALID_CALLS, ("nope", {})]:
        result = await dispatcher.execute(name, args)
        assert isinstance(result.metadata["duration_ms"], float)
