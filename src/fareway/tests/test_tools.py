"""Tests for the tool catalogue handlers against a seeded in-memory store."""

from __future__ import annotations

import pytest

from fareway.foundation.errors import ErrorCode
from fareway.io.store import MemoryRecordStore
from fareway.runtime import Dispatcher
from fareway.tools import build_registry
from fareway.tools.courses import TIER_BOUNDS

from conftest import HOTEL_ID, OPERATOR_ID, RESORT_ID, course_id

EDGE_FEES = (14_999, 15_000, 15_001, 34_999, 35_000, 35_001)


def edge_store() -> MemoryRecordStore:
    return MemoryRecordStore({
        "golf_courses": [
            {"id": f"edge-{fee}", "name": f"Edge {fee}", "region": "Kerry", "rating": 4.0,
             "green_fee_standard_cents": fee}
            for fee in EDGE_FEES
        ],
    })


# ═════════════════════════════════════════════════════════════════════════════
# Courses
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_search_courses_scenario(dispatcher: Dispatcher, store: MemoryRecordStore) -> None:
    """3 of 25 rows match the region; default limit applies and is not exceeded."""
    result = await dispatcher.execute("search_courses", {"region": "Ireland"})

    assert result.success
    assert result.metadata["count"] == 3
    assert len(result.data) <= 20
    assert all("ireland" in row["region"].lower() for row in result.data)
    assert [row["id"] for row in result.data] == [course_id(19), course_id(3), course_id(11)]
    assert store.queries == [("select", "golf_courses")]


@pytest.mark.asyncio
async def test_search_courses_price_bounds_inclusive(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("search_courses", {"min_price_cents": 11_000, "max_price_cents": 15_000})
    fees = sorted(row["green_fee_standard_cents"] for row in result.data)
    assert fees == [11_000, 13_000, 15_000]


@pytest.mark.asyncio
async def test_search_courses_limit_and_type(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("search_courses", {"course_type": "links", "limit": 2})
    assert result.metadata["count"] == 2
    assert {row["course_type"] for row in result.data} == {"links"}
    ratings = [row["rating"] for row in result.data]
    assert ratings == sorted(ratings, reverse=True)


@pytest.mark.asyncio
async def test_get_course_details(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("get_course_details", {"course_id": course_id(3).upper()})
    assert result.success
    assert result.data["region"] == "South West Ireland"


@pytest.mark.asyncio
async def test_find_course_by_name(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("find_course_by_name", {"course_name": "course 2"})
    assert sorted(row["name"] for row in result.data) == ["Course 20", "Course 21", "Course 22", "Course 23", "Course 24"]
    assert set(result.data[0]) == {"id", "name", "region", "course_type", "green_fee_standard_cents"}


def test_tier_bounds_share_no_edge() -> None:
    assert TIER_BOUNDS["budget"] == (None, 15_000)
    assert TIER_BOUNDS["standard"] == (15_001, 35_000)
    assert TIER_BOUNDS["luxury"] == (35_001, None)


@pytest.mark.asyncio
async def test_recommended_courses_report_budget_tier(dispatcher: Dispatcher) -> None:
    args = {"region": "ireland", "budget_tier": "standard"}
    fresh = await dispatcher.execute("get_recommended_courses", args)
    again = await dispatcher.execute("get_recommended_courses", args)
    assert fresh.metadata["budget_tier"] == "standard"
    assert again.cached
    assert again.metadata["budget_tier"] == "standard"
    assert "budget_tier" not in (await dispatcher.execute("search_courses", {})).metadata


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("tier", "expected"),
    [
        ("budget", {14_999, 15_000}),
        ("standard", {15_001, 34_999, 35_000}),
        ("luxury", {35_001}),
    ],
)
async def test_recommended_courses_tiers_partition_fees(tier: str, expected: set[int]) -> None:
    """Each edge fee lands in exactly one tier."""
    dispatcher = Dispatcher(build_registry(), edge_store())
    result = await dispatcher.execute("get_recommended_courses", {"region": "kerry", "budget_tier": tier})
    assert {row["green_fee_standard_cents"] for row in result.data} == expected


@pytest.mark.asyncio
async def test_recommended_courses_region_required(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("get_recommended_courses", {"budget_tier": "budget"})
    assert result.error_code == ErrorCode.INVALID_PARAMS
    assert "region" in result.error


# ═════════════════════════════════════════════════════════════════════════════
# Accommodations
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_search_accommodations(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("search_accommodations", {"region": "KERRY", "max_price_cents": 20_000})
    assert [row["id"] for row in result.data] == [HOTEL_ID]
    assert "is_golf_resort" not in result.data[0]


@pytest.mark.asyncio
async def test_get_accommodation_details(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("get_accommodation_details", {"accommodation_id": RESORT_ID})
    assert result.data["is_golf_resort"] is True


@pytest.mark.asyncio
async def test_get_golf_resorts(dispatcher: Dispatcher) -> None:
    everywhere = await dispatcher.execute("get_golf_resorts", {})
    elsewhere = await dispatcher.execute("get_golf_resorts", {"region": "Algarve"})
    assert [row["id"] for row in everywhere.data] == [RESORT_ID]
    assert elsewhere.success
    assert elsewhere.metadata["count"] == 0


# ═════════════════════════════════════════════════════════════════════════════
# Rates & suppliers
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_supplier_rates_filter_by_type(dispatcher: Dispatcher) -> None:
    every = await dispatcher.execute("get_supplier_rates", {"operator_id": OPERATOR_ID, "supplier_type": "any"})
    omitted = await dispatcher.execute("get_supplier_rates", {"operator_id": OPERATOR_ID})
    hotels = await dispatcher.execute("get_supplier_rates", {"operator_id": OPERATOR_ID, "supplier_type": "accommodation"})
    assert every.metadata["count"] == omitted.metadata["count"] == 2
    assert [row["supplier_id"] for row in hotels.data] == [HOTEL_ID]


@pytest.mark.asyncio
async def test_has_negotiated_rate(dispatcher: Dispatcher) -> None:
    found = await dispatcher.execute("has_negotiated_rate", {"operator_id": OPERATOR_ID, "supplier_id": course_id(3)})
    missing = await dispatcher.execute("has_negotiated_rate", {"operator_id": OPERATOR_ID, "supplier_id": RESORT_ID})
    assert found.data == {"has_rate": True, "rate_cents": 9_000, "discount_percentage": 15}
    assert missing.data == {"has_rate": False}


@pytest.mark.asyncio
async def test_operator_suppliers(dispatcher: Dispatcher) -> None:
    result = await dispatcher.execute("get_operator_suppliers", {"operator_id": OPERATOR_ID})
    assert result.metadata["count"] == 2
    assert set(result.data[0]) == {"supplier_id", "supplier_type", "rate_cents", "discount_percentage"}
