"""Shared fixtures: seeded in-memory store, gateway wiring, captured logs."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from fareway.foundation.config import GatewaySettings, StoreSettings
from fareway.io.cache import MemoryCache
from fareway.io.store import MemoryRecordStore
from fareway.runtime import Dispatcher
from fareway.runtime.observability import CaptureRenderer, configure_logging, set_renderer
from fareway.tools import build_registry

OPERATOR_ID = "6f1c2a8e-0d4b-4c55-9a3e-1b2c3d4e5f60"
HOTEL_ID = "a0000000-0000-4000-8000-000000000001"
RESORT_ID = "a0000000-0000-4000-8000-000000000002"

_IRISH_REGIONS = {3: "South West Ireland", 11: "ireland north west", 19: "IRELAND East"}


def course_id(i: int) -> str:
    return f"c0000000-0000-4000-8000-{i:012d}"


def make_courses() -> list[dict]:
    """25 courses; exactly three have a region containing 'ireland' (any case)."""
    return [
        {
            "id": course_id(i),
            "name": f"Course {i:02d}",
            "region": _IRISH_REGIONS.get(i, "Scotland" if i % 2 else "Algarve"),
            "course_type": ("links", "parkland", "resort", "heathland")[i % 4],
            "rating": round(3.0 + (i % 5) * 0.4, 1),
            "difficulty_level": "intermediate",
            "green_fee_standard_cents": 5_000 + i * 2_000,
            "description": f"Course number {i}",
            "location": None,
            "features": ["driving range"],
            "created_at": "2024-01-01T00:00:00Z",
        }
        for i in range(25)
    ]


def make_accommodations() -> list[dict]:
    return [
        {
            "id": HOTEL_ID, "name": "Harbour Hotel", "type": "hotel", "region": "Kerry",
            "rating": 4.1, "standard_rate_cents": 18_000, "description": "Town centre",
            "amenities": ["bar"], "location": None, "is_golf_resort": False,
        },
        {
            "id": RESORT_ID, "name": "Links Resort", "type": "resort", "region": "Kerry",
            "rating": 4.7, "standard_rate_cents": 42_000, "description": "On-site championship links",
            "amenities": ["spa", "golf"], "location": None, "is_golf_resort": True,
        },
    ]


def make_rates() -> list[dict]:
    return [
        {
            "id": "r1", "operator_id": OPERATOR_ID, "supplier_id": course_id(3), "supplier_type": "golf_course",
            "rate_cents": 9_000, "discount_percentage": 15, "valid_from": "2025-01-01",
            "valid_until": "2025-12-31", "notes": None,
        },
        {
            "id": "r2", "operator_id": OPERATOR_ID, "supplier_id": HOTEL_ID, "supplier_type": "accommodation",
            "rate_cents": 15_500, "discount_percentage": 10, "valid_from": "2025-01-01",
            "valid_until": None, "notes": "breakfast included",
        },
    ]


def make_store(**kwargs: object) -> MemoryRecordStore:
    return MemoryRecordStore(
        {
            "golf_courses": make_courses(),
            "accommodations": make_accommodations(),
            "operator_supplier_rates": make_rates(),
        },
        **kwargs,
    )


def make_settings(**overrides: object) -> GatewaySettings:
    values: dict[str, object] = {
        "environment": "test",
        "store": StoreSettings(url="https://fareway.supabase.test", service_key="service-key"),
    }
    values.update(overrides)
    return GatewaySettings(**values)


@pytest.fixture(autouse=True)
def captured_logs() -> Iterator[CaptureRenderer]:
    """Collect log entries instead of printing them."""
    capture = CaptureRenderer()
    set_renderer(capture)
    yield capture
    configure_logging("none")


@pytest.fixture
def store() -> MemoryRecordStore:
    return make_store()


@pytest.fixture
def dispatcher(store: MemoryRecordStore) -> Dispatcher:
    return Dispatcher(build_registry(), store, MemoryCache())


@pytest.fixture
def uncached_dispatcher(store: MemoryRecordStore) -> Dispatcher:
    return Dispatcher(build_registry(), store)
