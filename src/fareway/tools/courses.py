"""Golf course lookups against the ``golf_courses`` table."""

from __future__ import annotations

from fareway.io.store import Filter, Row
from fareway.runtime.context import ToolContext

from .params import (
    BudgetTier,
    FindCourseByNameParams,
    GetCourseDetailsParams,
    GetRecommendedCoursesParams,
    SearchCoursesParams,
)

TABLE = "golf_courses"
PRICE_FIELD = "green_fee_standard_cents"

SUMMARY_COLUMNS = (
    "id", "name", "region", "course_type", "rating", "difficulty_level",
    PRICE_FIELD, "description", "location", "features", "created_at",
)
RECOMMEND_COLUMNS = (
    "id", "name", "region", "course_type", "rating", "difficulty_level",
    PRICE_FIELD, "description", "features",
)
NAME_COLUMNS = ("id", "name", "region", "course_type", PRICE_FIELD)

# Inclusive green-fee bounds in cents; the lower tier owns each shared edge
TIER_BOUNDS: dict[BudgetTier, tuple[int | None, int | None]] = {
    "budget": (None, 15_000),
    "standard": (15_001, 35_000),
    "luxury": (35_001, None),
}


def price_filters(field: str, low: int | None, high: int | None) -> list[Filter]:
    """Inclusive range filters, skipping open ends."""
    filters = []
    if low is not None:
        filters.append(Filter.gte(field, low))
    if high is not None:
        filters.append(Filter.lte(field, high))
    return filters


def recommendation_metadata(params: GetRecommendedCoursesParams) -> dict[str, object]:
    return {"budget_tier": params.budget_tier}


async def search_courses(params: SearchCoursesParams, ctx: ToolContext) -> list[Row]:
    filters = price_filters(PRICE_FIELD, params.min_price_cents, params.max_price_cents)
    if params.region:
        filters.append(Filter.ilike("region", params.region))
    if params.course_type:
        filters.append(Filter.eq("course_type", params.course_type))
    return await ctx.store.select(
        TABLE, columns=SUMMARY_COLUMNS, filters=filters,
        order_by="rating", descending=True, limit=params.limit, timeout=ctx.timeout,
    )


async def get_course_details(params: GetCourseDetailsParams, ctx: ToolContext) -> Row:
    return await ctx.store.select_one(TABLE, str(params.course_id), timeout=ctx.timeout)


async def get_recommended_courses(params: GetRecommendedCoursesParams, ctx: ToolContext) -> list[Row]:
    """Top-rated courses in a region whose green fee falls inside the budget tier."""
    filters = [Filter.ilike("region", params.region), *price_filters(PRICE_FIELD, *TIER_BOUNDS[params.budget_tier])]
    return await ctx.store.select(
        TABLE, columns=RECOMMEND_COLUMNS, filters=filters,
        order_by="rating", descending=True, limit=params.limit, timeout=ctx.timeout,
    )


async def find_course_by_name(params: FindCourseByNameParams, ctx: ToolContext) -> list[Row]:
    return await ctx.store.select(
        TABLE, columns=NAME_COLUMNS, filters=[Filter.ilike("name", params.course_name)],
        limit=params.limit, timeout=ctx.timeout,
    )
