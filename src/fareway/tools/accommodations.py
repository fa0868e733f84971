"""Accommodation lookups against the ``accommodations`` table."""

from __future__ import annotations

from fareway.io.store import Filter, Row
from fareway.runtime.context import ToolContext

from .courses import price_filters
from .params import GetAccommodationDetailsParams, GetGolfResortsParams, SearchAccommodationsParams

TABLE = "accommodations"
PRICE_FIELD = "standard_rate_cents"

SUMMARY_COLUMNS = (
    "id", "name", "type", "region", "rating", PRICE_FIELD, "description", "amenities", "location",
)


async def search_accommodations(params: SearchAccommodationsParams, ctx: ToolContext) -> list[Row]:
    filters = price_filters(PRICE_FIELD, params.min_price_cents, params.max_price_cents)
    if params.region:
        filters.append(Filter.ilike("region", params.region))
    return await ctx.store.select(
        TABLE, columns=SUMMARY_COLUMNS, filters=filters,
        order_by="rating", descending=True, limit=params.limit, timeout=ctx.timeout,
    )


async def get_accommodation_details(params: GetAccommodationDetailsParams, ctx: ToolContext) -> Row:
    return await ctx.store.select_one(TABLE, str(params.accommodation_id), timeout=ctx.timeout)


async def get_golf_resorts(params: GetGolfResortsParams, ctx: ToolContext) -> list[Row]:
    """Accommodations flagged as golf resorts (on-site course), optionally by region."""
    filters = [Filter.eq("is_golf_resort", True)]
    if params.region:
        filters.append(Filter.ilike("region", params.region))
    return await ctx.store.select(TABLE, filters=filters, order_by="rating", descending=True, timeout=ctx.timeout)
