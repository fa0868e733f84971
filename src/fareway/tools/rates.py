"""Negotiated operator/supplier rates from ``operator_supplier_rates``."""

from __future__ import annotations

from typing import Any

from fareway.io.store import Filter, Row
from fareway.runtime.context import ToolContext

from .params import GetOperatorSuppliersParams, GetSupplierRatesParams, HasNegotiatedRateParams

TABLE = "operator_supplier_rates"

RATE_COLUMNS = (
    "id", "operator_id", "supplier_id", "supplier_type", "rate_cents",
    "discount_percentage", "valid_from", "valid_until", "notes",
)
SUPPLIER_COLUMNS = ("supplier_id", "supplier_type", "rate_cents", "discount_percentage")


async def get_supplier_rates(params: GetSupplierRatesParams, ctx: ToolContext) -> list[Row]:
    filters = [Filter.eq("operator_id", str(params.operator_id))]
    if params.supplier_type and params.supplier_type != "any":
        filters.append(Filter.eq("supplier_type", params.supplier_type))
    return await ctx.store.select(TABLE, columns=RATE_COLUMNS, filters=filters, timeout=ctx.timeout)


async def has_negotiated_rate(params: HasNegotiatedRateParams, ctx: ToolContext) -> dict[str, Any]:
    """Point check for a rate between one operator and one supplier.

    Absence is a normal answer (``has_rate: false``); store failures propagate.
    """
    rows = await ctx.store.select(
        TABLE,
        columns=("id", "rate_cents", "discount_percentage"),
        filters=[
            Filter.eq("operator_id", str(params.operator_id)),
            Filter.eq("supplier_id", str(params.supplier_id)),
        ],
        limit=1,
        timeout=ctx.timeout,
    )
    if not rows:
        return {"has_rate": False}
    rate = rows[0]
    return {"has_rate": True, "rate_cents": rate.get("rate_cents"), "discount_percentage": rate.get("discount_percentage")}


async def get_operator_suppliers(params: GetOperatorSuppliersParams, ctx: ToolContext) -> list[Row]:
    return await ctx.store.select(
        TABLE, columns=SUPPLIER_COLUMNS, filters=[Filter.eq("operator_id", str(params.operator_id))],
        timeout=ctx.timeout,
    )
