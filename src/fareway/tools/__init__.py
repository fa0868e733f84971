"""The fixed tool catalogue.

``build_registry()`` returns a fresh registry holding every tool in a stable
order; transports list tools in this order.
"""

from __future__ import annotations

from fareway.foundation.registry import ToolDefinition, ToolRegistry

from . import accommodations, courses, rates
from .params import (
    FindCourseByNameParams,
    GetAccommodationDetailsParams,
    GetCourseDetailsParams,
    GetGolfResortsParams,
    GetOperatorSuppliersParams,
    GetRecommendedCoursesParams,
    GetSupplierRatesParams,
    HasNegotiatedRateParams,
    SearchAccommodationsParams,
    SearchCoursesParams,
)

RATE_CACHE_TTL = 600.0

CATALOGUE: tuple[ToolDefinition, ...] = (
    # Courses
    ToolDefinition(
        name="search_courses",
        description=(
            "Search for golf courses by region, type, and price range. "
            "Returns a list of courses with basic information, best rated first."
        ),
        params_schema=SearchCoursesParams,
        handler=courses.search_courses,
    ),
    ToolDefinition(
        name="get_course_details",
        description="Get comprehensive details about a specific golf course including pricing, features, and contact information.",
        params_schema=GetCourseDetailsParams,
        handler=courses.get_course_details,
    ),
    ToolDefinition(
        name="get_recommended_courses",
        description=(
            "Get recommended courses for a region based on budget tier (budget/standard/luxury). "
            "Returns top-rated courses in the tier's price range."
        ),
        params_schema=GetRecommendedCoursesParams,
        handler=courses.get_recommended_courses,
        result_metadata=courses.recommendation_metadata,
    ),
    ToolDefinition(
        name="find_course_by_name",
        description="Find courses by name using fuzzy search. Useful when a specific course name is mentioned.",
        params_schema=FindCourseByNameParams,
        handler=courses.find_course_by_name,
        cacheable=False,
    ),
    # Accommodations
    ToolDefinition(
        name="search_accommodations",
        description="Search for hotels and accommodations by region and nightly price range.",
        params_schema=SearchAccommodationsParams,
        handler=accommodations.search_accommodations,
    ),
    ToolDefinition(
        name="get_accommodation_details",
        description="Get detailed information about a specific accommodation including rooms, amenities, and rates.",
        params_schema=GetAccommodationDetailsParams,
        handler=accommodations.get_accommodation_details,
    ),
    ToolDefinition(
        name="get_golf_resorts",
        description="Find golf resorts (accommodations with on-site golf courses) suited to stay-and-play packages.",
        params_schema=GetGolfResortsParams,
        handler=accommodations.get_golf_resorts,
    ),
    # Rates & suppliers
    ToolDefinition(
        name="get_supplier_rates",
        description="Get a tour operator's negotiated rates with suppliers (courses, hotels, transport).",
        params_schema=GetSupplierRatesParams,
        handler=rates.get_supplier_rates,
        cache_ttl=RATE_CACHE_TTL,
    ),
    ToolDefinition(
        name="has_negotiated_rate",
        description="Quick check whether an operator has a negotiated rate with a specific supplier.",
        params_schema=HasNegotiatedRateParams,
        handler=rates.has_negotiated_rate,
        cacheable=False,
    ),
    ToolDefinition(
        name="get_operator_suppliers",
        description="List all of an operator's supplier relationships and negotiated rates.",
        params_schema=GetOperatorSuppliersParams,
        handler=rates.get_operator_suppliers,
        cache_ttl=RATE_CACHE_TTL,
    ),
)


def build_registry() -> ToolRegistry:
    return ToolRegistry(CATALOGUE)


__all__ = ["CATALOGUE", "RATE_CACHE_TTL", "build_registry"]
