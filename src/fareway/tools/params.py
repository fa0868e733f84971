"""Argument models for the tool catalogue.

Each model is both the validator and the source of the advertised input schema.
Unknown keys are ignored; numeric strings coerce; enums are closed.
"""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

CourseType = Literal["links", "parkland", "resort", "heathland"]
BudgetTier = Literal["budget", "standard", "luxury"]
SupplierType = Literal["golf_course", "accommodation", "transport", "any"]

MAX_LIMIT = 100


class _Params(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)


class SearchCoursesParams(_Params):
    region: str | None = Field(None, min_length=1, description="Region name, matched case-insensitively (e.g. 'Kerry')")
    course_type: CourseType | None = Field(None, description="Course type")
    min_price_cents: int | None = Field(None, ge=0, description="Minimum green fee in cents (inclusive)")
    max_price_cents: int | None = Field(None, ge=0, description="Maximum green fee in cents (inclusive)")
    limit: int = Field(20, ge=1, le=MAX_LIMIT, description="Maximum number of results")


class GetCourseDetailsParams(_Params):
    course_id: UUID = Field(..., description="Course UUID")


class GetRecommendedCoursesParams(_Params):
    region: str = Field(..., min_length=1, description="Region name")
    budget_tier: BudgetTier = Field(..., description="Budget tier: budget (<= EUR 150), standard (EUR 150-350), luxury (> EUR 350)")
    limit: int = Field(10, ge=1, le=MAX_LIMIT, description="Maximum number of results")


class FindCourseByNameParams(_Params):
    course_name: str = Field(..., min_length=1, description="Full or partial course name")
    limit: int = Field(10, ge=1, le=MAX_LIMIT, description="Maximum number of results")


class SearchAccommodationsParams(_Params):
    region: str | None = Field(None, min_length=1, description="Region name, matched case-insensitively")
    min_price_cents: int | None = Field(None, ge=0, description="Minimum nightly rate in cents (inclusive)")
    max_price_cents: int | None = Field(None, ge=0, description="Maximum nightly rate in cents (inclusive)")
    limit: int = Field(20, ge=1, le=MAX_LIMIT, description="Maximum number of results")


class GetAccommodationDetailsParams(_Params):
    accommodation_id: UUID = Field(..., description="Accommodation UUID")


class GetGolfResortsParams(_Params):
    region: str | None = Field(None, min_length=1, description="Region name, matched case-insensitively")


class GetSupplierRatesParams(_Params):
    operator_id: UUID = Field(..., description="Tour operator UUID")
    supplier_type: SupplierType | None = Field(None, description="Supplier type; 'any' or omitted returns all")


class HasNegotiatedRateParams(_Params):
    operator_id: UUID = Field(..., description="Tour operator UUID")
    supplier_id: UUID = Field(..., description="Supplier UUID")


class GetOperatorSuppliersParams(_Params):
    operator_id: UUID = Field(..., description="Tour operator UUID")
