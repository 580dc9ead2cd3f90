from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, constr, model_validator


# ------------------------------------------------------------
# Community
# ------------------------------------------------------------
class CommunityCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[constr(strip_whitespace=True, max_length=255)] = None


class CommunityOut(BaseModel):
    """One entry of the unified community list.

    Plan-derived entries (from_plans=True) have no community_id: they exist
    only as free-text community names on plan records.
    """
    community_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    companies: List[str] = Field(default_factory=list)  # display names
    from_plans: bool = False


class CommunityDeleteOut(BaseModel):
    message: str
    deleted_count: int = 1
    community: Optional[CommunityOut] = None


# ------------------------------------------------------------
# Membership
# ------------------------------------------------------------
class MembershipCreate(BaseModel):
    """Either the company's id or its name; id wins when both are given."""
    company_id: Optional[constr(strip_whitespace=True, max_length=255)] = None
    company_name: Optional[constr(strip_whitespace=True, max_length=255)] = None

    @model_validator(mode="after")
    def _require_reference(self):
        if not self.company_id and not self.company_name:
            raise ValueError("company_id or company_name is required")
        return self

    @property
    def company_ref(self) -> str:
        return self.company_id or self.company_name


class MembershipRemoveOut(BaseModel):
    message: str
    community: CommunityOut


# ------------------------------------------------------------
# Price chart
# ------------------------------------------------------------
class ChartPoint(BaseModel):
    sqft: int
    price: float
    plan_name: str


class ChartSeries(BaseModel):
    company: str
    points: List[ChartPoint] = Field(default_factory=list)


class PriceChartOut(BaseModel):
    community: str
    type: str
    sqft_axis: List[int] = Field(default_factory=list)
    series: List[ChartSeries] = Field(default_factory=list)
