from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator

_CENTS = Decimal("0.01")

# Column ranges: Numeric(12,2), Numeric(10,2), 32-bit INT
MAX_PRICE = Decimal("9999999999.99")
MAX_PRICE_PER_SQFT = Decimal("99999999.99")
MAX_SQFT = 2**31 - 1

_NUMBER_JUNK = re.compile(r"[,$\s]|sq\.?\s*ft\.?|sqft", re.IGNORECASE)


def _clean_number(value: Any) -> Any:
    """'$425,990' -> '425990'; leaves non-strings alone."""
    if isinstance(value, str):
        cleaned = _NUMBER_JUNK.sub("", value)
        return cleaned or None
    return value


def _to_decimal(value: Any) -> Optional[Decimal]:
    value = _clean_number(value)
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value)).quantize(_CENTS)
    except (InvalidOperation, ValueError):
        raise ValueError(f"not a number: {value!r}")


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------
class PlanIn(BaseModel):
    """One plan record as received by the upsert.

    Only fields present in the input are applied to an existing plan
    (use model_dump(exclude_unset=True)).
    """
    model_config = ConfigDict(extra="ignore")

    plan_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    price: Decimal = Field(gt=0, le=MAX_PRICE)
    company: constr(strip_whitespace=True, min_length=1, max_length=255)
    community: constr(strip_whitespace=True, min_length=1, max_length=255)
    type: Literal["plan", "now"] = "plan"

    sqft: Optional[int] = Field(default=None, ge=0, le=MAX_SQFT)
    stories: Optional[str] = None
    price_per_sqft: Optional[Decimal] = Field(default=None, ge=0, le=MAX_PRICE_PER_SQFT)
    beds: Optional[str] = None
    baths: Optional[str] = None
    address: Optional[str] = None
    design_number: Optional[str] = None

    @field_validator("price", "price_per_sqft", mode="before")
    @classmethod
    def _parse_money(cls, v):
        return _to_decimal(v)

    @field_validator("sqft", mode="before")
    @classmethod
    def _parse_sqft(cls, v):
        v = _clean_number(v)
        if isinstance(v, (str, float)):
            try:
                return int(float(v))
            except (ValueError, OverflowError, TypeError):
                raise ValueError(f"not a number: {v!r}")
        return v

    @field_validator("stories", "beds", "baths", "design_number", mode="before")
    @classmethod
    def _numbers_as_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return f"{v:g}"
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v):
        if v is None:
            return "plan"
        if isinstance(v, str):
            return v.strip().lower()
        return v


class PlanUpsertOut(BaseModel):
    message: str
    count: int


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------
class PlanOut(BaseModel):
    id: int
    plan_name: str
    price: float
    sqft: Optional[int] = None
    stories: Optional[str] = None
    price_per_sqft: Optional[float] = None
    last_updated: datetime
    company: str
    community: str
    type: str
    beds: Optional[str] = None
    baths: Optional[str] = None
    address: Optional[str] = None
    design_number: Optional[str] = None
    price_changed_recently: bool = False

    model_config = ConfigDict(from_attributes=True)


class PriceHistoryOut(BaseModel):
    plan_id: int
    old_price: float
    new_price: float
    changed_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlanHistoryOut(BaseModel):
    plan: PlanOut
    history: List[PriceHistoryOut] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# AI scrape
# ---------------------------------------------------------------------------
class ScrapeRequest(BaseModel):
    company: constr(strip_whitespace=True, min_length=1, max_length=255)
    community: constr(strip_whitespace=True, min_length=1, max_length=255)


class ScrapeOut(BaseModel):
    company: str
    community: str
    plans: List[dict] = Field(default_factory=list)
    count: int = 0
