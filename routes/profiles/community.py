from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from config.db import get_db
from schema.community import (
    CommunityCreate,
    CommunityDeleteOut,
    CommunityOut,
    MembershipCreate,
    MembershipRemoveOut,
    PriceChartOut,
)
from src.catalog import (
    create_community,
    delete_all_communities,
    delete_community,
    list_communities,
)
from src.community_view import build_price_chart
from src.exceptions import ValidationError
from src.membership import add_company_to_community, remove_company_from_community


router = APIRouter()  # app mounts with /v1/communities


# --------------------------------- CRUD -------------------------------------

@router.get("", response_model=List[CommunityOut])
def list_communities_route(*, db: Session = Depends(get_db)):
    """Persisted communities plus communities that only appear on plan records."""
    return [CommunityOut(**c) for c in list_communities(db)]


@router.post("", response_model=CommunityOut, status_code=status.HTTP_201_CREATED)
def create_community_route(*, db: Session = Depends(get_db), payload: CommunityCreate):
    return CommunityOut(**create_community(db, payload))


@router.delete("", response_model=CommunityDeleteOut)
def delete_communities_route(
    *,
    db: Session = Depends(get_db),
    id: Optional[str] = Query(None, description="community_id (CMY-xxx) to delete"),
    all: bool = Query(False, description="Delete every community"),
):
    if all:
        deleted = delete_all_communities(db)
        noun = "community" if deleted == 1 else "communities"
        return CommunityDeleteOut(message=f"Successfully deleted {deleted} {noun}", deleted_count=deleted)
    if not id:
        raise ValidationError("Community ID is required")
    return _delete_one(db, id)


@router.delete("/{community_id}", response_model=CommunityDeleteOut)
def delete_community_route(*, db: Session = Depends(get_db), community_id: str):
    return _delete_one(db, community_id)


def _delete_one(db: Session, community_id: str) -> CommunityDeleteOut:
    community = delete_community(db, community_id)
    return CommunityDeleteOut(
        message="Community deleted successfully", deleted_count=1, community=CommunityOut(**community)
    )


# ------------------------------ Nested: Companies ---------------------------

@router.post("/{community_ref}/companies", response_model=CommunityOut)
def add_company_route(*, db: Session = Depends(get_db), community_ref: str, payload: MembershipCreate):
    """Add a company (by id or name) to a community (by id or name; created if missing)."""
    return CommunityOut(**add_company_to_community(db, payload.company_ref, community_ref))


@router.delete("/{community_ref}/companies", response_model=MembershipRemoveOut)
def remove_company_route(
    *,
    db: Session = Depends(get_db),
    community_ref: str,
    company_id: Optional[str] = Query(None),
    company: Optional[str] = Query(None, description="Company name"),
):
    company_ref = company_id or company
    if not company_ref or not company_ref.strip():
        raise ValidationError("Company ID or name is required")
    community = remove_company_from_community(db, company_ref, community_ref)
    return MembershipRemoveOut(
        message="Company removed from community successfully", community=CommunityOut(**community)
    )


# -------------------------------- Nested: Chart -----------------------------

@router.get("/{community_name}/chart", response_model=PriceChartOut)
def price_chart_route(
    *,
    db: Session = Depends(get_db),
    community_name: str,
    type: str = Query("now", description="plan | now"),
):
    """Price vs. square footage per company, for charting."""
    return PriceChartOut(**build_price_chart(db, community_name, type))
