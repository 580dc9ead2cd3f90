from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from config.db import get_db
from schema.plan import PlanHistoryOut, PlanOut, PlanUpsertOut
from src.plan_ingest import list_plans, price_history_for_plan, upsert_plans


router = APIRouter()  # app mounts with /v1/plans


@router.get("", response_model=List[PlanOut])
def list_plans_route(
    *,
    db: Session = Depends(get_db),
    community: Optional[str] = Query(None, description="Exact community name"),
    company: Optional[str] = Query(None, description="Exact company name"),
    type: Optional[str] = Query(None, description="plan | now"),
):
    """Plans, newest first, with price_changed_recently for changes in the last 24h."""
    return [PlanOut(**p) for p in list_plans(db, community=community, company=company, plan_type=type)]


@router.post("", response_model=PlanUpsertOut, status_code=status.HTTP_201_CREATED)
def upsert_plans_route(
    *,
    db: Session = Depends(get_db),
    payload: Union[List[Dict[str, Any]], Dict[str, Any]] = Body(...),
):
    """Create or update one plan or a list of plans. Invalid records are skipped."""
    count = upsert_plans(db, payload)
    return PlanUpsertOut(message="Plans processed successfully", count=count)


@router.get("/{plan_id}/history", response_model=PlanHistoryOut)
def plan_history_route(*, db: Session = Depends(get_db), plan_id: int):
    return PlanHistoryOut(**price_history_for_plan(db, plan_id))
