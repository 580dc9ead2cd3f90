from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.db import get_db
from routes.profiles.company import get_claude_client
from schema.plan import ScrapeOut, ScrapeRequest
from src.collection.claude_client import ClaudeClient
from src.collection.plan_collector import scrape_plans


router = APIRouter()  # app mounts with /v1/scrape


@router.post("", response_model=ScrapeOut)
def scrape_plans_route(
    *,
    db: Session = Depends(get_db),
    payload: ScrapeRequest,
    client: ClaudeClient = Depends(get_claude_client),
):
    """Ask Claude for a company's current plans in a community and ingest them."""
    return ScrapeOut(**scrape_plans(db, payload.company, payload.community, client=client))
