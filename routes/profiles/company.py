from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from config.db import get_db
from schema.company import CompanyAICreate, CompanyCreate, CompanyDeleteOut, CompanyOut
from src.catalog import create_company, delete_company, list_companies
from src.collection.claude_client import ClaudeClient
from src.collection.company_collector import enrich_company


router = APIRouter()  # app mounts with /v1/companies


def get_claude_client() -> ClaudeClient:
    return ClaudeClient()


@router.get("", response_model=List[CompanyOut])
def list_companies_route(*, db: Session = Depends(get_db)):
    return [CompanyOut.model_validate(c) for c in list_companies(db)]


@router.post("", response_model=CompanyOut, status_code=status.HTTP_201_CREATED)
def create_company_route(*, db: Session = Depends(get_db), payload: CompanyCreate):
    return CompanyOut.model_validate(create_company(db, payload))


@router.post("/ai", response_model=CompanyOut, status_code=status.HTTP_201_CREATED)
def create_company_with_ai(
    *,
    db: Session = Depends(get_db),
    payload: CompanyAICreate,
    client: ClaudeClient = Depends(get_claude_client),
):
    """Create a company from its name; the profile fields come from Claude."""
    return CompanyOut.model_validate(enrich_company(db, payload.company_name, client=client))


@router.delete("/{company_id}", response_model=CompanyDeleteOut)
def delete_company_route(*, db: Session = Depends(get_db), company_id: str):
    company = delete_company(db, company_id)
    return CompanyDeleteOut(message="Company deleted successfully", company=CompanyOut(**company))
