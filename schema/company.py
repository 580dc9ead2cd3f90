from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, constr


class CompanyBase(BaseModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    description: Optional[str] = None
    website: Optional[constr(strip_whitespace=True, max_length=1024)] = None
    headquarters: Optional[constr(strip_whitespace=True, max_length=255)] = None
    founded: Optional[constr(strip_whitespace=True, max_length=16)] = None


class CompanyCreate(CompanyBase):
    pass


class CompanyAICreate(BaseModel):
    """Only the name is supplied; the rest comes from the AI service."""
    company_name: constr(strip_whitespace=True, min_length=1, max_length=255)


class CompanyOut(CompanyBase):
    company_id: str
    total_communities: int = 0
    total_plans: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CompanyDeleteOut(BaseModel):
    message: str
    company: CompanyOut
