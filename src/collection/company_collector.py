"""
AI-assisted company creation.

Given only a name, asks Claude for the company's description, website,
headquarters and founding year and stores the result as a new Company.
"""
import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from model.profiles.company import Company
from schema.company import CompanyOut
from src.collection.claude_client import ClaudeClient
from src.collection.prompts import SYSTEM_PROMPT, generate_company_info_prompt
from src.exceptions import ConflictError, ServiceError, ValidationError
from src.route_helpers import is_placeholder_name, name_equals_ci

logger = logging.getLogger(__name__)


def _text(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text or text.lower() in ("null", "none", "unknown", "n/a"):
        return None
    return text[:max_length] if max_length else text


def enrich_company(db: Session, company_name: str, client: Optional[ClaudeClient] = None) -> Company:
    """
    Create a company from an AI-generated profile.

    The stored name is always the requested name, whatever the model answers.

    Raises:
        ValidationError: blank name
        ConflictError: company already exists (details["company"] holds it)
        ServiceError: the AI service failed or answered something unusable
    """
    if is_placeholder_name(company_name):
        raise ValidationError("Company name is required")
    name = company_name.strip()

    existing = db.query(Company).filter(name_equals_ci(Company.name, name)).first()
    if existing:
        raise ConflictError(
            "Company already exists",
            details={"company": CompanyOut.model_validate(existing).model_dump(mode="json")},
        )

    client = client or ClaudeClient()
    data = client.call_json(generate_company_info_prompt(name), system=SYSTEM_PROMPT)
    if not isinstance(data, dict):
        raise ServiceError("Failed to parse AI response")

    company = Company(
        name=name,
        description=_text(data.get("description")),
        website=_text(data.get("website"), 1024),
        headquarters=_text(data.get("headquarters"), 255),
        founded=_text(data.get("founded"), 16),
    )
    db.add(company)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Company already exists")
    db.refresh(company)

    logger.info("Created company %s (%s) from AI profile", company.company_id, company.name)
    return company
