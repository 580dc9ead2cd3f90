"""
AI-assisted plan scraping.

Asks Claude for the plans and quick move-ins a company offers in one
community and feeds the answer through the regular plan upsert, so price
changes are recorded the same way as for manual ingestion.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from src.collection.claude_client import ClaudeClient
from src.collection.prompts import SYSTEM_PROMPT, generate_plan_collection_prompt
from src.exceptions import ServiceError, ValidationError
from src.plan_ingest import upsert_plans
from src.route_helpers import is_placeholder_name, resolve_company

logger = logging.getLogger(__name__)


def _extract_plans(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get("plans", [])
    if not isinstance(data, list):
        raise ServiceError("Failed to parse AI response")
    return [item for item in data if isinstance(item, dict)]


def scrape_plans(
    db: Session, company_ref: str, community_name: str, client: Optional[ClaudeClient] = None
) -> Dict[str, Any]:
    """
    Collect plans for a known company in a community and upsert them.

    Records are stamped with the company's stored name and the requested
    community name before ingestion.

    Raises:
        ValidationError: blank company or community
        NotFoundError: unknown company
        ServiceError: the AI service failed or answered something unusable
    """
    if is_placeholder_name(community_name):
        raise ValidationError("Community name is required")
    company = resolve_company(db, company_ref)
    community_name = community_name.strip()

    client = client or ClaudeClient()
    data = client.call_json(generate_plan_collection_prompt(company.name, community_name), system=SYSTEM_PROMPT)

    plans = []
    for item in _extract_plans(data):
        record = dict(item)
        record["company"] = company.name
        record["community"] = community_name
        plans.append(record)

    count = upsert_plans(db, plans) if plans else 0
    logger.info("Scrape for %s in %s: %d plan(s) returned, %d written", company.name, community_name, len(plans), count)
    return {"company": company.name, "community": community_name, "plans": plans, "count": count}
