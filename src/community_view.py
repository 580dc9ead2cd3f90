"""
Read models for communities.

The community list shown to users merges two sources: persisted Community
rows and the free-text community names found on plan records. Persisted
communities keep their identity; plan-only names appear as entries with no
community_id and from_plans=True.
"""
import logging
from collections import OrderedDict
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from model.profiles.community import Community
from model.property.plan import Plan, PLAN_TYPES
from src.exceptions import ValidationError
from src.membership import expand_companies, migrate_legacy_refs
from src.route_helpers import is_placeholder_name

logger = logging.getLogger(__name__)


def _append_unique(target: List[str], values) -> None:
    for value in values:
        if value not in target:
            target.append(value)


def plan_community_companies(db: Session) -> "OrderedDict[str, List[str]]":
    """community name -> company names, as written on plan records.

    Names are compared as stored (no case folding).
    """
    rows = (
        db.query(Plan.community, Plan.company)
        .filter(Plan.community.isnot(None), Plan.company.isnot(None))
        .order_by(Plan.id)
        .all()
    )
    mapping: "OrderedDict[str, List[str]]" = OrderedDict()
    for community, company in rows:
        if is_placeholder_name(community) or is_placeholder_name(company):
            continue
        _append_unique(mapping.setdefault(community, []), [company])
    return mapping


def build_unified_communities(db: Session) -> List[Dict[str, Any]]:
    """
    Persisted communities followed by plan-derived ones.

    Each persisted community has its legacy references migrated before its
    companies are expanded. A plan-derived name equal to a persisted name
    only contributes its companies to that entry.
    """
    entries: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

    for community in db.query(Community).order_by(Community.name).all():
        if is_placeholder_name(community.name):
            continue
        migrate_legacy_refs(db, community)
        entries[community.name] = {
            "community_id": community.community_id,
            "name": community.name,
            "description": community.description,
            "location": community.location,
            "companies": expand_companies(db, community),
            "from_plans": False,
        }

    derived = plan_community_companies(db)
    added = 0
    for name in sorted(derived):
        companies = derived[name]
        if name in entries:
            _append_unique(entries[name]["companies"], companies)
            continue
        entries[name] = {
            "community_id": None,
            "name": name,
            "description": None,
            "location": None,
            "companies": list(companies),
            "from_plans": True,
        }
        added += 1

    logger.debug("Unified community view: %d persisted, %d plan-derived", len(entries) - added, added)
    return list(entries.values())


def build_price_chart(db: Session, community_name: str, plan_type: str = "now") -> Dict[str, Any]:
    """Price-vs-sqft series per company for one community and plan type."""
    if is_placeholder_name(community_name):
        raise ValidationError("Invalid community identifier")
    plan_type = (plan_type or "now").strip().lower()
    if plan_type not in PLAN_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(PLAN_TYPES)}")

    community_name = community_name.strip()
    plans = (
        db.query(Plan)
        .filter(Plan.community == community_name, Plan.type == plan_type)
        .all()
    )

    by_company: Dict[str, List[Dict[str, Any]]] = {}
    for plan in plans:
        points = by_company.setdefault(plan.company, [])
        if plan.sqft and plan.price:
            points.append({"sqft": plan.sqft, "price": float(plan.price), "plan_name": plan.plan_name})

    series = []
    for company in sorted(by_company):
        points = sorted(by_company[company], key=lambda p: p["sqft"])
        if points:
            series.append({"company": company, "points": points})

    return {
        "community": community_name,
        "type": plan_type,
        "sqft_axis": sorted({p.sqft for p in plans if p.sqft}),
        "series": series,
    }
