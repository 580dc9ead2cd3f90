"""
Company and community CRUD.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from model.profiles.company import Company
from model.profiles.community import Community, CommunityCompany
from model.property.plan import Plan
from schema.community import CommunityCreate
from schema.company import CompanyCreate, CompanyOut
from src.community_view import build_unified_communities
from src.exceptions import ConflictError, NotFoundError, ValidationError
from src.membership import community_payload
from src.route_helpers import find_company, is_placeholder_name, name_equals_ci

logger = logging.getLogger(__name__)


# --------------------------------- companies ---------------------------------

def create_company(db: Session, payload: CompanyCreate) -> Company:
    """
    Raises:
        ValidationError: blank name
        ConflictError: a company with this name (any case) exists
    """
    name = payload.name.strip()
    if is_placeholder_name(name):
        raise ValidationError("Company name is required")

    existing = find_company(db, name)
    if existing:
        raise ConflictError("Company already exists", details={"company_id": existing.company_id})

    company = Company(**payload.model_dump(exclude_none=True))
    company.name = name
    db.add(company)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Company already exists")
    db.refresh(company)
    logger.info("Created company %s (%s)", company.company_id, company.name)
    return company


def refresh_company_counters(db: Session, companies: List[Company]) -> None:
    """Recompute total_communities / total_plans and persist the ones that moved."""
    if not companies:
        return

    ids = [c.company_id for c in companies]
    membership_counts = dict(
        db.query(CommunityCompany.company_ref, func.count(CommunityCompany.id))
        .filter(CommunityCompany.company_ref.in_(ids))
        .group_by(CommunityCompany.company_ref)
        .all()
    )
    plan_counts = dict(
        db.query(func.lower(Plan.company), func.count(Plan.id))
        .group_by(func.lower(Plan.company))
        .all()
    )

    dirty = False
    for company in companies:
        communities = membership_counts.get(company.company_id, 0)
        plans = plan_counts.get(company.name.lower(), 0)
        if company.total_communities != communities or company.total_plans != plans:
            company.total_communities = communities
            company.total_plans = plans
            dirty = True
    if dirty:
        db.commit()


def list_companies(db: Session) -> List[Company]:
    companies = db.query(Company).order_by(Company.name).all()
    refresh_company_counters(db, companies)
    return companies


def delete_company(db: Session, company_id: str) -> Dict[str, Any]:
    """
    Delete by company_id. Membership rows that reference it are left alone.

    Raises:
        ValidationError: no id given
        NotFoundError: no such company
    """
    if is_placeholder_name(company_id):
        raise ValidationError("Company ID is required")

    company = db.query(Company).filter(Company.company_id == company_id.strip()).first()
    if not company:
        raise NotFoundError("Company not found", details={"company_id": company_id})

    snapshot = CompanyOut.model_validate(company).model_dump()
    db.delete(company)
    db.commit()
    logger.info("Deleted company %s (%s)", snapshot["company_id"], snapshot["name"])
    return snapshot


# -------------------------------- communities --------------------------------

def create_community(db: Session, payload: CommunityCreate) -> Dict[str, Any]:
    """
    Raises:
        ValidationError: blank or placeholder name
        ConflictError: a community with this name (any case) exists
    """
    if is_placeholder_name(payload.name):
        raise ValidationError("Community name is required")
    name = payload.name.strip()

    existing = db.query(Community).filter(name_equals_ci(Community.name, name)).first()
    if existing:
        raise ConflictError("Community already exists", details={"community": community_payload(db, existing)})

    community = Community(name=name, description=payload.description, location=payload.location)
    db.add(community)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Community already exists")
    db.refresh(community)
    logger.info("Created community %s (%s)", community.community_id, community.name)
    return community_payload(db, community)


def list_communities(db: Session) -> List[Dict[str, Any]]:
    return build_unified_communities(db)


def delete_community(db: Session, community_id: str) -> Dict[str, Any]:
    """
    Raises:
        ValidationError: no id given
        NotFoundError: no such community
    """
    if is_placeholder_name(community_id):
        raise ValidationError("Community ID is required")

    community = db.query(Community).filter(Community.community_id == community_id.strip()).first()
    if not community:
        raise NotFoundError("Community not found", details={"community_id": community_id})

    payload = community_payload(db, community)
    db.delete(community)
    db.commit()
    logger.info("Deleted community %s (%s)", payload["community_id"], payload["name"])
    return payload


def delete_all_communities(db: Session) -> int:
    db.query(CommunityCompany).delete(synchronize_session=False)
    deleted = db.query(Community).delete(synchronize_session=False)
    db.commit()
    logger.warning("Deleted all communities (%d)", deleted)
    return deleted
