"""
Company <-> community membership.

A community's company references are stored one per row in
community_companies. Rows written before companies had ids hold the company
name instead; those are converted to ids (or dropped when no company has
that name) before any membership read or write.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from model.profiles.company import Company
from model.profiles.community import Community, CommunityCompany
from src.exceptions import ConflictError
from src.route_helpers import (
    get_or_create_community,
    is_public_id,
    resolve_community,
    resolve_company,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ById:
    company_id: str


@dataclass(frozen=True)
class ByName:
    name: str


CompanyRef = Union[ById, ByName]


def classify_ref(raw: str) -> CompanyRef:
    """Map a stored company_ref to its variant."""
    if is_public_id(raw, "company"):
        return ById(raw)
    return ByName(raw)


# ---------------------------------------------------------------------------
# Legacy migration
# ---------------------------------------------------------------------------

def migrate_legacy_refs(db: Session, community: Community) -> bool:
    """
    Replace name-typed references of `community` with company ids.

    Names are matched exactly (case-sensitive) against Company.name. The
    comparison is repeated here because a case-insensitive collation lets
    IN return near matches. Names that match no company are dropped. An id
    already present is never added twice.

    Returns:
        True if anything was written, False when there was nothing to migrate.
    """
    links = list(community.company_links)
    legacy = [link for link in links if isinstance(classify_ref(link.company_ref), ByName)]
    if not legacy:
        return False

    present = [link.company_ref for link in links if isinstance(classify_ref(link.company_ref), ById)]
    names = {link.company_ref.strip() for link in legacy}

    rows = db.query(Company.company_id, Company.name).filter(Company.name.in_(names)).all()
    resolved = {name: company_id for company_id, name in rows if name in names}

    for link in legacy:
        community.company_links.remove(link)

    seen = set(present)
    for name in sorted(names):
        company_id = resolved.get(name)
        if company_id is None:
            logger.info("Dropping unresolvable legacy company '%s' from community %s", name, community.community_id)
            continue
        if company_id in seen:
            continue
        seen.add(company_id)
        community.company_links.append(CommunityCompany(company_ref=company_id))

    db.commit()
    db.expire(community)
    logger.info(
        "Migrated %d legacy company reference(s) in community %s (%d resolved)",
        len(legacy), community.community_id, len(resolved),
    )
    return True


# ---------------------------------------------------------------------------
# Read helpers
# ---------------------------------------------------------------------------

def expand_companies(db: Session, community: Community) -> List[str]:
    """Display names for the id references of `community`, in stored order.

    Name-typed leftovers and ids of deleted companies are skipped.
    """
    ids = [ref for ref in community.company_refs if isinstance(classify_ref(ref), ById)]
    if not ids:
        return []
    rows = db.query(Company.company_id, Company.name).filter(Company.company_id.in_(ids)).all()
    names = dict(rows)
    return [names[i] for i in ids if i in names]


def community_payload(db: Session, community: Community) -> Dict[str, Any]:
    return {
        "community_id": community.community_id,
        "name": community.name,
        "description": community.description,
        "location": community.location,
        "companies": expand_companies(db, community),
        "from_plans": False,
    }


def _is_member(community: Community, company: Company) -> bool:
    wanted = company.name.strip().lower()
    for raw in community.company_refs:
        ref = classify_ref(raw)
        if isinstance(ref, ById) and ref.company_id == company.company_id:
            return True
        if isinstance(ref, ByName) and ref.name.strip().lower() == wanted:
            return True
    return False


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

def add_company_to_community(db: Session, company_ref: str, community_ref: str) -> Dict[str, Any]:
    """
    Add a company to a community, creating the community if needed.

    Raises:
        NotFoundError: company does not exist (companies are never created here)
        ConflictError: company already a member; details["community"] holds the current state
    """
    company = resolve_company(db, company_ref)
    community, _ = get_or_create_community(db, community_ref)
    migrate_legacy_refs(db, community)

    if _is_member(community, company):
        raise ConflictError(
            "Company is already in this community",
            details={"community": community_payload(db, community)},
        )

    # The unique (community_id, company_ref) key makes this an add-if-absent.
    db.add(CommunityCompany(community_id=community.community_id, company_ref=company.company_id))
    try:
        db.commit()
        logger.info("Added company %s to community %s", company.company_id, community.community_id)
    except IntegrityError:
        db.rollback()
        logger.warning(
            "Company %s was added to community %s concurrently", company.company_id, community.community_id
        )

    db.expire(community)
    return community_payload(db, community)


def remove_company_from_community(db: Session, company_ref: str, community_ref: str) -> Dict[str, Any]:
    """
    Remove a company from a community. Removing a non-member is a no-op.

    Raises:
        NotFoundError: company or community does not exist
    """
    company = resolve_company(db, company_ref)
    community = resolve_community(db, community_ref)
    migrate_legacy_refs(db, community)

    removed = (
        db.query(CommunityCompany)
        .filter(
            CommunityCompany.community_id == community.community_id,
            CommunityCompany.company_ref == company.company_id,
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    db.expire(community)

    if removed:
        logger.info("Removed company %s from community %s", company.company_id, community.community_id)
    return community_payload(db, community)
