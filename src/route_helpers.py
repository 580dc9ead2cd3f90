# src/route_helpers.py
"""
Lookup helpers that turn a caller-supplied string into a Company or Community.

A reference is tried as a typed public ID first (CPY-xxx / CMY-xxx) and,
failing that, as a case-insensitive exact name. Companies are never created
by these helpers; communities are only created through the explicit
get_or_create_community branch.
"""
import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from model.profiles.company import Company
from model.profiles.community import Community
from src.exceptions import InternalError, NotFoundError, ValidationError
from src.id_generator import validate_public_id, PREFIX_MAP

logger = logging.getLogger(__name__)

PLACEHOLDER_NAMES = {"", "undefined"}


def is_placeholder_name(value: Optional[str]) -> bool:
    """True for None, blank, whitespace-only or the literal 'undefined'."""
    if value is None:
        return True
    return value.strip() in PLACEHOLDER_NAMES


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so a name only ever matches itself."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def name_equals_ci(column, name: str):
    """Case-insensitive exact match of `column` against `name`."""
    return column.ilike(escape_like(name.strip()), escape="\\")


def is_public_id(value: Optional[str], kind: str) -> bool:
    """True when `value` is a well-formed stable id for `kind` ("company" or "community")."""
    return validate_public_id(value, PREFIX_MAP[kind])


def _require_ref(ref: Optional[str], label: str) -> str:
    if is_placeholder_name(ref):
        raise ValidationError(f"Invalid {label} identifier")
    return ref.strip()


# =============================================================================
# Company Lookups
# =============================================================================

def find_company(db: Session, ref: str) -> Optional[Company]:
    """
    Find a company by company_id (CPY-xxx) or, failing that, by name.

    Returns:
        Company or None
    """
    ref = _require_ref(ref, "company")

    if is_public_id(ref, "company"):
        company = db.query(Company).filter(Company.company_id == ref).first()
        if company:
            return company

    return db.query(Company).filter(name_equals_ci(Company.name, ref)).first()


def resolve_company(db: Session, ref: str) -> Company:
    """
    Like find_company, but a miss is an error.

    Raises:
        ValidationError: blank/placeholder reference
        NotFoundError: no company by id or by name
    """
    company = find_company(db, ref)
    if not company:
        raise NotFoundError("Company not found", details={"company": ref})
    return company


# =============================================================================
# Community Lookups
# =============================================================================

def find_community(db: Session, ref: str) -> Optional[Community]:
    """Find a community by community_id (CMY-xxx) or, failing that, by name."""
    ref = _require_ref(ref, "community")

    if is_public_id(ref, "community"):
        community = db.query(Community).filter(Community.community_id == ref).first()
        if community:
            return community

    return db.query(Community).filter(name_equals_ci(Community.name, ref)).first()


def resolve_community(db: Session, ref: str) -> Community:
    """
    Find a community without creating one.

    Raises:
        ValidationError: blank/placeholder reference
        NotFoundError: no community by id or by name
    """
    community = find_community(db, ref)
    if not community:
        raise NotFoundError("Community not found", details={"community": ref})
    return community


def get_or_create_community(db: Session, ref: str) -> Tuple[Community, bool]:
    """
    Resolve a community, creating it under `ref` as its name when nothing matches.

    Two callers can race to create the same name. The unique name_key index
    rejects the second insert; the loser rolls back and resolves the row
    the winner wrote.

    Returns:
        (community, created)
    """
    community = find_community(db, ref)
    if community:
        return community, False

    name = ref.strip()
    community = Community(name=name)
    db.add(community)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Community '%s' was created concurrently; re-resolving by name", name)
        community = find_community(db, name)
        if not community:
            raise InternalError("Failed to create community")
        return community, False

    db.refresh(community)
    logger.info("Created community %s (%s) on first reference", community.community_id, community.name)
    return community, True
