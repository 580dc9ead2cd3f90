"""
Plan ingestion and price tracking.

upsert_plans() is the only write path for plans. A plan is identified by
its natural key (plan_name, company, community, type). When an incoming
price differs from the stored one, a PriceHistory row is written before the
price is overwritten. The read side flags plans with a price change in the
last 24 hours.
"""
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session

from model.property.plan import Plan, PriceHistory, utcnow
from schema.plan import PlanIn
from src.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

RECENT_CHANGE_WINDOW = timedelta(hours=24)
_CENTS = Decimal("0.01")

# Fields applied in place on re-ingestion, only when present in the input
OPTIONAL_FIELDS = (
    "sqft", "stories", "price_per_sqft", "beds", "baths", "address", "design_number",
)


def _cents(value) -> Decimal:
    return Decimal(str(value)).quantize(_CENTS)


def _as_records(payload: Union[Dict[str, Any], List[Any]]) -> List[Any]:
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, list):
        return payload
    raise ValidationError("Expected a plan object or a list of plan objects")


def _upsert_one(db: Session, record: PlanIn) -> bool:
    """Create or update one plan. Returns True when a new plan was inserted."""
    now = utcnow()
    data = record.model_dump(exclude_unset=True)
    key = {
        "plan_name": record.plan_name,
        "company": record.company,
        "community": record.community,
        "type": record.type,
    }

    plan = db.query(Plan).filter_by(**key).first()
    if plan is None:
        plan = Plan(
            **key,
            price=record.price,
            last_updated=now,
            **{f: data[f] for f in OPTIONAL_FIELDS if f in data},
        )
        db.add(plan)
        db.flush()
        logger.info("Created plan %s: %s / %s / %s (%s)", plan.id, record.plan_name, record.company,
                    record.community, record.type)
        return True

    if plan.price is None or _cents(plan.price) != record.price:
        db.add(PriceHistory(plan_id=plan.id, old_price=plan.price, new_price=record.price, changed_at=now))
        db.flush()
        logger.info("Price change on plan %s (%s): %s -> %s", plan.id, plan.plan_name, plan.price, record.price)
        plan.price = record.price
        plan.last_updated = now

    for field in OPTIONAL_FIELDS:
        if field in data:
            setattr(plan, field, data[field])
    return False


def _write_record(db: Session, record: PlanIn, index: int) -> bool:
    """
    Upsert and commit one record. Returns False when the record was skipped.

    A natural-key collision means another writer inserted the same plan
    first; the record is retried once as an update. Values the store
    rejects (out of range for a column) skip the record.
    """
    for attempt in (1, 2):
        try:
            _upsert_one(db, record)
            db.commit()
            return True
        except IntegrityError:
            db.rollback()
            if attempt == 2:
                logger.warning("Skipping plan record %d after repeated conflict", index)
                return False
            logger.info("Plan '%s' inserted concurrently; retrying as update", record.plan_name)
        except (DataError, OverflowError) as e:
            db.rollback()
            logger.warning("Skipping plan record %d: rejected by the store: %s", index, e)
            return False
    return False


def upsert_plans(db: Session, payload: Union[Dict[str, Any], List[Any]]) -> int:
    """
    Create or update one or many plan records.

    Records that fail validation (missing name/company/community, missing or
    zero price, unknown type, numbers out of range) are skipped; the rest of
    the batch is still written.

    Returns:
        Number of records created or updated.
    """
    records = _as_records(payload)
    written = 0

    for index, raw in enumerate(records):
        if not isinstance(raw, dict):
            logger.debug("Skipping plan record %d: not an object", index)
            continue
        try:
            record = PlanIn.model_validate(raw)
        except PydanticValidationError as e:
            logger.debug("Skipping plan record %d: %s", index, e.errors(include_url=False))
            continue

        if _write_record(db, record, index):
            written += 1

    logger.info("Plan upsert wrote %d of %d record(s)", written, len(records))
    return written


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------

def recently_changed_plan_ids(db: Session, plan_ids: Optional[Iterable[int]] = None) -> Set[int]:
    """Ids of plans with a PriceHistory row inside the last 24 hours."""
    since = utcnow() - RECENT_CHANGE_WINDOW
    query = db.query(PriceHistory.plan_id).filter(PriceHistory.changed_at >= since)
    if plan_ids is not None:
        plan_ids = list(plan_ids)
        if not plan_ids:
            return set()
        query = query.filter(PriceHistory.plan_id.in_(plan_ids))
    return {plan_id for (plan_id,) in query.distinct().all()}


def _money(value) -> Optional[float]:
    return float(value) if value is not None else None


def plan_payload(plan: Plan, changed_recently: bool = False) -> Dict[str, Any]:
    return {
        "id": plan.id,
        "plan_name": plan.plan_name,
        "price": _money(plan.price),
        "sqft": plan.sqft,
        "stories": plan.stories,
        "price_per_sqft": _money(plan.price_per_sqft),
        "last_updated": plan.last_updated,
        "company": plan.company,
        "community": plan.community,
        "type": plan.type,
        "beds": plan.beds,
        "baths": plan.baths,
        "address": plan.address,
        "design_number": plan.design_number,
        "price_changed_recently": changed_recently,
    }


def list_plans(
    db: Session,
    community: Optional[str] = None,
    company: Optional[str] = None,
    plan_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """All complete plans, newest first, flagged with price_changed_recently."""
    query = db.query(Plan).filter(
        Plan.plan_name.isnot(None),
        Plan.price.isnot(None),
        Plan.company.isnot(None),
        Plan.community.isnot(None),
    )
    if community:
        query = query.filter(Plan.community == community)
    if company:
        query = query.filter(Plan.company == company)
    if plan_type:
        query = query.filter(Plan.type == plan_type)

    plans = query.order_by(Plan.last_updated.desc(), Plan.id.desc()).all()
    changed = recently_changed_plan_ids(db)
    return [plan_payload(p, p.id in changed) for p in plans]


def price_history_for_plan(db: Session, plan_id: int) -> Dict[str, Any]:
    """The plan plus its price changes, oldest first."""
    plan = db.get(Plan, plan_id)
    if plan is None:
        raise NotFoundError("Plan not found", details={"plan_id": plan_id})

    history = (
        db.query(PriceHistory)
        .filter(PriceHistory.plan_id == plan.id)
        .order_by(PriceHistory.changed_at.asc(), PriceHistory.id.asc())
        .all()
    )
    changed = recently_changed_plan_ids(db, [plan.id])
    return {
        "plan": plan_payload(plan, plan.id in changed),
        "history": [
            {
                "plan_id": h.plan_id,
                "old_price": _money(h.old_price),
                "new_price": _money(h.new_price),
                "changed_at": h.changed_at,
            }
            for h in history
        ],
    }
