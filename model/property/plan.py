# model/property/plan.py
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Numeric, TIMESTAMP, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from model.base import Base, PKType


PLAN_TYPES = ("plan", "now")


def utcnow() -> datetime:
    """Naive UTC timestamp; MySQL TIMESTAMP and SQLite both store without tz."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Plan(Base):
    """A home plan ("plan") or a built quick-move-in home ("now").

    `company` and `community` are free-text names, not foreign keys. The
    natural key (plan_name, company, community, type) is unique and drives
    the upsert in src/plan_ingest.py.
    """

    __tablename__ = "plans"
    __table_args__ = (
        UniqueConstraint("plan_name", "company", "community", "type", name="uq_plan_natural_key"),
    )

    id = Column(PKType, primary_key=True, autoincrement=True)

    plan_name = Column(String(255), nullable=False, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    sqft = Column(Integer)
    stories = Column(String(32))
    price_per_sqft = Column(Numeric(10, 2))

    company = Column(String(255), nullable=False, index=True)
    community = Column(String(255), nullable=False, index=True)
    type = Column(String(8), nullable=False, default="plan", index=True)  # plan | now

    beds = Column(String(32))
    baths = Column(String(32))
    address = Column(String(512))
    design_number = Column(String(64))

    last_updated = Column(TIMESTAMP, nullable=False, default=utcnow)

    created_at = Column(TIMESTAMP, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(
        TIMESTAMP, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False
    )

    price_history = relationship(
        "PriceHistory",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PriceHistory.changed_at",
    )

    def __repr__(self):
        return (
            f"<Plan(id={self.id}, plan_name='{self.plan_name}', company='{self.company}', "
            f"community='{self.community}', type='{self.type}', price={self.price})>"
        )


class PriceHistory(Base):
    """
    Append-only record of a plan price change.

    Written by the upsert before the plan's price is overwritten; never
    updated afterwards.
    """
    __tablename__ = "price_history"

    id = Column(PKType, primary_key=True, autoincrement=True)
    plan_id = Column(PKType, ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True)
    old_price = Column(Numeric(12, 2), nullable=False)
    new_price = Column(Numeric(12, 2), nullable=False)
    changed_at = Column(TIMESTAMP, nullable=False, default=utcnow, index=True)

    plan = relationship("Plan", back_populates="price_history")

    def __repr__(self):
        return (
            f"<PriceHistory(plan_id={self.plan_id}: "
            f"{self.old_price} -> {self.new_price} at {self.changed_at})>"
        )
