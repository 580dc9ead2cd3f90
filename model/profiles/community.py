# model/profiles/community.py
from sqlalchemy import (
    Column, String, Text, TIMESTAMP, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from model.base import Base, PKType
from src.id_generator import generate_community_id


class Community(Base):
    """
    A residential community in which one or more companies build.

    Relationships:
      - company_links: membership rows (community_companies). Each row holds a
        company reference that is either a company_id (current) or a raw
        company name (legacy rows written before ids were used).
    """
    __tablename__ = "communities"

    id = Column(PKType, primary_key=True, autoincrement=True)
    community_id = Column(String(50), unique=True, nullable=False, index=True, default=generate_community_id)

    name = Column(String(255), nullable=False)
    # Lower-cased name; the unique index makes concurrent create-if-missing safe
    name_key = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text)
    location = Column(String(255))

    created_at = Column(TIMESTAMP, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(
        TIMESTAMP, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False
    )

    company_links = relationship(
        "CommunityCompany",
        back_populates="community",
        cascade="all, delete-orphan",
        order_by="CommunityCompany.id",
    )

    @validates("name")
    def _sync_name_key(self, key, value):
        if value is not None:
            value = value.strip()
            self.name_key = value.lower()
        return value

    @property
    def company_refs(self):
        return [link.company_ref for link in self.company_links]

    def __repr__(self):
        return f"<Community(community_id='{self.community_id}', name='{self.name}')>"


class CommunityCompany(Base):
    """Membership row: one company reference inside one community."""
    __tablename__ = "community_companies"
    __table_args__ = (
        UniqueConstraint("community_id", "company_ref", name="uq_community_company_ref"),
    )

    id = Column(PKType, primary_key=True, autoincrement=True)
    community_id = Column(
        String(50), ForeignKey("communities.community_id", ondelete="CASCADE"), nullable=False, index=True
    )
    company_ref = Column(String(255), nullable=False)  # CPY-xxx, or a legacy company name

    created_at = Column(TIMESTAMP, server_default=func.current_timestamp(), nullable=False)

    community = relationship("Community", back_populates="company_links")

    def __repr__(self):
        return f"<CommunityCompany(community_id='{self.community_id}', company_ref='{self.company_ref}')>"
