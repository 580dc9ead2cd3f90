# model/profiles/company.py
from sqlalchemy import Column, String, Integer, Text, TIMESTAMP
from sqlalchemy.sql import func

from model.base import Base, PKType
from src.id_generator import generate_company_id


class Company(Base):
    """
    A home-building company (builder).

    Companies are only created explicitly (directly or through AI enrichment).
    Communities reference them by `company_id` through `community_companies`;
    there is no FK there, so deleting a company leaves those references behind.
    """
    __tablename__ = "companies"

    id = Column(PKType, primary_key=True, autoincrement=True)
    # Stable identifier for API use (e.g., CPY-1699564234-X3P8Q1)
    company_id = Column(String(50), unique=True, nullable=False, index=True, default=generate_company_id)

    name = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text)
    website = Column(String(1024))
    headquarters = Column(String(255))   # "Dallas, Texas"
    founded = Column(String(16))         # year as text, AI answers vary

    # Denormalized counters, refreshed when companies are listed
    total_communities = Column(Integer, default=0, nullable=False)
    total_plans = Column(Integer, default=0, nullable=False)

    created_at = Column(TIMESTAMP, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(
        TIMESTAMP, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False
    )

    def __repr__(self):
        return f"<Company(company_id='{self.company_id}', name='{self.name}')>"
