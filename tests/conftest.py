"""
Shared fixtures: in-memory SQLite database, a session bound to it, and a
TestClient whose get_db / Claude client dependencies are overridden.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from config.db import SessionLocal, get_db, reset_engine
from model import load_all_models
from model.base import Base
from model.profiles.company import Company
from model.profiles.community import Community, CommunityCompany
from model.property.plan import Plan
from routes.profiles.company import get_claude_client
from src.app import app

load_all_models()


class StubClaudeClient:
    """Stands in for ClaudeClient; returns a canned answer or raises."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.prompts = []

    def call_json(self, prompt, system=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


# ===================================================================
# Database
# ===================================================================

@pytest.fixture(scope='function')
def engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    reset_engine(engine)
    yield engine
    reset_engine()


@pytest.fixture(scope='function')
def db_session(engine):
    """Session from the application factory, bound to the test engine."""
    session = SessionLocal()
    yield session
    session.close()


# ===================================================================
# API
# ===================================================================

@pytest.fixture
def claude_stub():
    return StubClaudeClient()


@pytest.fixture
def client(db_session, claude_stub):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_claude_client] = lambda: claude_stub
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ===================================================================
# Factories
# ===================================================================

def make_company(db, name, **fields):
    company = Company(name=name, **fields)
    db.add(company)
    db.commit()
    return company


def make_community(db, name, refs=()):
    """Community with raw company_ref rows (ids or legacy names) in the given order."""
    community = Community(name=name)
    for ref in refs:
        community.company_links.append(CommunityCompany(company_ref=ref))
    db.add(community)
    db.commit()
    return community


def make_plan(db, plan_name, company, community, price=400000, type="plan", **fields):
    plan = Plan(plan_name=plan_name, company=company, community=community, price=price, type=type, **fields)
    db.add(plan)
    db.commit()
    return plan
