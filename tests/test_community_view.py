"""
Unified community list and price chart.
"""
import pytest

from conftest import make_community, make_company, make_plan
from src.community_view import build_price_chart, build_unified_communities
from src.exceptions import ValidationError


class TestUnifiedCommunities:

    def test_merges_persisted_and_plan_derived(self, db_session):
        acme = make_company(db_session, "Acme Homes")
        elevon = make_community(db_session, "Elevon", [acme.company_id])
        make_plan(db_session, "Aspen", "Acme Homes", "Elevon")
        make_plan(db_session, "Birch", "Beta Builders", "Elevon")
        make_plan(db_session, "Cedar", "Gamma Homes", "Painted Tree")

        result = build_unified_communities(db_session)

        assert result == [
            {
                "community_id": elevon.community_id,
                "name": "Elevon",
                "description": None,
                "location": None,
                "companies": ["Acme Homes", "Beta Builders"],
                "from_plans": False,
            },
            {
                "community_id": None,
                "name": "Painted Tree",
                "description": None,
                "location": None,
                "companies": ["Gamma Homes"],
                "from_plans": True,
            },
        ]

    def test_placeholder_names_excluded(self, db_session):
        make_plan(db_session, "Aspen", "Acme Homes", "undefined")
        make_plan(db_session, "Birch", "Acme Homes", "  ")
        make_plan(db_session, "Cedar", "undefined", "Elevon")

        assert build_unified_communities(db_session) == []

    def test_persisted_come_first(self, db_session):
        make_community(db_session, "Zephyr")
        make_plan(db_session, "Aspen", "Acme Homes", "Alder Creek")

        assert [c["name"] for c in build_unified_communities(db_session)] == ["Zephyr", "Alder Creek"]

    def test_plan_companies_deduplicated(self, db_session):
        make_plan(db_session, "Aspen", "Acme Homes", "Elevon")
        make_plan(db_session, "Birch", "Acme Homes", "Elevon")
        make_plan(db_session, "Aspen", "Acme Homes", "Elevon", type="now")

        [entry] = build_unified_communities(db_session)
        assert entry["companies"] == ["Acme Homes"]

    def test_legacy_refs_migrated_on_read(self, db_session):
        make_company(db_session, "Acme Homes")
        make_community(db_session, "Elevon", ["Acme Homes", "Ghost Builders"])

        [entry] = build_unified_communities(db_session)
        assert entry["companies"] == ["Acme Homes"]


class TestPriceChart:

    def test_series_per_company(self, db_session):
        make_plan(db_session, "Aspen", "Acme Homes", "Elevon", price=450000, sqft=2400, type="now")
        make_plan(db_session, "Birch", "Acme Homes", "Elevon", price=380000, sqft=1900, type="now")
        make_plan(db_session, "Cedar", "Beta Builders", "Elevon", price=410000, sqft=2100, type="now")
        make_plan(db_session, "Dogwood", "Beta Builders", "Elevon", price=500000, sqft=2600, type="plan")
        make_plan(db_session, "Elm", "Gamma Homes", "Elevon", price=300000, type="now")

        chart = build_price_chart(db_session, "Elevon")

        assert chart["type"] == "now"
        assert chart["sqft_axis"] == [1900, 2100, 2400]
        assert chart["series"] == [
            {"company": "Acme Homes", "points": [
                {"sqft": 1900, "price": 380000.0, "plan_name": "Birch"},
                {"sqft": 2400, "price": 450000.0, "plan_name": "Aspen"},
            ]},
            {"company": "Beta Builders", "points": [
                {"sqft": 2100, "price": 410000.0, "plan_name": "Cedar"},
            ]},
        ]

    def test_plan_type(self, db_session):
        make_plan(db_session, "Dogwood", "Beta Builders", "Elevon", price=500000, sqft=2600, type="plan")

        chart = build_price_chart(db_session, "Elevon", "PLAN")
        assert chart["type"] == "plan"
        assert chart["sqft_axis"] == [2600]

    def test_rejects_unknown_type(self, db_session):
        with pytest.raises(ValidationError):
            build_price_chart(db_session, "Elevon", "rental")

    def test_rejects_placeholder_community(self, db_session):
        with pytest.raises(ValidationError):
            build_price_chart(db_session, "undefined")
