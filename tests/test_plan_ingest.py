"""
Plan upsert, price history and the 24h recently-changed flag.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from conftest import make_plan
from model.property.plan import Plan, PriceHistory, utcnow
from schema.plan import PlanIn
from src import plan_ingest
from src.exceptions import NotFoundError
from src.plan_ingest import list_plans, price_history_for_plan, upsert_plans


def _record(**overrides):
    record = {
        "plan_name": "Aspen",
        "price": "$425,990",
        "company": "Acme Homes",
        "community": "Elevon",
        "sqft": "2,150 sqft",
    }
    record.update(overrides)
    return record


class TestPlanIn:

    def test_cleans_scraped_numbers(self):
        plan = PlanIn.model_validate(_record(stories=2, beds=4, baths=2.5))
        assert plan.price == Decimal("425990.00")
        assert plan.sqft == 2150
        assert plan.stories == "2"
        assert plan.baths == "2.5"
        assert plan.type == "plan"

    def test_type_is_case_insensitive(self):
        assert PlanIn.model_validate(_record(type="NOW")).type == "now"

    @pytest.mark.parametrize("sqft", ["inf", "nan", "-inf", 10**20])
    def test_rejects_unrepresentable_sqft(self, sqft):
        with pytest.raises(PydanticValidationError):
            PlanIn.model_validate(_record(sqft=sqft))

    def test_rejects_price_beyond_column_range(self):
        with pytest.raises(PydanticValidationError):
            PlanIn.model_validate(_record(price="$99,999,999,999"))


class TestUpsert:

    def test_insert_new_plan(self, db_session):
        assert upsert_plans(db_session, _record()) == 1

        plan = db_session.query(Plan).one()
        assert plan.price == Decimal("425990.00")
        assert plan.sqft == 2150
        assert plan.type == "plan"
        assert plan.last_updated is not None
        assert db_session.query(PriceHistory).count() == 0

    def test_same_price_writes_no_history(self, db_session):
        upsert_plans(db_session, _record())
        assert upsert_plans(db_session, _record(price="425990.00")) == 1

        assert db_session.query(Plan).count() == 1
        assert db_session.query(PriceHistory).count() == 0

    def test_price_change_records_history_first(self, db_session):
        upsert_plans(db_session, _record())
        before = db_session.query(Plan).one().last_updated

        upsert_plans(db_session, _record(price=419990))

        plan = db_session.query(Plan).one()
        history = db_session.query(PriceHistory).one()
        assert plan.price == Decimal("419990.00")
        assert plan.last_updated >= before
        assert history.plan_id == plan.id
        assert history.old_price == Decimal("425990.00")
        assert history.new_price == Decimal("419990.00")

    def test_type_is_part_of_natural_key(self, db_session):
        upsert_plans(db_session, [_record(), _record(type="now", price=399000)])

        assert db_session.query(Plan).count() == 2
        assert db_session.query(PriceHistory).count() == 0

    def test_bad_records_are_skipped(self, db_session):
        batch = [
            _record(),
            _record(plan_name="Birch", price=None),
            _record(plan_name="Cedar", price=0),
            _record(plan_name="Dogwood", company=""),
            _record(plan_name="Elm", type="rental"),
            "not a plan",
            {"plan_name": "Fir", "company": "Acme Homes", "community": "Elevon"},
        ]
        assert upsert_plans(db_session, batch) == 1
        assert [p.plan_name for p in db_session.query(Plan).all()] == ["Aspen"]

    def test_out_of_range_numbers_do_not_abort_batch(self, db_session):
        batch = [
            _record(),
            _record(plan_name="Birch", sqft="inf"),
            _record(plan_name="Cedar", sqft=10**20),
            _record(plan_name="Dogwood"),
        ]
        assert upsert_plans(db_session, batch) == 2
        assert sorted(p.plan_name for p in db_session.query(Plan).all()) == ["Aspen", "Dogwood"]

    def test_store_rejection_skips_record(self, db_session, monkeypatch):
        """A value the database refuses rolls back that record only."""
        real_upsert = plan_ingest._upsert_one

        def reject_birch(db, record):
            if record.plan_name == "Birch":
                raise OverflowError("Python int too large to convert to SQLite INTEGER")
            return real_upsert(db, record)

        monkeypatch.setattr(plan_ingest, "_upsert_one", reject_birch)

        batch = [_record(), _record(plan_name="Birch"), _record(plan_name="Cedar")]
        assert upsert_plans(db_session, batch) == 2
        assert sorted(p.plan_name for p in db_session.query(Plan).all()) == ["Aspen", "Cedar"]

    def test_sparse_update_keeps_omitted_fields(self, db_session):
        upsert_plans(db_session, _record(beds="4", baths="3", address="12 Elm St"))
        upsert_plans(db_session, {
            "plan_name": "Aspen",
            "price": 425990,
            "company": "Acme Homes",
            "community": "Elevon",
            "sqft": 2200,
        })

        plan = db_session.query(Plan).one()
        assert plan.sqft == 2200
        assert plan.beds == "4"
        assert plan.baths == "3"
        assert plan.address == "12 Elm St"


def _insert_without_lookup(db, record):
    """Write the plan as a request that checked before the other writer committed would."""
    db.add(Plan(plan_name=record.plan_name, company=record.company, community=record.community,
                type=record.type, price=record.price, last_updated=utcnow()))
    db.flush()
    return True


class TestConcurrentInsert:

    def test_collision_is_retried_as_update(self, db_session, monkeypatch):
        """The losing insert hits the natural key, then updates the winner's row."""
        upsert_plans(db_session, _record())
        real_upsert = plan_ingest._upsert_one
        calls = []

        def insert_once(db, record):
            calls.append(record.plan_name)
            if len(calls) == 1:
                return _insert_without_lookup(db, record)
            return real_upsert(db, record)

        monkeypatch.setattr(plan_ingest, "_upsert_one", insert_once)

        assert upsert_plans(db_session, _record(price=419990)) == 1
        assert len(calls) == 2

        plan = db_session.query(Plan).one()
        history = db_session.query(PriceHistory).one()
        assert plan.price == Decimal("419990.00")
        assert history.old_price == Decimal("425990.00")
        assert history.new_price == Decimal("419990.00")

    def test_second_collision_skips_record(self, db_session, monkeypatch):
        """A record that collides twice is skipped and the batch continues."""
        upsert_plans(db_session, _record())
        real_upsert = plan_ingest._upsert_one

        def always_insert_aspen(db, record):
            if record.plan_name == "Aspen":
                return _insert_without_lookup(db, record)
            return real_upsert(db, record)

        monkeypatch.setattr(plan_ingest, "_upsert_one", always_insert_aspen)

        assert upsert_plans(db_session, [_record(price=419990), _record(plan_name="Birch")]) == 1

        aspen = db_session.query(Plan).filter_by(plan_name="Aspen").one()
        assert aspen.price == Decimal("425990.00")
        assert db_session.query(Plan).filter_by(plan_name="Birch").count() == 1
        assert db_session.query(PriceHistory).count() == 0


class TestReadSide:

    def test_recent_change_window(self, db_session):
        old = make_plan(db_session, "Aspen", "Acme Homes", "Elevon")
        fresh = make_plan(db_session, "Birch", "Acme Homes", "Elevon")
        db_session.add_all([
            PriceHistory(plan_id=old.id, old_price=410000, new_price=400000,
                         changed_at=utcnow() - timedelta(hours=25)),
            PriceHistory(plan_id=fresh.id, old_price=410000, new_price=400000,
                         changed_at=utcnow() - timedelta(hours=1)),
        ])
        db_session.commit()

        flags = {p["plan_name"]: p["price_changed_recently"] for p in list_plans(db_session)}
        assert flags == {"Aspen": False, "Birch": True}

    def test_newest_first_and_filters(self, db_session):
        now = utcnow()
        make_plan(db_session, "Aspen", "Acme Homes", "Elevon", last_updated=now - timedelta(days=2))
        make_plan(db_session, "Birch", "Acme Homes", "Elevon", last_updated=now)
        make_plan(db_session, "Cedar", "Beta Builders", "Painted Tree", type="now", last_updated=now)

        assert [p["plan_name"] for p in list_plans(db_session, community="Elevon")] == ["Birch", "Aspen"]
        assert [p["plan_name"] for p in list_plans(db_session, plan_type="now")] == ["Cedar"]
        assert [p["plan_name"] for p in list_plans(db_session, company="Beta Builders")] == ["Cedar"]

    def test_price_history_for_plan(self, db_session):
        upsert_plans(db_session, _record(price=430000))
        upsert_plans(db_session, _record(price=425000))
        upsert_plans(db_session, _record(price=420000))
        plan = db_session.query(Plan).one()

        result = price_history_for_plan(db_session, plan.id)

        assert result["plan"]["price"] == 420000.0
        assert result["plan"]["price_changed_recently"] is True
        assert [(h["old_price"], h["new_price"]) for h in result["history"]] == [
            (430000.0, 425000.0),
            (425000.0, 420000.0),
        ]

    def test_price_history_unknown_plan(self, db_session):
        with pytest.raises(NotFoundError):
            price_history_for_plan(db_session, 999)
