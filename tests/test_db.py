"""
Shared engine and the request-scoped session dependency.
"""
from config.db import get_db, get_engine, get_session_factory, reset_engine


class TestSessionDependency:

    def test_get_db_uses_the_bound_engine(self, engine):
        assert get_engine() is engine

        gen = get_db()
        session = next(gen)
        try:
            assert session.get_bind() is engine
        finally:
            gen.close()

    def test_reset_rebuilds_session_factory(self, engine):
        """Rebinding drops the cached factory so new sessions use the new engine."""
        before = get_session_factory()
        reset_engine(engine)

        after = get_session_factory()
        assert after is not before
        assert after.kw["bind"] is engine
