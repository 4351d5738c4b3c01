"""
Shared pytest fixtures for the Land Value Map test suite.

All tests run against an in-memory SQLite database (TestingConfig).
A single app context is pushed for the whole session so that SQLAlchemy
objects remain attached throughout.  After each test, clean_db wipes all
rows so tests are fully independent.
"""
import pytest
from app import create_app
from extensions import db as _db


# ---------------------------------------------------------------------------
# Application / database lifecycle
# ---------------------------------------------------------------------------

@pytest.fixture(scope='session')
def app():
    """Create a test Flask application with an in-memory SQLite database."""
    application = create_app('testing')
    ctx = application.app_context()
    ctx.push()
    _db.create_all()
    yield application
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture(autouse=True)
def clean_db(app):
    """Wipe every table after each test so tests never share state."""
    yield
    _db.session.rollback()
    for table in reversed(_db.metadata.sorted_tables):
        _db.session.execute(table.delete())
    _db.session.commit()
    _db.session.expunge_all()


@pytest.fixture
def client(app):
    """Test client; cookies (and so the pending click) persist across its requests."""
    return app.test_client()


# ---------------------------------------------------------------------------
# Common model helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def make_record(app):
    """Insert a ValueRecord with sensible defaults, overridable per test."""
    from models.value_records import ValueRecord

    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        fields = dict(
            id=f'record-{counter["n"]}',
            latitude=-31.42,
            longitude=-64.18,
            value=50000.0,
            capture_date='2026-01-15',
            source='Appraisal',
            services='Water, Gas',
            surface_area=250.0,
        )
        fields.update(overrides)
        record = ValueRecord(**fields)
        _db.session.add(record)
        _db.session.commit()
        return record

    return _make
