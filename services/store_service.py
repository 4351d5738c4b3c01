"""
Store Service
=============
Single-table persistence for ValueRecord rows.

The store is append-only: it has no update or delete entry
point.  Each call runs in the request-scoped SQLAlchemy session, which
Flask-SQLAlchemy removes at the end of the request, so no transaction ever
spans two calls.

Primary entry points
--------------------
  initialize()   - create the table if absent (safe on every start-up)
  load_all()     - every stored record, in no particular order
  append()       - insert exactly one record and commit
  count()        - number of stored records
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models.value_records import ValueRecord

logger = logging.getLogger(__name__)


class StoreService:
    """Append/read access to the value_records table."""

    @staticmethod
    def initialize():
        """Create the value_records table when missing. Existing rows are untouched."""
        ValueRecord.__table__.create(bind=db.engine, checkfirst=True)
        logger.debug(f"store initialized ({ValueRecord.__tablename__})")

    @staticmethod
    def load_all():
        """Return every stored ValueRecord. Callers must not rely on ordering."""
        return ValueRecord.query.all()

    @staticmethod
    def append(record):
        """
        Insert one record and commit.

        Storage failures are logged and re-raised after rolling back; there is
        no retry.
        """
        try:
            db.session.add(record)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f"failed to append value record {record.id}")
            raise
        logger.info(
            f"appended value record {record.id} at ({record.latitude}, {record.longitude})"
        )
        return record

    @staticmethod
    def count():
        return ValueRecord.query.count()
