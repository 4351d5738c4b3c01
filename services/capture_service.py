"""
Capture Service
===============
The click -> form -> save workflow.

A map click creates a PendingClick (fresh id + today's date + the clicked
coordinates) and opens the capture form.  Saving the form merges the
pending click with the form fields into a ValueRecord, appends it to the
store and clears the pending click.

State
-----
Pending state is owned by a CaptureSession, a thin wrapper around a
per-user mutable mapping (the Flask session cookie in production, a plain
dict in tests).  It holds at most one pending click: a second click before
saving silently replaces the first one, id and date included.

Transitions
-----------
  begin()   - Click -> Pending (ignored for clicks on map controls)
  cancel()  - Pending -> nothing, no write
  submit()  - Pending -> Persisted; a no-op unless value, surface area and
              a pending click are all present
"""
import logging
import uuid
from datetime import date

from models.value_records import Source, ValueRecord, serialize_services
from services.store_service import StoreService

logger = logging.getLogger(__name__)

# Leaflet controls are identified by this prefix when a click is reported
# from inside one.  The map script also stops click propagation on the
# selector control, so this is only a fallback.
CONTROL_ID_PREFIX = 'Leaflet.Control'

SESSION_KEY = 'pending_click'


class PendingClick:
    """A map click waiting for its form to be saved."""

    __slots__ = ('id', 'latitude', 'longitude', 'date')

    def __init__(self, id, latitude, longitude, date):
        self.id = id
        self.latitude = latitude
        self.longitude = longitude
        self.date = date

    def __eq__(self, other):
        if not isinstance(other, PendingClick):
            return NotImplemented
        return self.to_session() == other.to_session()

    def __repr__(self):
        return f'<PendingClick {self.id} ({self.latitude}, {self.longitude}) {self.date}>'

    def to_session(self):
        """JSON-safe form stored in the session."""
        return {
            'id': self.id,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'date': self.date.isoformat(),
        }

    @classmethod
    def from_session(cls, data):
        return cls(
            id=data['id'],
            latitude=float(data['latitude']),
            longitude=float(data['longitude']),
            date=date.fromisoformat(data['date']),
        )


class CaptureSession:
    """Single pending-click slot stored in a per-user mapping."""

    def __init__(self, state):
        self._state = state

    @property
    def pending(self):
        data = self._state.get(SESSION_KEY)
        return PendingClick.from_session(data) if data else None

    def set_pending(self, pending_click):
        self._state[SESSION_KEY] = pending_click.to_session()

    def clear(self):
        self._state.pop(SESSION_KEY, None)


class CaptureService:
    """Click/cancel/submit transitions over a CaptureSession."""

    @staticmethod
    def is_control_click(click_id):
        return bool(click_id) and str(click_id).startswith(CONTROL_ID_PREFIX)

    @staticmethod
    def begin(capture_session, latitude, longitude, click_id=None, today=None):
        """
        Register a map click and return the new PendingClick.

        Returns None, leaving any existing pending click in place, when the
        click came from a map control.
        """
        if CaptureService.is_control_click(click_id):
            logger.debug(f"ignoring click on map control {click_id!r}")
            return None

        previous = capture_session.pending
        pending = PendingClick(
            id=str(uuid.uuid4()),
            latitude=float(latitude),
            longitude=float(longitude),
            date=today or date.today(),
        )
        capture_session.set_pending(pending)

        if previous is not None:
            logger.info(f"pending click {previous.id} replaced by {pending.id}")
        else:
            logger.info(f"pending click {pending.id} at ({pending.latitude}, {pending.longitude})")
        return pending

    @staticmethod
    def cancel(capture_session):
        pending = capture_session.pending
        capture_session.clear()
        if pending is not None:
            logger.info(f"pending click {pending.id} cancelled")

    @staticmethod
    def submit(capture_session, value, surface_area, source='', services=()):
        """
        Persist the pending click with the form fields.

        Returns the stored ValueRecord, or None when value, surface_area or
        the pending click is missing (nothing is written and the pending
        click is kept).  Store errors propagate and also keep the pending
        click.
        """
        pending = capture_session.pending
        if value is None or surface_area is None or pending is None:
            return None

        record = ValueRecord(
            id=pending.id,
            latitude=pending.latitude,
            longitude=pending.longitude,
            value=float(value),
            capture_date=pending.date.strftime('%Y-%m-%d'),
            source=Source(source or '').value,
            services=serialize_services(services),
            surface_area=float(surface_area),
        )
        StoreService.append(record)
        capture_session.clear()
        return record
