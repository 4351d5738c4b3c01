from enum import Enum

from extensions import db


class Source(str, Enum):
    """Where the land value came from. NONE is the form's empty choice."""
    NONE = ''
    PUBLISHED_OFFER = 'Published offer'
    APPRAISAL = 'Appraisal'
    SALE = 'Sale'


class Service(str, Enum):
    """Urban services available at the plot"""
    WATER = 'Water'
    ELECTRICITY = 'Electricity'
    GAS = 'Gas'
    SEWAGE = 'Sewage'
    PAVING = 'Paving'


SERVICES_SEPARATOR = ', '


def serialize_services(services):
    """
    Join selected services into the stored text form.

    Output follows the canonical Service order and drops duplicates, so
    ['Electricity', 'Water', 'Water'] is stored as 'Water, Electricity'.
    Unknown names raise ValueError.
    """
    selected = {Service(s) for s in (services or [])}
    return SERVICES_SEPARATOR.join(s.value for s in Service if s in selected)


def parse_services(text):
    """Split stored services text back into a list of names ('' -> [])."""
    if not text:
        return []
    return [part.strip() for part in text.split(',') if part.strip()]


class ValueRecord(db.Model):
    """
    One land value observation captured by clicking on the map.

    Rows are append-only: the application never updates or deletes them.
    value and surface_area are required by the capture form, not by the
    schema, so legacy or externally loaded rows may hold NULLs.
    """
    __tablename__ = 'value_records'

    id = db.Column(db.Text, primary_key=True)  # uuid4, generated at click time
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    value = db.Column(db.Float)
    capture_date = db.Column(db.Text)  # 'YYYY-MM-DD'
    source = db.Column(db.Text, default=Source.NONE.value)
    services = db.Column(db.Text, default='')  # comma-joined Service values
    surface_area = db.Column(db.Float)

    @property
    def service_list(self):
        return parse_services(self.services)

    def __repr__(self):
        return f'<ValueRecord {self.id} ({self.latitude}, {self.longitude}) ${self.value}>'

    def to_dict(self):
        return {
            'id': self.id,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'value': self.value,
            'capture_date': self.capture_date,
            'source': self.source or '',
            'services': self.service_list,
            'surface_area': self.surface_area,
        }
