# Models package - Import all models for Flask-SQLAlchemy

from models.value_records import (
    ValueRecord,
    Source,
    Service,
    serialize_services,
    parse_services,
)

__all__ = [
    'ValueRecord',
    'Source',
    'Service',
    'serialize_services',
    'parse_services',
]
