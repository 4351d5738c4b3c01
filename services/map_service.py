"""
Map Service
===========
Everything the map page needs from the server side: the four basemap tile
providers the selector offers, and the marker/popup payload built from
stored ValueRecords.

Number formatting
-----------------
Popups use the Latin American convention: '.' groups thousands and ','
marks decimals.  Numbers keep up to seven significant digits with trailing
zero decimals dropped, so 120000 renders as '$120.000', 1234.567 as
'$1.234,567' and 1234567.25 as '$1.234.567'.  Surface areas are shown
without thousands grouping ('300 m²').

Records missing a coordinate are left off the map.
"""
import logging
import math

from markupsafe import Markup, escape

from models.value_records import SERVICES_SEPARATOR

logger = logging.getLogger(__name__)


BASEMAP_PROVIDERS = {
    'OpenStreetMap': {
        'label': 'Street map (OpenStreetMap)',
        'url': 'https://tile.openstreetmap.org/{z}/{x}/{y}.png',
        'attribution': '&copy; OpenStreetMap contributors',
        'max_zoom': 19,
    },
    'Esri.WorldImagery': {
        'label': 'Satellite',
        'url': 'https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}',
        'attribution': 'Tiles &copy; Esri, Maxar, Earthstar Geographics, and the GIS User Community',
        'max_zoom': 19,
    },
    'CartoDB.Positron': {
        'label': 'CartoDB Positron (Light)',
        'url': 'https://{s}.basemaps.cartocdn.com/light_all/{z}/{x}/{y}{r}.png',
        'attribution': '&copy; OpenStreetMap contributors &copy; CARTO',
        'max_zoom': 20,
        'subdomains': 'abcd',
    },
    'OpenTopoMap': {
        'label': 'OpenTopoMap (Topographic)',
        'url': 'https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png',
        'attribution': '&copy; OpenStreetMap contributors, &copy; OpenTopoMap (CC-BY-SA)',
        'max_zoom': 17,
        'subdomains': 'abc',
    },
}

DEFAULT_BASEMAP = 'OpenStreetMap'


class UnknownBasemapError(ValueError):
    """Raised when a basemap key is not one of BASEMAP_PROVIDERS."""


def get_basemap(key):
    """Return the provider config for ``key`` (with the key included)."""
    try:
        provider = BASEMAP_PROVIDERS[key]
    except KeyError:
        raise UnknownBasemapError(f"Unknown basemap provider: {key!r}") from None
    return dict(provider, key=key)


def list_basemaps():
    return [get_basemap(key) for key in BASEMAP_PROVIDERS]


# ---------------------------------------------------------------------------
# Number formatting
# ---------------------------------------------------------------------------

_SWAP_SEPARATORS = str.maketrans({',': '.', '.': ','})
SIGNIFICANT_DIGITS = 7


def _localize(value, grouping):
    if not math.isfinite(value):
        return ''
    # Integer digits are never dropped, only decimals beyond seven significant digits
    integer_digits = len(str(int(abs(value)))) if abs(value) >= 1 else 0
    decimals = max(0, SIGNIFICANT_DIGITS - integer_digits)
    text = f"{value:,.{decimals}f}" if grouping else f"{value:.{decimals}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text.translate(_SWAP_SEPARATORS)


def format_number(value):
    """300.0 -> '300', 12.5 -> '12,5', None -> ''"""
    if value is None:
        return ''
    return _localize(float(value), grouping=False)


def format_currency(value):
    """120000 -> '$120.000', 1234.5 -> '$1.234,5', None -> ''"""
    if value is None:
        return ''
    return '$' + _localize(float(value), grouping=True)


# ---------------------------------------------------------------------------
# Popups & markers
# ---------------------------------------------------------------------------

def format_popup(value, surface_area, source, services):
    """Build the HTML popup shown on a marker. Text fields are escaped."""
    if not isinstance(services, str):
        services = SERVICES_SEPARATOR.join(services or [])
    surface = format_number(surface_area)
    return str(
        Markup('<b>Value:</b> {}<br>'
               '<b>Surface:</b> {} m²<br>'
               '<b>Source:</b> {}<br>'
               '<b>Services:</b> {}').format(
            format_currency(value),
            surface,
            escape(source or ''),
            escape(services),
        )
    )


def build_marker(record):
    return {
        'id': record.id,
        'lat': record.latitude,
        'lng': record.longitude,
        'popup': format_popup(record.value, record.surface_area, record.source, record.services),
    }


def build_markers(records):
    markers = []
    for record in records:
        if record.latitude is None or record.longitude is None:
            logger.warning(f"value record {record.id} has no coordinates, not shown on the map")
            continue
        markers.append(build_marker(record))
    return markers
