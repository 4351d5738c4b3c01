"""
Tests for basemap lookup, number formatting and marker popups.
"""
import pytest

from services.map_service import (
    BASEMAP_PROVIDERS,
    DEFAULT_BASEMAP,
    UnknownBasemapError,
    build_marker,
    build_markers,
    format_currency,
    format_number,
    format_popup,
    get_basemap,
    list_basemaps,
)
from services.store_service import StoreService


# ---------------------------------------------------------------------------
# Basemaps
# ---------------------------------------------------------------------------

class TestBasemaps:
    def test_exactly_four_providers(self):
        assert list(BASEMAP_PROVIDERS) == [
            'OpenStreetMap', 'Esri.WorldImagery', 'CartoDB.Positron', 'OpenTopoMap',
        ]

    def test_default_is_openstreetmap(self):
        assert DEFAULT_BASEMAP == 'OpenStreetMap'

    def test_get_basemap_includes_key(self):
        provider = get_basemap('Esri.WorldImagery')
        assert provider['key'] == 'Esri.WorldImagery'
        assert 'World_Imagery' in provider['url']

    def test_unknown_basemap_raises(self):
        with pytest.raises(UnknownBasemapError):
            get_basemap('Stamen.Watercolor')

    def test_list_basemaps_preserves_order(self):
        assert [b['key'] for b in list_basemaps()] == list(BASEMAP_PROVIDERS)

    def test_every_provider_has_tile_settings(self):
        for provider in list_basemaps():
            assert '{z}' in provider['url']
            assert provider['attribution']
            assert provider['max_zoom'] > 0


# ---------------------------------------------------------------------------
# Number formatting
# ---------------------------------------------------------------------------

class TestFormatting:
    @pytest.mark.parametrize('value, expected', [
        (120000, '$120.000'),
        (120000.0, '$120.000'),
        (1234.5, '$1.234,5'),
        (1234.567, '$1.234,567'),
        (1234567.25, '$1.234.567'),
        (12345678, '$12.345.678'),
        (999, '$999'),
        (0, '$0'),
    ])
    def test_format_currency(self, value, expected):
        assert format_currency(value) == expected

    def test_format_currency_none(self):
        assert format_currency(None) == ''

    def test_format_currency_non_finite(self):
        assert format_currency(float('inf')) == '$'

    @pytest.mark.parametrize('value, expected', [
        (300.0, '300'),
        (12.5, '12,5'),
        (1500, '1500'),
        (0.125, '0,125'),
        (None, ''),
    ])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected


# ---------------------------------------------------------------------------
# Popups & markers
# ---------------------------------------------------------------------------

class TestPopup:
    def test_popup_content(self):
        popup = format_popup(120000, 300, 'Sale', ['Water', 'Electricity'])
        assert popup == (
            '<b>Value:</b> $120.000<br>'
            '<b>Surface:</b> 300 m²<br>'
            '<b>Source:</b> Sale<br>'
            '<b>Services:</b> Water, Electricity'
        )

    def test_popup_accepts_stored_services_text(self):
        popup = format_popup(1, 1, '', 'Gas, Sewage')
        assert '<b>Services:</b> Gas, Sewage' in popup

    def test_popup_escapes_text(self):
        popup = format_popup(1, 1, '<script>alert(1)</script>', [])
        assert '<script>' not in popup
        assert '&lt;script&gt;' in popup

    def test_build_marker(self, app, make_record):
        record = make_record(id='m-1', latitude=-34.6, longitude=-58.38, value=120000.0,
                             surface_area=300.0, source='Sale', services='Water')
        marker = build_marker(record)

        assert marker['id'] == 'm-1'
        assert marker['lat'] == -34.6
        assert marker['lng'] == -58.38
        assert '$120.000' in marker['popup']
        assert '300 m²' in marker['popup']

    def test_build_markers_one_per_record(self, app, make_record):
        records = [make_record(), make_record(), make_record()]
        assert [m['id'] for m in build_markers(records)] == [r.id for r in records]

    def test_build_markers_skips_records_without_coordinates(self, app, make_record):
        placed = make_record(id='placed')
        make_record(id='no-lat', latitude=None)
        make_record(id='no-lng', longitude=None)

        markers = build_markers(StoreService.load_all())

        assert [m['id'] for m in markers] == [placed.id]
        assert all(m['lat'] is not None and m['lng'] is not None for m in markers)
