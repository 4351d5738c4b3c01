from flask import current_app, jsonify, render_template, request, session

from blueprints.map import map_bp
from services.map_service import (
    DEFAULT_BASEMAP,
    UnknownBasemapError,
    build_markers,
    get_basemap,
    list_basemaps,
)
from services.store_service import StoreService

BASEMAP_SESSION_KEY = 'basemap'


def _selected_basemap():
    """Basemap remembered in the session, falling back to the configured default"""
    key = session.get(BASEMAP_SESSION_KEY) or current_app.config.get('MAP_DEFAULT_BASEMAP', DEFAULT_BASEMAP)
    try:
        return get_basemap(key)
    except UnknownBasemapError:
        return get_basemap(DEFAULT_BASEMAP)


@map_bp.route('/')
def index():
    """Map page with every stored record as a marker"""
    records = StoreService.load_all()
    lat, lng = current_app.config['MAP_DEFAULT_CENTER']

    return render_template(
        'map/index.html',
        markers=build_markers(records),
        basemaps=list_basemaps(),
        selected_basemap=_selected_basemap()['key'],
        center={'lat': lat, 'lng': lng},
        zoom=current_app.config['MAP_DEFAULT_ZOOM'],
    )


@map_bp.route('/api/records')
def records():
    """All stored records plus their marker payloads"""
    records = StoreService.load_all()
    return jsonify({
        'count': len(records),
        'records': [r.to_dict() for r in records],
        'markers': build_markers(records),
    })


@map_bp.route('/api/basemaps')
def basemaps():
    return jsonify({
        'selected': _selected_basemap()['key'],
        'basemaps': list_basemaps(),
    })


@map_bp.route('/map/basemap', methods=['POST'])
def select_basemap():
    """Remember the basemap choice. Only the tile layer changes client-side."""
    data = request.get_json(silent=True) or request.form
    key = data.get('basemap', '')
    try:
        provider = get_basemap(key)
    except UnknownBasemapError as e:
        return jsonify({'error': str(e)}), 404

    session[BASEMAP_SESSION_KEY] = provider['key']
    return jsonify(provider)


@map_bp.route('/health')
def health():
    return jsonify({'status': 'ok', 'records': StoreService.count()})
