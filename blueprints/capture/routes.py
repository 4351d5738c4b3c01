"""
Routes for the capture workflow

The map page posts here: a click opens the modal form, Cancel discards the
pending click and Save persists it.  All responses are JSON; the modal body
is returned pre-rendered as ``form_html``.
"""
import math

from flask import current_app, jsonify, render_template, request, session

from blueprints.capture import capture_bp
from blueprints.capture.forms import CaptureForm
from extensions import limiter
from services.capture_service import CaptureService, CaptureSession
from services.map_service import build_marker


def _capture_rate_limit():
    return current_app.config['CAPTURE_RATE_LIMIT']


def _payload():
    """Accept both JSON bodies and regular form posts"""
    return request.get_json(silent=True) or request.form


def _valid_coordinates(latitude, longitude):
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


@capture_bp.route('/click', methods=['POST'])
@limiter.limit(_capture_rate_limit)
def click():
    """Map click -> pending click + empty capture form"""
    data = _payload()
    try:
        latitude = float(data['latitude'])
        longitude = float(data['longitude'])
    except (KeyError, TypeError, ValueError):
        return jsonify({'error': 'latitude and longitude are required numbers'}), 400
    if not _valid_coordinates(latitude, longitude):
        return jsonify({'error': 'latitude must be within [-90, 90] and longitude within [-180, 180]'}), 400

    pending = CaptureService.begin(
        CaptureSession(session),
        latitude,
        longitude,
        click_id=data.get('id'),
    )
    if pending is None:
        return jsonify({'opened': False})

    form = CaptureForm(formdata=None)
    return jsonify({
        'opened': True,
        'pending': pending.to_session(),
        'form_html': render_template('capture/_form.html', form=form),
    })


@capture_bp.route('/cancel', methods=['POST'])
def cancel():
    """Close the form without saving"""
    CaptureService.cancel(CaptureSession(session))
    return jsonify({'cancelled': True})


@capture_bp.route('/save', methods=['POST'])
@limiter.limit(_capture_rate_limit)
def save():
    """Validate the form and persist the pending click"""
    form = CaptureForm()
    capture_session = CaptureSession(session)

    record = None
    if form.validate_on_submit():
        record = CaptureService.submit(
            capture_session,
            value=form.value.data,
            surface_area=form.surface_area.data,
            source=form.source.data,
            services=form.services.data,
        )

    if record is None:
        # Form stays open; only the form's own validation messages are shown
        errors = dict(form.errors)
        if capture_session.pending is None:
            errors['pending'] = ['Click on the map to choose a location first.']
        current_app.logger.debug(f'capture save rejected: {errors}')
        return jsonify({
            'saved': False,
            'errors': errors,
            'form_html': render_template('capture/_form.html', form=form),
        }), 422

    return jsonify({
        'saved': True,
        'record': record.to_dict(),
        'marker': build_marker(record),
    }), 201
