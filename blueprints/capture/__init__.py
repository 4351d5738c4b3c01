"""
Capture blueprint: map click -> modal form -> saved record
"""
from flask import Blueprint

capture_bp = Blueprint('capture', __name__, url_prefix='/capture')

from . import routes
