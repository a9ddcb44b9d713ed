"""
REPORT ROUTES
=============

Analytics, health and service info.
"""

import time

from flask import Blueprint, current_app

from chitfund import utils
from chitfund.routes.helpers import api_response
from chitfund.services.analytics_service import get_analytics

reports_bp = Blueprint('reports', __name__)

STARTED_AT = time.monotonic()


@reports_bp.route('/', methods=['GET'])
def index():
    """Service information"""
    return api_response({
        'service': 'Chit Fund API Server',
        'version': current_app.config['APP_VERSION'],
        'health': '/health',
        'timestamp': utils.isoformat_z(utils.utcnow()),
        'environment': current_app.config['APP_ENV'],
    })


@reports_bp.route('/health', methods=['GET'])
def health():
    """Liveness check"""
    return api_response({
        'status': 'ok',
        'timestamp': utils.isoformat_z(utils.utcnow()),
        'uptime': round(time.monotonic() - STARTED_AT, 3),
        'environment': current_app.config['APP_ENV'],
        'version': current_app.config['APP_VERSION'],
    }, "Service is healthy")


# ============== ANALYTICS ==============
@reports_bp.route('/analytics', methods=['GET'])
def analytics():
    """Scheme-wide counts and totals"""
    return api_response(get_analytics())
