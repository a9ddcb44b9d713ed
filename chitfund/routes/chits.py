"""
CHIT ROUTES
===========

Unpaid installment report and force closure of chits.
"""

from flask import Blueprint

from chitfund.routes.helpers import api_response, json_body, require_fields
from chitfund.services.analytics_service import get_unpaid_chits_summary
from chitfund.services.deactivation_service import deactivate_chit

chits_bp = Blueprint('chits', __name__, url_prefix='/chits')


# ============== UNPAID CHITS ==============
@chits_bp.route('/unpaid', methods=['GET'])
def unpaid():
    """Unpaid installments grouped by member"""
    return api_response(get_unpaid_chits_summary(), "Unpaid chits retrieved successfully")


# ============== FORCE CLOSE CHIT (Admin) ==============
@chits_bp.route('/deactive', methods=['POST'])
def deactive():
    """Force-close a chit regardless of unpaid installments"""
    payload = json_body()
    chit_id, = require_fields(payload, 'chit_id')

    result = deactivate_chit(chit_id, reason=payload.get('reason'))
    return api_response(result, "Chit deactivated successfully")
