"""
PAYMENT ROUTES
==============

Chit installment payments and the weekly installment batch.
"""

from flask import Blueprint

from chitfund.routes.helpers import api_response, json_body, positive_amount, require_fields
from chitfund.services.chit_payment_service import apply_chit_payment
from chitfund.services.installment_service import run_weekly_cycle

payments_bp = Blueprint('payments', __name__)


# ============== PAY CHIT INSTALLMENT ==============
@payments_bp.route('/pay/chit-funds', methods=['POST'])
def pay_chit():
    """Pay towards the pending installment of a chit"""
    payload = json_body()
    user_id, chit_id, amount, payment_mode = require_fields(
        payload, 'user_id', 'chit_id', 'amount', 'payment_mode'
    )
    positive_amount(amount)

    result = apply_chit_payment(
        user_id=user_id,
        chit_id=chit_id,
        amount=amount,
        payment_mode=payment_mode
    )

    if result['is_paid']:
        message = "Payment completed successfully. Chit is now fully paid."
    else:
        message = "Partial payment processed successfully."
    return api_response(result, message)


# ============== WEEKLY INSTALLMENTS (Admin) ==============
@payments_bp.route('/update/weekly-chits', methods=['POST'])
def weekly_chits():
    """Issue this week's installments for every active chit"""
    result = run_weekly_cycle()
    return api_response(result, "Weekly chits update completed successfully")
