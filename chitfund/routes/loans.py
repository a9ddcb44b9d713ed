"""
LOAN ROUTES
===========

Uses loan_service for applications and payments.
Force closure goes through deactivation_service.
"""

from flask import Blueprint

from chitfund.routes.helpers import api_response, json_body, positive_amount, require_fields
from chitfund.services.deactivation_service import deactivate_loan
from chitfund.services.loan_service import apply_for_loan, apply_loan_payment

loans_bp = Blueprint('loans', __name__, url_prefix='/loan')


# ============== APPLY FOR LOAN ==============
@loans_bp.route('/apply', methods=['POST'])
def apply():
    """Open a new loan for an existing user"""
    payload = json_body()
    user_id, interest_rate, interest_type, borrowed_amount = require_fields(
        payload, 'user_id', 'interest_rate', 'interest_type', 'borrowed_amount'
    )
    positive_amount(borrowed_amount, field='Borrowed amount')

    loan = apply_for_loan(
        user_id=user_id,
        interest_rate=interest_rate,
        interest_type=interest_type,
        borrowed_amount=borrowed_amount
    )
    return api_response(loan, "Loan application created successfully", 201)


# ============== PAY LOAN ==============
@loans_bp.route('/pay', methods=['POST'])
def pay():
    """Apply a repayment to an active loan"""
    payload = json_body()
    user_id, loan_id, amount, payment_mode = require_fields(
        payload, 'user_id', 'loan_id', 'amount', 'payment_mode'
    )
    positive_amount(amount)

    result = apply_loan_payment(
        user_id=user_id,
        loan_id=loan_id,
        amount=amount,
        payment_mode=payment_mode
    )

    message = "Loan payment processed successfully" if result['is_active'] \
        else "Loan fully paid and closed"
    return api_response(result, message)


# ============== FORCE CLOSE LOAN (Admin) ==============
@loans_bp.route('/deactive', methods=['POST'])
def deactive():
    """Force-close a loan regardless of its balance"""
    payload = json_body()
    loan_id, = require_fields(payload, 'loan_id')

    result = deactivate_loan(loan_id, reason=payload.get('reason'))
    return api_response(result, "Loan deactivated successfully")
