"""
CHIT PAYMENT SERVICE
====================

Applies a payment to the most recently created unpaid installment
of a (user, chit) pair.

BUSINESS RULES:
1. Overpayment is accepted; balance goes negative
2. is_paid flips once amount_paid reaches due_amount
3. paid_on is stamped on the call that completes the installment, never again
4. transaction_history is append-only
"""

import logging

from chitfund import utils
from chitfund.models import ChitPayment
from chitfund.services.exceptions import InvalidAmountError, NotFoundError
from chitfund.services.persistence import retry_on_conflict, run_query

logger = logging.getLogger(__name__)


def find_pending_chit_payment(user_id, chit_id):
    """Most recently created unpaid installment for the pair, or None"""
    return ChitPayment.query.filter_by(
        user_id=user_id,
        chit_id=chit_id,
        is_paid=False
    ).order_by(
        ChitPayment.created_at.desc(),
        ChitPayment.id.desc()
    ).first()


# ============================================================
# APPLY CHIT PAYMENT
# ============================================================

def apply_chit_payment(user_id, chit_id, amount, payment_mode):
    """
    Record a payment against the pending installment.

    Returns the updated installment as a dict.
    Raises NotFoundError when nothing is pending.
    """
    if not amount or amount <= 0:
        raise InvalidAmountError("Amount must be greater than 0")

    def apply():
        payment = find_pending_chit_payment(user_id, chit_id)
        if not payment:
            raise NotFoundError("No pending payment found for this user and chit")

        now = utils.utcnow()
        new_amount_paid = payment.amount_paid + amount
        is_paid = new_amount_paid >= payment.due_amount

        payment.amount_paid = new_amount_paid
        payment.balance = payment.due_amount - new_amount_paid
        payment.is_paid = is_paid
        if is_paid:
            payment.paid_on = now
        payment.payment_mode = payment_mode
        # New list so the JSON column is flagged dirty
        payment.transaction_history = (payment.transaction_history or []) + [{
            'timestamp': utils.isoformat_z(now),
            'amount': amount,
            'mode': payment_mode,
        }]
        return payment

    payment = retry_on_conflict(apply, step="update chit payment")
    result = run_query(lambda: serialize_chit_payment_result(payment),
                       step="retrieve updated payment")

    logger.info("Chit payment of %s via %s applied to chit %s week %s (balance %s, paid=%s)",
                amount, payment_mode, chit_id, result['weekly_installment'],
                result['balance'], result['is_paid'])
    return result


def serialize_chit_payment_result(payment):
    return {
        'payment_id': payment.id,
        'user_id': payment.user_id,
        'chit_id': payment.chit_id,
        'due_amount': payment.due_amount,
        'amount_paid': payment.amount_paid,
        'balance': payment.balance or 0,
        'is_paid': payment.is_paid,
        'paid_on': utils.isoformat_z(payment.paid_on) or '',
        'payment_mode': payment.payment_mode or '',
        'weekly_installment': payment.weekly_installment,
        'transaction_history': payment.transaction_history or [],
    }


def serialize_chit_payment(payment):
    """Full row, as listed by the weekly cycle and user details"""
    return {
        'id': payment.id,
        'created_at': utils.isoformat_z(payment.created_at),
        'user_id': payment.user_id,
        'chit_id': payment.chit_id,
        'due_amount': payment.due_amount,
        'amount_paid': payment.amount_paid,
        'balance': payment.balance,
        'weekly_installment': payment.weekly_installment,
        'payment_mode': payment.payment_mode,
        'paid_on': utils.isoformat_z(payment.paid_on),
        'is_paid': payment.is_paid,
        'transaction_history': payment.transaction_history,
    }
