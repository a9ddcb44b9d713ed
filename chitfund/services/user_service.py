"""
USER SERVICE
============

Read-only lookups: user listing, per-user history, search.
"""

import logging
import re

from chitfund import utils
from chitfund.models import ChitPayment, Loan, User
from chitfund.services.chit_payment_service import serialize_chit_payment
from chitfund.services.loan_service import serialize_loan
from chitfund.services.persistence import run_query

logger = logging.getLogger(__name__)

DIGITS_ONLY = re.compile(r'^\d+$')


def serialize_user(user):
    return {
        'user_id': user.user_id,
        'name': user.name,
        'mobile': user.mobile,
        'total_chits': user.total_chits,
    }


def _with_ist_history(record):
    history = record.get('transaction_history')
    if history:
        record['transaction_history'] = [
            dict(entry, timestamp=utils.shift_timestamp_to_ist(entry['timestamp']))
            for entry in history
        ]
    return record


def list_users():
    """All users, newest first"""
    users = run_query(
        lambda: User.query.order_by(User.created_at.desc(), User.id.desc()).all(),
        step="fetch users details"
    )
    return [serialize_user(u) for u in users]


def get_user_details(user_id):
    """
    User plus full chit payment history and loans, newest first.
    Returns None when the user does not exist.

    NOTE: transaction timestamps are shifted +05:30 here for display. Loan
    entries are already stored shifted, so they come out shifted twice.
    """
    user = run_query(lambda: User.query.filter_by(user_id=user_id).first(),
                     step="fetch user details")
    if not user:
        logger.info("No user found with ID: %s", user_id)
        return None

    chit_payments = run_query(
        lambda: ChitPayment.query.filter_by(user_id=user_id)
        .order_by(ChitPayment.created_at.desc(), ChitPayment.id.desc()).all(),
        step="fetch chit payment history"
    )
    loans = run_query(
        lambda: user.loans.order_by(Loan.created_at.desc(), Loan.id.desc()).all(),
        step="fetch loan details"
    )

    details = serialize_user(user)
    details['chit_payment_history'] = [
        _with_ist_history(serialize_chit_payment(p)) for p in chit_payments
    ]
    details['loan_details'] = [_with_ist_history(serialize_loan(l)) for l in loans]
    return details


def search_users(query):
    """Digits-only query matches mobile exactly; anything else is a name substring."""
    query = query.strip()

    def search():
        users = User.query.order_by(User.created_at.desc(), User.id.desc())
        if DIGITS_ONLY.match(query):
            if len(query) > 15:
                return []
            users = users.filter(User.mobile == int(query))
        else:
            users = users.filter(User.name.ilike(f'%{query}%'))
        return users.all()

    results = run_query(search, step="search users")
    logger.debug("Search %r matched %d users", query, len(results))
    return [serialize_user(u) for u in results]
