"""
ANALYTICS SERVICE
=================

Read-only roll-ups over users, chits, installments and loans.

Each figure comes from its own query. The result is NOT a snapshot:
payments landing between queries can make the figures disagree slightly
with one another. Fine for a reporting endpoint.
"""

import logging

from chitfund.extensions import db
from chitfund.models import Chit, ChitPayment, Loan, User
from chitfund.services.persistence import run_query

logger = logging.getLogger(__name__)


def _count_distinct_users(model):
    return db.session.query(db.func.count(db.distinct(model.user_id))).scalar() or 0


def _sum(column, *criteria):
    return db.session.query(
        db.func.coalesce(db.func.sum(column), 0)
    ).filter(*criteria).scalar() or 0


# ============================================================
# ANALYTICS
# ============================================================

def get_analytics():
    def collect():
        unpaid_chit_payments = ChitPayment.query.filter_by(is_paid=False).count()
        return {
            'total_persons_applied_for_chits': _count_distinct_users(Chit),
            'total_persons_applied_for_loans': _count_distinct_users(Loan),
            'total_number_of_active_chits': Chit.query.filter_by(is_active=True).count(),
            'total_pending_loans': Loan.query.filter_by(is_active=True).count(),
            'total_pending_chits': unpaid_chit_payments,
            'amount_in_chits': _sum(ChitPayment.amount_paid),
            'amount_pending_to_be_paid_chits': _sum(ChitPayment.balance, ChitPayment.is_paid == False),
            'amount_provided_for_loans': _sum(Loan.borrowed_amount),
            'amount_paid_for_loans': _sum(Loan.amount_paid),
            'count_of_unpaid_chits': unpaid_chit_payments,
            'count_of_unpaid_loans': Loan.query.filter_by(is_paid=False).count(),
        }

    data = run_query(collect, step="collect analytics data")
    logger.debug("Analytics compiled: %s", data)
    return data


# ============================================================
# UNPAID CHITS REPORT
# ============================================================

def get_unpaid_chits_summary():
    """
    Unpaid installments grouped per user, largest amount first.
    """
    def collect():
        return db.session.query(
            ChitPayment.user_id,
            User.name,
            User.mobile,
            db.func.coalesce(db.func.sum(ChitPayment.balance), 0),
            db.func.count(ChitPayment.id)
        ).join(
            User, User.user_id == ChitPayment.user_id
        ).filter(
            ChitPayment.is_paid == False
        ).group_by(
            ChitPayment.user_id, User.name, User.mobile
        ).all()

    rows = run_query(collect, step="fetch unpaid chits")

    unpaid_chits = sorted(
        [
            {
                'user_id': user_id,
                'name': name,
                'mobile': mobile,
                'total_amount_to_be_paid': total or 0,
                'unpaid_chits_count': count,
            }
            for user_id, name, mobile, total, count in rows
        ],
        key=lambda entry: entry['total_amount_to_be_paid'],
        reverse=True
    )

    return {
        'unpaid_chits': unpaid_chits,
        'total_users_with_unpaid_chits': len(unpaid_chits),
        'total_unpaid_amount': sum(e['total_amount_to_be_paid'] for e in unpaid_chits),
    }
