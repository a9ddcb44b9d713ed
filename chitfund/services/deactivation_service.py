"""
DEACTIVATION SERVICE
====================

Force closure of chits and loans. Balances are left exactly as they
are: closing with money outstanding is allowed.

The caller's `reason` is echoed back in the result but not stored.
"""

import logging

from chitfund import utils
from chitfund.models import Chit, Loan
from chitfund.services.exceptions import AlreadyInactiveError, NotFoundError
from chitfund.services.persistence import retry_on_conflict

logger = logging.getLogger(__name__)


def _deactivate(model, key_name, key_value, label):
    def close():
        record = model.query.filter_by(**{key_name: key_value}).first()
        if not record:
            raise NotFoundError(f"{label} not found")
        if not record.is_active:
            raise AlreadyInactiveError(f"{label} is already inactive")

        record.is_active = False
        record.updated_at = utils.utcnow()
        return record

    record = retry_on_conflict(close, step=f"deactivate {label.lower()}")
    logger.info("%s %s force-closed", label, key_value)
    return record


def deactivate_chit(chit_id, reason=None):
    """Close a chit; it gets no further weekly installments."""
    chit = _deactivate(Chit, 'chit_id', chit_id, 'Chit')
    return {
        'chit_id': chit.chit_id,
        'user_id': chit.user_id,
        'is_active': chit.is_active,
        'deactivated_at': utils.format_ist(chit.updated_at),
        'reason': reason,
    }


def deactivate_loan(loan_id, reason=None):
    """Close a loan regardless of its remaining balance."""
    loan = _deactivate(Loan, 'loan_id', loan_id, 'Loan')
    return {
        'loan_id': loan.loan_id,
        'user_id': loan.user_id,
        'is_active': loan.is_active,
        'deactivated_at': utils.format_ist(loan.updated_at),
        'reason': reason,
    }
