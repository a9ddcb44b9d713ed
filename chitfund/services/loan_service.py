"""
LOAN SERVICE
============

Handles:
- Creating loan applications
- Applying payments against an active loan

CRITICAL BUSINESS RULES:
1. A payment may never exceed the remaining balance
2. borrowed_amount == balance + amount_paid after every payment
3. A loan paid down to zero closes itself in the same update
4. History timestamps are stored shifted to IST (kept for compatibility)
"""

import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import SQLAlchemyError

from chitfund import utils
from chitfund.extensions import db
from chitfund.models import Loan, User
from chitfund.services.exceptions import (
    DataIntegrityError, InvalidAmountError, LedgerError, NotFoundError,
    PersistenceError, ValidationError
)
from chitfund.services.persistence import retry_on_conflict, run_query

logger = logging.getLogger(__name__)


# ============================================================
# APPLY FOR LOAN
# ============================================================

def apply_for_loan(user_id, interest_rate, interest_type, borrowed_amount):
    """
    Open a new loan for an existing user.
    Balance starts at the borrowed amount.
    """
    if isinstance(borrowed_amount, bool) or not isinstance(borrowed_amount, int) \
            or borrowed_amount <= 0:
        raise InvalidAmountError("Borrowed amount must be a positive whole number")

    if interest_type not in Loan.INTEREST_TYPES:
        raise ValidationError(
            f"Interest type must be one of: {', '.join(Loan.INTEREST_TYPES)}"
        )

    interest_rate = str(interest_rate).strip()
    try:
        rate = Decimal(interest_rate)
    except InvalidOperation:
        rate = None
    if rate is None or not rate.is_finite() or rate < 0:
        raise ValidationError("Interest rate must be a non-negative number")

    try:
        user = User.query.filter_by(user_id=user_id).first()
        if not user:
            raise NotFoundError("User not found")

        loan = Loan(
            user_id=user_id,
            interest_rate=interest_rate,
            interest_type=interest_type,
            borrowed_amount=borrowed_amount,
            balance=borrowed_amount,
            amount_paid=0,
            is_active=True,
            is_paid=False,
            transaction_history=[]
        )
        db.session.add(loan)
        db.session.commit()

        logger.info("Loan %s of %s opened for user %s", loan.loan_id, borrowed_amount, user_id)

        return {
            'loan_id': loan.loan_id,
            'user_id': loan.user_id,
            'interest_rate': loan.interest_rate,
            'interest_type': loan.interest_type,
            'is_active': loan.is_active,
            'created_at': utils.isoformat_z(loan.created_at),
            'borrowed_amount': loan.borrowed_amount,
            'balance': loan.balance,
        }

    except LedgerError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Loan application failed for user %s", user_id)
        raise PersistenceError(f"Failed to create loan application: {str(e)}") from e


# ============================================================
# APPLY LOAN PAYMENT
# ============================================================

def find_active_loans(user_id, loan_id):
    return Loan.query.filter_by(
        user_id=user_id,
        loan_id=loan_id,
        is_active=True
    ).all()


def apply_loan_payment(user_id, loan_id, amount, payment_mode):
    """
    Pay down an active loan.

    Raises:
    - NotFoundError: no active loan for this user/loan pair
    - DataIntegrityError: more than one active loan matched
    - InvalidAmountError: amount above the remaining balance (row untouched)
    """
    if not amount or amount <= 0:
        raise InvalidAmountError("Amount must be greater than 0")

    def apply():
        loans = find_active_loans(user_id, loan_id)
        if not loans:
            raise NotFoundError("No active loan found for this user and loan ID")
        if len(loans) > 1:
            logger.error("%d active loans share loan_id %s", len(loans), loan_id)
            raise DataIntegrityError("Multiple active loans found - data integrity issue")

        loan = loans[0]
        if amount > loan.balance:
            raise InvalidAmountError(
                f"Payment amount ({amount}) cannot exceed remaining balance ({loan.balance})"
            )

        new_balance = loan.balance - amount
        is_fully_paid = new_balance == 0

        loan.balance = new_balance
        loan.amount_paid = (loan.amount_paid or 0) + amount
        loan.is_active = not is_fully_paid
        loan.is_paid = is_fully_paid
        loan.transaction_history = (loan.transaction_history or []) + [{
            'timestamp': utils.ist_shifted_isoformat(utils.utcnow()),
            'amount': amount,
            'mode': payment_mode,
        }]
        return loan

    loan = retry_on_conflict(apply, step="update loan")
    result = run_query(lambda: serialize_loan_payment_result(loan, payment_mode),
                       step="retrieve updated loan")

    if result['is_paid']:
        logger.info("Loan %s fully paid and closed", loan_id)
    else:
        logger.info("Loan payment of %s via %s applied to loan %s (balance %s)",
                    amount, payment_mode, loan_id, result['balance'])
    return result


def serialize_loan_payment_result(loan, payment_mode):
    return {
        'loan_id': loan.loan_id,
        'user_id': loan.user_id,
        'borrowed_amount': loan.borrowed_amount or 0,
        'balance': loan.balance,
        'amount_paid': loan.amount_paid,
        'is_active': loan.is_active,
        'is_paid': loan.is_paid,
        'payment_mode': payment_mode,
        'transaction_history': loan.transaction_history or [],
    }


def serialize_loan(loan):
    """Full row, as listed in user details"""
    return {
        'id': loan.id,
        'created_at': utils.isoformat_z(loan.created_at),
        'loan_id': loan.loan_id,
        'is_active': loan.is_active,
        'user_id': loan.user_id,
        'interest_rate': loan.interest_rate,
        'interest_type': loan.interest_type,
        'borrowed_amount': loan.borrowed_amount,
        'balance': loan.balance,
        'amount_paid': loan.amount_paid,
        'transaction_history': loan.transaction_history,
        'is_paid': loan.is_paid,
    }
