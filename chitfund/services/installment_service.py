"""
INSTALLMENT SERVICE
===================

Weekly batch: one ChitPayment per active chit, then advance the
global week counter.

CRITICAL RULES:
1. Insert-then-advance. The batch rows and the counter bump commit in
   ONE transaction, so a failed insert never moves the counter
2. No active chits -> nothing inserted, counter untouched
3. All-or-nothing for the batch; no per-chit skipping
4. Runs must be serialized by the caller (one admin trigger per week)
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from chitfund.extensions import db
from chitfund.models import Chit, ChitPayment, ConfigEntry
from chitfund.services.chit_payment_service import serialize_chit_payment
from chitfund.services.exceptions import ConfigError, PersistenceError
from chitfund.services.persistence import run_query

logger = logging.getLogger(__name__)

# Each chit unit is worth 100 per week
CHIT_UNIT_VALUE = 100


def get_week_counter():
    """Return (entry, week). Raises ConfigError if missing or unparseable."""
    entry = run_query(
        lambda: ConfigEntry.query.filter_by(attribute=ConfigEntry.WEEK_COUNTER).first(),
        step="fetch current week"
    )

    if not entry or not entry.value:
        raise ConfigError("Chits installment configuration not found")

    try:
        week = int(entry.value.strip())
    except ValueError:
        raise ConfigError(f"Chits installment configuration is not a number: {entry.value!r}")

    return entry, week


def get_active_chits():
    return run_query(
        lambda: Chit.query.filter_by(is_active=True).order_by(Chit.id).all(),
        step="fetch active chits"
    )


def build_weekly_payment(chit, week):
    due_amount = chit.total_chits * CHIT_UNIT_VALUE
    return ChitPayment(
        user_id=chit.user_id,
        chit_id=chit.chit_id,
        due_amount=due_amount,
        amount_paid=0,
        balance=due_amount,
        weekly_installment=week,
        is_paid=False,
        transaction_history=[]
    )


# ============================================================
# RUN WEEKLY CYCLE
# ============================================================

def run_weekly_cycle():
    """
    Create this week's installments and advance the counter.

    Returns: {message, current_week, payments_created, records}
    """
    entry, current_week = get_week_counter()
    active_chits = get_active_chits()

    if not active_chits:
        logger.info("Weekly cycle for week %s: no active chits, counter left as is", current_week)
        return {
            'message': "No active chits found",
            'current_week': current_week,
            'payments_created': 0,
            'records': [],
        }

    payments = [build_weekly_payment(chit, current_week) for chit in active_chits]

    try:
        db.session.add_all(payments)
        db.session.flush()

        # Versioned UPDATE: fails if another run advanced the counter meanwhile
        entry.value = str(current_week + 1)
        db.session.commit()

    except StaleDataError as e:
        db.session.rollback()
        logger.error("Week counter moved during weekly cycle for week %s; batch discarded",
                     current_week)
        raise PersistenceError(
            "Failed to increment week in config: counter was changed by a concurrent run"
        ) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Weekly cycle for week %s failed", current_week)
        raise PersistenceError(f"Failed to create payment records: {str(e)}") from e

    records = run_query(lambda: [serialize_chit_payment(p) for p in payments],
                        step="retrieve created payment records")

    logger.info("Weekly cycle created %d payment records for week %s",
                len(records), current_week)

    return {
        'message': f"Successfully created {len(records)} payment records for week {current_week}",
        'current_week': current_week,
        'payments_created': len(records),
        'records': records,
    }


# ============================================================
# SEED WEEK COUNTER
# ============================================================

def seed_week_counter(week):
    """Create the week counter if absent. Returns (entry, created)."""
    try:
        entry = ConfigEntry.query.filter_by(attribute=ConfigEntry.WEEK_COUNTER).first()
        if entry:
            return entry, False

        entry = ConfigEntry(attribute=ConfigEntry.WEEK_COUNTER, value=str(week))
        db.session.add(entry)
        db.session.commit()
        return entry, True

    except SQLAlchemyError as e:
        db.session.rollback()
        raise PersistenceError(f"Failed to seed week counter: {str(e)}") from e
