"""
PERSISTENCE HELPERS
===================

Every versioned model issues `UPDATE ... WHERE id = :id AND version = :v`.
When that matches no row, SQLAlchemy raises StaleDataError at flush time;
`retry_on_conflict` re-runs the whole read-modify-write in that case.
"""

import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from chitfund.extensions import db
from chitfund.services.exceptions import LedgerError, PersistenceError

logger = logging.getLogger(__name__)


def retry_on_conflict(operation, step, max_attempts=None):
    """
    Run `operation` and commit, re-running it if another writer got there first.

    `operation` must re-read its rows on every call. Returns whatever the last
    successful call returned. Domain errors roll back and propagate untouched;
    storage errors and exhausted retries surface as PersistenceError.
    """
    if max_attempts is None:
        max_attempts = current_app.config.get('LEDGER_MAX_ATTEMPTS', 3)

    for attempt in range(1, max_attempts + 1):
        try:
            result = operation()
            db.session.commit()
            return result

        except StaleDataError:
            db.session.rollback()
            logger.warning("%s: row changed concurrently (attempt %d of %d)",
                           step, attempt, max_attempts)

        except LedgerError:
            db.session.rollback()
            raise

        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("%s: storage failure", step)
            raise PersistenceError(f"Failed to {step}: {str(e)}") from e

    raise PersistenceError(
        f"Failed to {step}: record kept changing, gave up after {max_attempts} attempts"
    )


def run_query(query, step):
    """Execute a read, wrapping storage failures as PersistenceError."""
    try:
        return query()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("%s: storage failure", step)
        raise PersistenceError(f"Failed to {step}: {str(e)}") from e
