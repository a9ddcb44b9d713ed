"""
ONBOARDING SERVICE
==================

Creates a user together with their chit subscription.
Both rows commit together or not at all.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from chitfund import utils
from chitfund.extensions import db
from chitfund.models import Chit, User
from chitfund.services.exceptions import (
    ConflictError, LedgerError, PersistenceError, ValidationError
)

logger = logging.getLogger(__name__)

# 10-digit numbers only
MOBILE_MIN = 1_000_000_000
MOBILE_MAX = 9_999_999_999

DUPLICATE_MOBILE_DETAIL = "A user with this mobile number already exists"


def _is_whole_number(value):
    return isinstance(value, int) and not isinstance(value, bool)


def validate_onboarding(name, total_chits, mobile):
    if not name or total_chits is None or mobile is None:
        raise ValidationError("Name, total_chits, and mobile are required")

    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name must be a non-empty string")

    if not _is_whole_number(total_chits) or total_chits <= 0:
        raise ValidationError("Total chits must be a positive integer")

    if not _is_whole_number(mobile) or not MOBILE_MIN <= mobile <= MOBILE_MAX:
        raise ValidationError(
            "Mobile must be a valid positive number and it should have 10 digits accurate"
        )


def mobile_exists(mobile):
    return User.query.filter_by(mobile=mobile).first() is not None


# ============================================================
# ONBOARD USER
# ============================================================

def onboard_user(name, total_chits, mobile):
    """
    Register a user and open one chit with the same number of units.

    Raises ValidationError on bad input and ConflictError when the
    mobile number is already registered.
    """
    validate_onboarding(name, total_chits, mobile)
    name = name.strip()

    try:
        if mobile_exists(mobile):
            raise ConflictError("Mobile number already exists", detail=DUPLICATE_MOBILE_DETAIL)

        user = User(name=name, total_chits=total_chits, mobile=mobile)
        db.session.add(user)
        db.session.flush()

        chit = Chit(user_id=user.user_id, total_chits=total_chits, is_active=True)
        db.session.add(chit)
        db.session.commit()

    except LedgerError:
        db.session.rollback()
        raise
    except IntegrityError as e:
        # Lost a race with another onboarding of the same mobile
        db.session.rollback()
        raise ConflictError("Mobile number already exists", detail=DUPLICATE_MOBILE_DETAIL) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Onboarding failed for %s", name)
        raise PersistenceError(f"Failed to create user and chit: {str(e)}") from e

    logger.info("Onboarded user %s with chit %s (%s units)",
                user.user_id, chit.chit_id, total_chits)

    return {
        'user_id': user.user_id,
        'name': user.name,
        'total_chits': user.total_chits,
        'mobile': user.mobile,
        'created_at': utils.isoformat_z(user.created_at),
        'chit': {
            'chit_id': chit.chit_id,
            'total_chits': chit.total_chits,
            'is_active': chit.is_active,
            'user_id': chit.user_id,
            'created_at': utils.isoformat_z(chit.created_at),
        },
    }
