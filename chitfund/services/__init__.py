"""
Services Package
================

Business logic layer for the chit fund ledger.

All balance and status changes are handled here.
Routes should call these services, not manipulate models directly.
"""

from chitfund.services.exceptions import (
    LedgerError,
    NotFoundError,
    AlreadyInactiveError,
    InvalidAmountError,
    DataIntegrityError,
    ConfigError,
    PersistenceError,
    ValidationError,
    ConflictError
)

from chitfund.services.chit_payment_service import apply_chit_payment

from chitfund.services.loan_service import (
    apply_for_loan,
    apply_loan_payment
)

from chitfund.services.installment_service import (
    run_weekly_cycle,
    seed_week_counter
)

from chitfund.services.deactivation_service import (
    deactivate_chit,
    deactivate_loan
)

from chitfund.services.analytics_service import (
    get_analytics,
    get_unpaid_chits_summary
)

from chitfund.services.onboarding_service import onboard_user

from chitfund.services.user_service import (
    list_users,
    get_user_details,
    search_users
)
