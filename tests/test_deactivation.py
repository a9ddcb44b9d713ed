from datetime import datetime

import pytest

from chitfund import utils
from chitfund.extensions import db
from chitfund.models import Chit, Loan
from chitfund.services.deactivation_service import deactivate_chit, deactivate_loan
from chitfund.services.exceptions import AlreadyInactiveError, NotFoundError
from chitfund.services.installment_service import run_weekly_cycle
from chitfund.services.loan_service import apply_loan_payment


@pytest.fixture
def fixed_clock(monkeypatch):
    monkeypatch.setattr(utils, 'utcnow', lambda: datetime(2026, 10, 19, 10, 0, 0))


def test_deactivate_chit(fixed_clock, make_user):
    user, chit = make_user()

    result = deactivate_chit(chit.chit_id, reason='member left')

    assert result == {
        'chit_id': chit.chit_id,
        'user_id': user.user_id,
        'is_active': False,
        'deactivated_at': '19/10/2026, 15:30:00',
        'reason': 'member left',
    }
    stored = db.session.get(Chit, chit.id)
    assert stored.is_active is False
    assert stored.updated_at == datetime(2026, 10, 19, 10, 0, 0)


def test_deactivated_chit_gets_no_installments(make_user, week_counter):
    _, chit = make_user()
    deactivate_chit(chit.chit_id)

    assert run_weekly_cycle()['payments_created'] == 0


def test_deactivate_chit_twice(fixed_clock, monkeypatch, make_user):
    _, chit = make_user()
    deactivate_chit(chit.chit_id)
    monkeypatch.setattr(utils, 'utcnow', lambda: datetime(2026, 11, 1, 8, 0, 0))

    with pytest.raises(AlreadyInactiveError, match="Chit is already inactive"):
        deactivate_chit(chit.chit_id)

    stored = db.session.get(Chit, chit.id)
    assert stored.is_active is False
    assert stored.updated_at == datetime(2026, 10, 19, 10, 0, 0)


def test_deactivate_unknown_chit(app):
    with pytest.raises(NotFoundError):
        deactivate_chit('no-such-chit')


def test_force_close_loan_keeps_balance(fixed_clock, make_user, make_loan):
    user, _ = make_user()
    loan = make_loan(user, borrowed_amount=10000)
    apply_loan_payment(user.user_id, loan.loan_id, 2500, 'cash')

    result = deactivate_loan(loan.loan_id)

    assert result['is_active'] is False
    assert result['reason'] is None
    assert result['deactivated_at'] == '19/10/2026, 15:30:00'
    stored = db.session.get(Loan, loan.id)
    assert stored.balance == 7500
    assert stored.amount_paid == 2500
    assert stored.is_paid is False


def test_deactivate_paid_off_loan(make_user, make_loan):
    user, _ = make_user()
    loan = make_loan(user, borrowed_amount=100)
    apply_loan_payment(user.user_id, loan.loan_id, 100, 'cash')

    with pytest.raises(AlreadyInactiveError, match="Loan is already inactive"):
        deactivate_loan(loan.loan_id)


def test_deactivate_unknown_loan(app):
    with pytest.raises(NotFoundError):
        deactivate_loan('no-such-loan')
