import pytest

from chitfund import create_app
from chitfund.extensions import db
from chitfund.models import Chit, ChitPayment, ConfigEntry, Loan, User
from config import TestConfig


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {'mobile': 9000000000}

    def _make_user(name='Ravi Kumar', total_chits=5, with_chit=True, chit_active=True):
        counter['mobile'] += 1
        user = User(name=name, total_chits=total_chits, mobile=counter['mobile'])
        db.session.add(user)
        db.session.flush()
        chit = None
        if with_chit:
            chit = Chit(user_id=user.user_id, total_chits=total_chits, is_active=chit_active)
            db.session.add(chit)
        db.session.commit()
        return user, chit

    return _make_user


@pytest.fixture
def make_chit_payment(app):

    def _make_chit_payment(chit, week=1, due_amount=None, amount_paid=0, is_paid=False):
        due = due_amount if due_amount is not None else chit.total_chits * 100
        payment = ChitPayment(
            user_id=chit.user_id,
            chit_id=chit.chit_id,
            due_amount=due,
            amount_paid=amount_paid,
            balance=due - amount_paid,
            weekly_installment=week,
            is_paid=is_paid,
            transaction_history=[]
        )
        db.session.add(payment)
        db.session.commit()
        return payment

    return _make_chit_payment


@pytest.fixture
def make_loan(app):

    def _make_loan(user, borrowed_amount=50000, is_active=True):
        loan = Loan(
            user_id=user.user_id,
            interest_rate='2',
            interest_type='monthly',
            borrowed_amount=borrowed_amount,
            balance=borrowed_amount,
            amount_paid=0,
            is_active=is_active,
            is_paid=False,
            transaction_history=[]
        )
        db.session.add(loan)
        db.session.commit()
        return loan

    return _make_loan


@pytest.fixture
def week_counter(app):
    entry = ConfigEntry(attribute=ConfigEntry.WEEK_COUNTER, value='1')
    db.session.add(entry)
    db.session.commit()
    return entry
