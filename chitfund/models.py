import uuid

from chitfund.extensions import db
from chitfund.utils import utcnow


def generate_public_id():
    return str(uuid.uuid4())


# ============================================================
# USER MODEL
# ============================================================
class User(db.Model):
    """
    A member onboarded into the chit scheme.
    Immutable after onboarding; identified externally by `user_id`.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), unique=True, nullable=False, default=generate_public_id)
    name = db.Column(db.String(100), nullable=False)
    mobile = db.Column(db.BigInteger, unique=True, nullable=False)
    total_chits = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    # Relationships
    chits = db.relationship('Chit', backref='owner', lazy='dynamic')
    loans = db.relationship('Loan', backref='borrower', lazy='dynamic')

    def __repr__(self):
        return f'<User {self.name}>'


# ============================================================
# CHIT MODEL
# ============================================================
class Chit(db.Model):
    """
    One subscription to the group-savings scheme.

    `is_active` only ever goes True -> False (force deactivation).
    """
    __tablename__ = 'chits'

    id = db.Column(db.Integer, primary_key=True)
    chit_id = db.Column(db.String(36), unique=True, nullable=False, default=generate_public_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.user_id'), nullable=False, index=True)
    total_chits = db.Column(db.Integer, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=True)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<Chit {self.chit_id} units={self.total_chits} active={self.is_active}>'


# ============================================================
# CHIT PAYMENT MODEL (ONE ROW PER CHIT PER WEEK)
# ============================================================
class ChitPayment(db.Model):
    """
    Installment owed by one chit for one week.

    CRITICAL: after every successful update
    - amount_paid + balance == due_amount
    - is_paid <=> amount_paid >= due_amount

    Rows are created by the weekly cycle and mutated only by the
    chit payment ledger. Never deleted.
    """
    __tablename__ = 'chit_payments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.user_id'), nullable=False, index=True)
    chit_id = db.Column(db.String(36), db.ForeignKey('chits.chit_id'), nullable=False, index=True)

    due_amount = db.Column(db.Integer, nullable=False)
    amount_paid = db.Column(db.Integer, default=0, nullable=False)
    balance = db.Column(db.Integer, nullable=True)  # negative on overpayment
    weekly_installment = db.Column(db.Integer, nullable=False)

    is_paid = db.Column(db.Boolean, default=False, nullable=False)
    paid_on = db.Column(db.DateTime, nullable=True)  # set once, on completion
    payment_mode = db.Column(db.String(30), nullable=True)  # last mode used

    # Append-only list of {timestamp, amount, mode}
    transaction_history = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<ChitPayment chit={self.chit_id} week={self.weekly_installment} paid={self.is_paid}>'


# ============================================================
# LOAN MODEL
# ============================================================
class Loan(db.Model):
    """
    Personal loan against a user.

    CRITICAL: borrowed_amount == balance + amount_paid after every payment.
    Balance never increases; a loan paid down to zero closes itself.
    """
    __tablename__ = 'loans'

    INTEREST_TYPES = ['monthly', 'yearly', 'daily']

    id = db.Column(db.Integer, primary_key=True)
    loan_id = db.Column(db.String(36), unique=True, nullable=False, default=generate_public_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.user_id'), nullable=False, index=True)

    interest_rate = db.Column(db.String(20), nullable=False)
    interest_type = db.Column(db.String(10), nullable=False)

    borrowed_amount = db.Column(db.Integer, nullable=False)
    balance = db.Column(db.Integer, nullable=False)
    amount_paid = db.Column(db.Integer, default=0, nullable=False)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_paid = db.Column(db.Boolean, default=False, nullable=False)

    transaction_history = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=True)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<Loan {self.loan_id} balance={self.balance} active={self.is_active}>'


# ============================================================
# CONFIG MODEL (KEY / VALUE)
# ============================================================
class ConfigEntry(db.Model):
    """
    Singleton-per-attribute settings row.

    `chits_installment` holds the global week counter as a string.
    """
    __tablename__ = 'config'

    WEEK_COUNTER = 'chits_installment'

    id = db.Column(db.Integer, primary_key=True)
    attribute = db.Column(db.String(50), unique=True, nullable=True)
    value = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<ConfigEntry {self.attribute}={self.value}>'
