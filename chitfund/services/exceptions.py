"""
LEDGER EXCEPTIONS
=================

Every service raises one of these. The HTTP layer maps each kind to a
status code; none of them are retried by the ledger itself.
"""


class LedgerError(Exception):
    """
    Base exception for ledger operations.

    `detail` is an optional longer explanation for API clients.
    """

    def __init__(self, message, detail=None):
        super().__init__(message)
        self.detail = detail


class NotFoundError(LedgerError):
    """Target row is absent or does not match the active/unpaid filter"""
    pass


class AlreadyInactiveError(LedgerError):
    """Deactivation requested on a record that is already closed"""
    pass


class InvalidAmountError(LedgerError):
    """Raised when amount is invalid (non-positive, or above a loan balance)"""
    pass


class DataIntegrityError(LedgerError):
    """More than one active loan matched a (user, loan) pair"""
    pass


class ConfigError(LedgerError):
    """Week counter is missing or cannot be parsed"""
    pass


class PersistenceError(LedgerError):
    """Storage failure, wrapped with the step that failed"""
    pass


class ValidationError(LedgerError):
    """Malformed request input"""
    pass


class ConflictError(LedgerError):
    """Unique business key already taken (e.g. mobile number)"""
    pass
