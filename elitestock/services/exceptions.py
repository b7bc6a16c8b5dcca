"""
Core error taxonomy

All four are expected, recoverable outcomes returned to the caller; the HTTP
layer maps them to 400/402/404/409. Nothing here is fatal: unexpected
persistence failures (SQLAlchemyError) are not wrapped and propagate as-is.
"""


class CoreError(Exception):
    """Base class for expected ledger-core outcomes"""

    code = "CORE_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(CoreError):
    """Bad input (caller's fault). No state change."""

    code = "VALIDATION_ERROR"


class InsufficientFunds(CoreError):
    """Balance precondition failed. No state change."""

    code = "INSUFFICIENT_FUNDS"

    def __init__(self, message: str, *, balance=None, required=None):
        self.balance = balance
        self.required = required
        super().__init__(message)


class NotFound(CoreError):
    """Referenced entity is missing"""

    code = "NOT_FOUND"


class InvalidState(CoreError):
    """Operation attempted on an entity not in the required lifecycle state"""

    code = "INVALID_STATE"
