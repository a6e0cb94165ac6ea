"""Exception taxonomy for the ledger core.

Every error raised by the accounts, accounting, billing and reporting
services derives from ``LedgerError``. The HTTP layer maps the four
families to status codes via ``http_status_for``.
"""


class LedgerError(Exception):
    status_code = 400


class ValidationError(LedgerError):
    """Rejected before any write."""

    status_code = 400


class UnbalancedEntryError(ValidationError):
    pass


class InvalidLineError(ValidationError):
    pass


class UnknownAccountError(ValidationError):
    pass


class InactiveAccountError(UnknownAccountError):
    pass


class InvalidClassificationError(ValidationError):
    pass


class InvalidPaymentError(ValidationError):
    pass


class InvalidResidentError(ValidationError):
    pass


class NotFoundError(LedgerError):
    status_code = 404


class AccountNotFoundError(NotFoundError):
    pass


class ResidentNotFoundError(NotFoundError):
    pass


class BillNotFoundError(NotFoundError):
    pass


class JournalEntryNotFoundError(NotFoundError):
    pass


class ConflictError(LedgerError):
    status_code = 409


class DuplicateAccountNumberError(ConflictError):
    pass


class AccountInUseError(ConflictError):
    pass


class DuplicateBillingPeriodError(ConflictError):
    pass


class DuplicateUnitNumberError(ConflictError):
    pass


class ResidentAlreadyBilledError(ConflictError):
    pass


class ConfigurationError(LedgerError):
    status_code = 422


class MissingRequiredAccountError(ConfigurationError):
    pass


class ImmutableLedgerError(LedgerError):
    status_code = 409


def http_status_for(exc: LedgerError) -> int:
    return getattr(exc, "status_code", 400)
