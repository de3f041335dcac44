class LedgerError(Exception):
    """Base class for every error raised by the ledger engine."""


class ValidationError(LedgerError):
    """Input is malformed or breaks a model rule; prior state is untouched."""


class NotFoundError(LedgerError):
    """An update referenced an id that the store does not hold."""


class OwnershipError(LedgerError):
    """The record belongs to someone other than the acting owner."""


class PersistenceError(LedgerError):
    """Reading or writing the owner's snapshot failed.

    ``record`` is set when a mutation was applied in memory but could not be
    saved.
    """

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record
