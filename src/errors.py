"""Exception hierarchy for the ledger engine."""

from typing import Optional

from models import Transaction


class LedgerError(Exception):
    """Base exception for all ledger errors."""


class TransactionError(LedgerError):
    """A single transaction was rejected. Never fatal to a batch."""

    kind = "transaction_error"
    reason = "transaction rejected"

    def __init__(self, transaction: Transaction):
        self.transaction = transaction
        super().__init__(
            f"{self.reason} (client={transaction.client_id}, tx={transaction.transaction_id})"
        )


class LockedAccountError(TransactionError):
    kind = "locked_account"
    reason = "account is locked"


class NotEnoughBalanceError(TransactionError):
    kind = "not_enough_balance"
    reason = "not enough balance to withdraw"


class DuplicateTransactionIdError(TransactionError):
    kind = "duplicate_transaction_id"
    reason = "duplicate transaction id"


class InputError(LedgerError):
    """Raised when the input source cannot be read or contains a malformed row."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid."""


class AmountOverflowError(LedgerError):
    """Raised when a balance can no longer be represented exactly. Fatal to the batch."""

    def __init__(self, transaction: Transaction):
        self.transaction = transaction
        super().__init__(
            f"balance exceeds exact decimal precision (client={transaction.client_id}, tx={transaction.transaction_id})"
        )
