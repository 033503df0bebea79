import threading
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional


@dataclass(frozen=True)
class ClientId:
    """Opaque client identifier. Supports equality and hashing only."""

    value: int

    MAX_VALUE = 2**16 - 1

    def __post_init__(self):
        _check_width(self.value, self.MAX_VALUE, "client id")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TransactionId:
    """Opaque transaction identifier. Supports equality and hashing only."""

    value: int

    MAX_VALUE = 2**32 - 1

    def __post_init__(self):
        _check_width(self.value, self.MAX_VALUE, "transaction id")

    def __str__(self) -> str:
        return str(self.value)


def _check_width(value: int, max_value: int, label: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer, got {value!r}")
    if not 0 <= value <= max_value:
        raise ValueError(f"{label} {value} out of range 0..{max_value}")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        """Deposits and withdrawals move money and get logged; the dispute family only references them."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: ClientId
    transaction_id: TransactionId
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if self.transaction_type.carries_amount:
            if not isinstance(self.amount, Decimal) or not self.amount.is_finite():
                raise ValueError(f"{self.transaction_type.value} requires a decimal amount, got {self.amount!r}")
            if self.amount < 0:
                raise ValueError(f"{self.transaction_type.value} amount must not be negative, got {self.amount}")
        elif self.amount is not None:
            raise ValueError(f"{self.transaction_type.value} does not carry an amount")

    @classmethod
    def deposit(cls, client_id: ClientId, transaction_id: TransactionId, amount: Decimal) -> "Transaction":
        return cls(TransactionType.DEPOSIT, client_id, transaction_id, amount)

    @classmethod
    def withdrawal(cls, client_id: ClientId, transaction_id: TransactionId, amount: Decimal) -> "Transaction":
        return cls(TransactionType.WITHDRAWAL, client_id, transaction_id, amount)

    @classmethod
    def dispute(cls, client_id: ClientId, transaction_id: TransactionId) -> "Transaction":
        return cls(TransactionType.DISPUTE, client_id, transaction_id)

    @classmethod
    def resolve(cls, client_id: ClientId, transaction_id: TransactionId) -> "Transaction":
        return cls(TransactionType.RESOLVE, client_id, transaction_id)

    @classmethod
    def chargeback(cls, client_id: ClientId, transaction_id: TransactionId) -> "Transaction":
        return cls(TransactionType.CHARGEBACK, client_id, transaction_id)

    @property
    def deposit_amount(self) -> Optional[Decimal]:
        if self.transaction_type == TransactionType.DEPOSIT:
            return self.amount
        return None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.processed = 0
        self.rejected = 0
        self._rejections_by_kind: Counter = Counter()

    def record_success(self):
        with self._lock:
            self.processed += 1

    def record_rejection(self, kind: str):
        with self._lock:
            self.rejected += 1
            self._rejections_by_kind[kind] += 1

    def rejections_by_kind(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._rejections_by_kind)
