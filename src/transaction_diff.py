import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

from errors import NotEnoughBalanceError
from models import Transaction, TransactionId, TransactionType

if TYPE_CHECKING:
    from client_account import ClientAccount

logger = logging.getLogger(__name__)


class DisputeChange(Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class DisputeAction:
    change: DisputeChange
    transaction_id: TransactionId


@dataclass(frozen=True)
class TransactionDiff:
    """
    The effect one transaction would have on an account.
    Computed against the current account state, applied later by ClientAccount.apply.
    """

    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    lock: Optional[bool] = None
    dispute: Optional[DisputeAction] = None

    @property
    def is_identity(self) -> bool:
        return self == TransactionDiff()

    @classmethod
    def deposit(cls, amount: Decimal) -> "TransactionDiff":
        return cls(available=amount)

    @classmethod
    def withdraw(cls, amount: Decimal) -> "TransactionDiff":
        return cls(available=amount.copy_negate())

    @classmethod
    def hold(cls, transaction_id: TransactionId, amount: Decimal) -> "TransactionDiff":
        return cls(
            available=amount.copy_negate(),
            held=amount,
            dispute=DisputeAction(DisputeChange.START, transaction_id),
        )

    @classmethod
    def release(cls, transaction_id: TransactionId, amount: Decimal) -> "TransactionDiff":
        return cls(
            available=amount,
            held=amount.copy_negate(),
            dispute=DisputeAction(DisputeChange.END, transaction_id),
        )

    @classmethod
    def burn(cls, transaction_id: TransactionId, amount: Decimal) -> "TransactionDiff":
        return cls(
            held=amount.copy_negate(),
            lock=True,
            dispute=DisputeAction(DisputeChange.END, transaction_id),
        )


def calculate_diff(account: "ClientAccount", transaction: Transaction) -> TransactionDiff:
    """
    Compute the diff applying `transaction` to `account` would cause. Never mutates the account.

    Raises:
        NotEnoughBalanceError: withdrawal larger than the available balance

    Dispute, resolve and chargeback referring to an unknown transaction, a withdrawal,
    or a deposit in the wrong dispute state are ignored and produce the identity diff.
    """
    match transaction.transaction_type:
        case TransactionType.DEPOSIT:
            return TransactionDiff.deposit(transaction.amount)
        case TransactionType.WITHDRAWAL:
            if account.available < transaction.amount:
                raise NotEnoughBalanceError(transaction)
            return TransactionDiff.withdraw(transaction.amount)
        case TransactionType.DISPUTE:
            amount = _disputable_amount(account, transaction, expect_disputed=False)
            if amount is None:
                return TransactionDiff()
            return TransactionDiff.hold(transaction.transaction_id, amount)
        case TransactionType.RESOLVE:
            amount = _disputable_amount(account, transaction, expect_disputed=True)
            if amount is None:
                return TransactionDiff()
            return TransactionDiff.release(transaction.transaction_id, amount)
        case TransactionType.CHARGEBACK:
            amount = _disputable_amount(account, transaction, expect_disputed=True)
            if amount is None:
                return TransactionDiff()
            return TransactionDiff.burn(transaction.transaction_id, amount)
        case _:
            raise ValueError(f"Unsupported transaction type: {transaction.transaction_type}")


def _disputable_amount(
    account: "ClientAccount", transaction: Transaction, expect_disputed: bool
) -> Optional[Decimal]:
    """Amount of the referenced deposit, or None if the dispute-family transaction should be ignored."""
    transaction_id = transaction.transaction_id
    kind = transaction.transaction_type.value

    target = account.get_logged_transaction(transaction_id)
    if target is None:
        logger.debug(f"Ignoring {kind} for tx {transaction_id}: transaction not found")
        return None

    # Only deposits can be disputed; withdrawn funds have already left the account.
    amount = target.deposit_amount
    if amount is None:
        logger.debug(f"Ignoring {kind} for tx {transaction_id}: only deposits can be disputed (got {target.transaction_type.value})")
        return None

    if account.is_disputed(transaction_id) != expect_disputed:
        state = "not disputed" if expect_disputed else "already disputed"
        logger.debug(f"Ignoring {kind} for tx {transaction_id}: transaction {state}")
        return None

    return amount
