from decimal import Decimal, Inexact, localcontext
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Set

from errors import AmountOverflowError, DuplicateTransactionIdError, LockedAccountError
from models import ClientId, Transaction, TransactionId
from transaction_diff import DisputeChange, calculate_diff


class ClientAccount:
    """
    One client's balances, transaction log and active disputes.
    apply() is the only way to change any of them; everything else is read-only.
    """

    def __init__(self, client_id: ClientId):
        self._client_id = client_id
        # Deposits and withdrawals only, in arrival order.
        self._log: Dict[TransactionId, Transaction] = {}
        self._disputed_transaction_ids: Set[TransactionId] = set()
        self._available = Decimal("0")
        self._held = Decimal("0")
        self._locked = False

    def apply(self, transaction: Transaction) -> None:
        """
        Apply a single transaction. Either the whole effect is applied or nothing is.

        Raises:
            LockedAccountError: the account was locked by an earlier chargeback
            ValueError: the transaction belongs to another client
            NotEnoughBalanceError: withdrawal larger than the available balance
            DuplicateTransactionIdError: deposit/withdrawal id already in the log
            AmountOverflowError: a balance would lose exactness; fatal, nothing is applied
        """
        if self._locked:
            raise LockedAccountError(transaction)

        if transaction.client_id != self._client_id:
            raise ValueError(f"{transaction} does not belong to client {self._client_id}")

        diff = calculate_diff(self, transaction)

        logged = transaction.transaction_type.carries_amount
        if logged and transaction.transaction_id in self._log:
            raise DuplicateTransactionIdError(transaction)

        try:
            with localcontext() as ctx:
                ctx.traps[Inexact] = True
                available = self._available + diff.available
                held = self._held + diff.held
                # total is derived on read, so it must stay exact as well
                available + held
        except Inexact as e:
            raise AmountOverflowError(transaction) from e

        self._available = available
        self._held = held

        if diff.lock is not None:
            self._locked = diff.lock

        if diff.dispute is not None:
            if diff.dispute.change == DisputeChange.START:
                self._disputed_transaction_ids.add(diff.dispute.transaction_id)
            else:
                self._disputed_transaction_ids.discard(diff.dispute.transaction_id)

        if logged:
            self._log[transaction.transaction_id] = transaction

    @property
    def client_id(self) -> ClientId:
        return self._client_id

    @property
    def available(self) -> Decimal:
        return self._available

    @property
    def held(self) -> Decimal:
        return self._held

    @property
    def total(self) -> Decimal:
        return self._available + self._held

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def transactions(self) -> Mapping[TransactionId, Transaction]:
        """Read-only view of the transaction log."""
        return MappingProxyType(self._log)

    @property
    def disputed_transaction_ids(self) -> FrozenSet[TransactionId]:
        return frozenset(self._disputed_transaction_ids)

    def get_logged_transaction(self, transaction_id: TransactionId) -> Optional[Transaction]:
        return self._log.get(transaction_id)

    def is_disputed(self, transaction_id: TransactionId) -> bool:
        return transaction_id in self._disputed_transaction_ids

    def __repr__(self) -> str:
        return (
            f"ClientAccount(client={self._client_id}, available={self._available}, "
            f"held={self._held}, total={self.total}, locked={self._locked})"
        )
