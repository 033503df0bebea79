import logging
import threading
from typing import Dict, Optional

from client_account import ClientAccount
from errors import TransactionError
from models import ClientId, ProcessingResult, ProcessingStats, Transaction

logger = logging.getLogger(__name__)


class ClientBook:
    """
    Maps client ids to accounts and routes each transaction to its account.
    A rejected transaction is reported and counted, it never stops the batch.
    """

    def __init__(self, stats: Optional[ProcessingStats] = None):
        self._accounts: Dict[ClientId, ClientAccount] = {}
        self._stats = stats if stats is not None else ProcessingStats()

        # Protects creation of new entries in _accounts when several workers share the book.
        # Each account is only ever applied to by the worker that owns its client.
        self._global_lock = threading.Lock()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def get_or_create_account(self, client_id: ClientId) -> ClientAccount:
        """Get existing account or create new one."""
        with self._global_lock:
            if client_id not in self._accounts:
                self._accounts[client_id] = ClientAccount(client_id)
            return self._accounts[client_id]

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        account = self.get_or_create_account(transaction.client_id)

        try:
            account.apply(transaction)
        except TransactionError as e:
            logger.warning(f"Failed to process {transaction}: {e.reason}")
            self._stats.record_rejection(e.kind)
            return ProcessingResult.REJECTED

        self._stats.record_success()
        return ProcessingResult.SUCCESS

    def get_all_accounts(self) -> Dict[ClientId, ClientAccount]:
        """Return all accounts in first-seen client order."""
        with self._global_lock:
            return dict(self._accounts)
