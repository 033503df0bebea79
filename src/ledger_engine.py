import logging
import threading
from typing import Dict, Iterable, List, Optional

from client_account import ClientAccount
from client_book import ClientBook
from config import EngineConfig
from csv_io import read_transactions
from message_queue import ShardedQueue
from models import ClientId, ProcessingStats, Transaction

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Replays a transaction history into per-client accounts.

    With one worker everything runs in the calling thread. With more, the calling
    thread publishes and each worker thread owns a shard of clients, so every
    account is only ever touched by one thread and sees its transactions in order.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = (config or EngineConfig()).validate()
        self._stats = ProcessingStats()
        self._book = ClientBook(self._stats)

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[ClientId, ClientAccount]:
        """Process CSV file and return final account states in first-seen client order."""
        transactions = read_transactions(filepath, self._config.amount_scale)
        return self.process_transactions(transactions)

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[ClientId, ClientAccount]:
        if self._config.num_workers <= 1:
            logger.info("Starting sequential processing")
            for transaction in transactions:
                self._book.process_transaction(transaction)
        else:
            logger.info(f"Starting processing with {self._config.num_workers} workers")
            self._process_concurrently(transactions)

        logger.info(f"Processed: {self._stats.processed}, Rejected: {self._stats.rejected}")
        for kind, count in self._stats.rejections_by_kind().items():
            logger.info(f"  {kind}: {count}")

        return self._book.get_all_accounts()

    def _process_concurrently(self, transactions: Iterable[Transaction]) -> None:
        queue = ShardedQueue(self._config.num_workers)
        worker_errors: List[Exception] = []

        worker_threads = []
        for shard in range(queue.num_shards):
            worker_thread = threading.Thread(target=self._consume_transactions, args=(queue, shard, worker_errors))
            worker_thread.start()
            worker_threads.append(worker_thread)

        try:
            for transaction in transactions:
                if queue.is_shutdown():
                    # A worker failed; stop reading.
                    break
                # Register on the publishing thread so output keeps first-seen client order.
                self._book.get_or_create_account(transaction.client_id)
                queue.publish_message(transaction)
        finally:
            queue.shutdown()
            for worker_thread in worker_threads:
                worker_thread.join()

        if worker_errors:
            raise worker_errors[0]

    def _consume_transactions(self, queue: ShardedQueue, shard: int, worker_errors: List[Exception]) -> None:
        """
        Worker loop: pull from this worker's shard and apply until shutdown.
        Any unexpected error is recorded for the publishing thread and shuts the queue down.
        """
        while True:
            transaction = queue.consume_message(shard)
            if transaction is None:
                if queue.is_shutdown() and queue.is_empty(shard):
                    break
                continue

            try:
                self._book.process_transaction(transaction)
            except Exception as e:
                logger.error(f"Worker {shard} failed on {transaction}: {e}")
                worker_errors.append(e)
                queue.shutdown()
                return
