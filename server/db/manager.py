# Store manager: repositories, id sequence and the single-writer transaction boundary

import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import List, Any, Callable, Tuple

from .repository import Repository, InMemoryRepository

ID_PREFIXES = {
    'donation': 'DON',
    'reservation': 'RES',
    'account': 'ACC',
}


class StoreManager:
    """
    Owner of all application state.

    Every mutation runs through execute_transaction(), which serialises writers with a
    re-entrant lock and rolls both repositories back if any operation raises, so each
    operation either fully applies or leaves the state untouched.
    """

    def __init__(self, donations: Repository = None, accounts: Repository = None):
        """
        Args:
            donations: donation repository, in-memory by default
            accounts: account repository, in-memory by default
        """
        self.donations = donations if donations is not None else InMemoryRepository("Donation")
        self.accounts = accounts if accounts is not None else InMemoryRepository("Account")

        self._lock = threading.RLock()
        self._sequence = itertools.count(1)

        self.logger = logging.getLogger(self.__class__.__name__)

    def next_identity(self, kind: str) -> Tuple[str, int, datetime]:
        """
        Allocate an identity for a new entity.

        The sequence number is strictly increasing across all entity kinds and is
        what every "most recent first" ordering sorts on.

        Args:
            kind: 'donation', 'reservation' or 'account'

        Returns:
            (id, seq, created_at)
        """
        with self._lock:
            seq = next(self._sequence)
        entity_id = f"{ID_PREFIXES[kind]}-{seq:06d}"
        return entity_id, seq, datetime.now(timezone.utc)

    def execute_transaction(self, operations: List[Callable]) -> List[Any]:
        """
        Run operations one after another as a single transaction.

        Args:
            operations: callables, each returning its result

        Returns:
            results in order

        Raises:
            the first exception raised by an operation, after rolling back
        """
        if not operations:
            self.logger.warning("Transaction called with no operations")
            return []

        with self._lock:
            snapshots = (self.donations.snapshot(), self.accounts.snapshot())
            results = []
            try:
                for operation in operations:
                    results.append(operation())
            except Exception as e:
                self.donations.restore(snapshots[0])
                self.accounts.restore(snapshots[1])
                self.logger.debug(f"Transaction rolled back: {type(e).__name__}: {e}")
                raise

            self.logger.debug(f"Transaction committed, {len(operations)} operation(s)")
            return results

    def run(self, operation: Callable) -> Any:
        """Shorthand for a one-operation transaction"""
        return self.execute_transaction([operation])[0]

    def read(self, query: Callable) -> Any:
        """Run a read-only query under the lock so it never sees a half-applied transaction"""
        with self._lock:
            return query()
