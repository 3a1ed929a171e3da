"""Storage port for the transaction aggregate"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from transactions_service.schemas.transaction import (
    ActivityEntry,
    DocumentRef,
    Transaction,
    TransactionStatus,
)


class TransactionStore(ABC):
    """
    Persistence capability the transaction service is written against.

    Implementations own ``created_at``, ``updated_at`` and ``version``:
    ``insert`` sets all three, every successful write refreshes
    ``updated_at`` and increments ``version``. Implementations raise
    ``StorageError`` when the underlying engine fails and never retry.
    """

    @abstractmethod
    async def insert(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction and return it as stored"""

    @abstractmethod
    async def get(self, transaction_id: str) -> Optional[Transaction]:
        """Load one transaction by its external id"""

    @abstractmethod
    async def find(
        self,
        status: Optional[TransactionStatus] = None,
        coordinator_name: Optional[str] = None,
    ) -> List[Transaction]:
        """Transactions matching the given equality filters, newest first"""

    @abstractmethod
    async def update_fields(self, transaction_id: str, fields: Dict[str, Any]) -> Optional[Transaction]:
        """
        Atomically overwrite top-level fields.

        Returns the updated transaction, or None if the id does not exist.
        """

    @abstractmethod
    async def replace_collections(
        self,
        transaction_id: str,
        documents: List[DocumentRef],
        activities: List[ActivityEntry],
        expected_version: int,
    ) -> Optional[Transaction]:
        """
        Conditionally overwrite the embedded documents and activities.

        The write only happens if the stored version still equals
        ``expected_version``. Returns the updated transaction, or None if the
        version moved on or the transaction no longer exists.
        """

    @abstractmethod
    async def delete(self, transaction_id: str) -> bool:
        """Hard-delete a transaction. Returns False if it did not exist."""

    @abstractmethod
    async def count_by_status(self) -> Dict[TransactionStatus, int]:
        """Number of transactions per status, observed statuses only"""
