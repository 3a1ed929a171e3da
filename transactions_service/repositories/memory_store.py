"""In-memory transaction store for tests and local experiments"""
from collections import Counter
from typing import Any, Dict, List, Optional
import itertools

from transactions_service.exceptions import StorageError
from transactions_service.repositories.base import TransactionStore
from transactions_service.schemas.transaction import (
    ActivityEntry,
    DocumentRef,
    Transaction,
    TransactionStatus,
    utcnow,
)


class InMemoryTransactionStore(TransactionStore):
    """
    Dict-backed store with the same contract as the SQL store.

    Records are deep-copied on the way in and out so callers never share
    state with what is "persisted".
    """

    def __init__(self):
        self._records: Dict[str, Transaction] = {}
        self._insert_order: Dict[str, int] = {}
        self._sequence = itertools.count()

    def __len__(self) -> int:
        return len(self._records)

    async def insert(self, transaction: Transaction) -> Transaction:
        if transaction.id in self._records:
            raise StorageError(
                message=f"Duplicate transaction id {transaction.id}",
                details={"operation": "insert"}
            )
        now = utcnow()
        stored = transaction.model_copy(
            update={"created_at": now, "updated_at": now, "version": 1},
            deep=True,
        )
        self._records[stored.id] = stored
        self._insert_order[stored.id] = next(self._sequence)
        return stored.model_copy(deep=True)

    async def get(self, transaction_id: str) -> Optional[Transaction]:
        stored = self._records.get(transaction_id)
        return stored.model_copy(deep=True) if stored else None

    async def find(
        self,
        status: Optional[TransactionStatus] = None,
        coordinator_name: Optional[str] = None,
    ) -> List[Transaction]:
        matches = [
            t for t in self._records.values()
            if (status is None or t.status == status)
            and (coordinator_name is None or t.coordinator_name == coordinator_name)
        ]
        matches.sort(key=lambda t: (t.created_at, self._insert_order[t.id]), reverse=True)
        return [t.model_copy(deep=True) for t in matches]

    def _write(self, transaction_id: str, changes: Dict[str, Any]) -> Transaction:
        stored = self._records[transaction_id]
        changes = dict(changes, updated_at=utcnow(), version=stored.version + 1)
        self._records[transaction_id] = stored.model_copy(update=changes, deep=True)
        return self._records[transaction_id].model_copy(deep=True)

    async def update_fields(self, transaction_id: str, fields: Dict[str, Any]) -> Optional[Transaction]:
        if transaction_id not in self._records:
            return None
        changes = {
            k: v for k, v in fields.items()
            if k not in {"id", "documents", "activities", "created_at", "updated_at", "version"}
        }
        return self._write(transaction_id, changes)

    async def replace_collections(
        self,
        transaction_id: str,
        documents: List[DocumentRef],
        activities: List[ActivityEntry],
        expected_version: int,
    ) -> Optional[Transaction]:
        stored = self._records.get(transaction_id)
        if stored is None or stored.version != expected_version:
            return None
        return self._write(transaction_id, {"documents": documents, "activities": activities})

    async def delete(self, transaction_id: str) -> bool:
        self._insert_order.pop(transaction_id, None)
        return self._records.pop(transaction_id, None) is not None

    async def count_by_status(self) -> Dict[TransactionStatus, int]:
        return dict(Counter(t.status for t in self._records.values()))
