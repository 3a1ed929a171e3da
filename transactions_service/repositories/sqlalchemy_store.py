"""SQLAlchemy implementation of the transaction store"""
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional
import logging

from sqlalchemy import select, update, delete, func, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from transactions_service.exceptions import StorageError
from transactions_service.models.transaction import TransactionRecord
from transactions_service.repositories.base import TransactionStore
from transactions_service.schemas.transaction import (
    ActivityEntry,
    DocumentRef,
    Transaction,
    TransactionStatus,
)

logger = logging.getLogger(__name__)

_STORE_MANAGED = {"documents", "activities", "created_at", "updated_at"}


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate engine failures into StorageError"""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Storage failure during {operation}: {e}")
        raise StorageError(
            message=f"Storage failure during {operation}",
            details={"operation": operation}
        ) from e


def record_to_transaction(record: TransactionRecord) -> Transaction:
    data = {
        column.name: getattr(record, column.name)
        for column in TransactionRecord.__table__.columns
        if column.name != "pk"
    }
    return Transaction.model_validate(data)


def dump_documents(documents: List[DocumentRef]) -> List[Dict[str, Any]]:
    return [doc.model_dump(mode="json") for doc in documents]


def dump_activities(activities: List[ActivityEntry]) -> List[Dict[str, Any]]:
    return [activity.model_dump(mode="json") for activity in activities]


class SqlAlchemyTransactionStore(TransactionStore):
    """Transaction store backed by an async SQLAlchemy session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, transaction_id: str) -> Optional[TransactionRecord]:
        # populate_existing: rows changed by bulk UPDATE must not come back stale
        result = await self.db.execute(
            select(TransactionRecord)
            .where(TransactionRecord.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def insert(self, transaction: Transaction) -> Transaction:
        record = TransactionRecord(
            **transaction.model_dump(exclude=_STORE_MANAGED),
            documents=dump_documents(transaction.documents),
            activities=dump_activities(transaction.activities),
        )
        record.version = 1
        with storage_errors("insert"):
            self.db.add(record)
            await self.db.commit()
            await self.db.refresh(record)
        return record_to_transaction(record)

    async def get(self, transaction_id: str) -> Optional[Transaction]:
        with storage_errors("get"):
            record = await self._load(transaction_id)
        return record_to_transaction(record) if record else None

    async def find(
        self,
        status: Optional[TransactionStatus] = None,
        coordinator_name: Optional[str] = None,
    ) -> List[Transaction]:
        query = select(TransactionRecord)
        if status is not None:
            query = query.where(TransactionRecord.status == status)
        if coordinator_name is not None:
            query = query.where(TransactionRecord.coordinator_name == coordinator_name)
        query = query.order_by(desc(TransactionRecord.created_at), desc(TransactionRecord.pk))
        query = query.execution_options(populate_existing=True)

        with storage_errors("find"):
            result = await self.db.execute(query)
            records = result.scalars().all()
        return [record_to_transaction(r) for r in records]

    async def update_fields(self, transaction_id: str, fields: Dict[str, Any]) -> Optional[Transaction]:
        values = {k: v for k, v in fields.items() if k not in _STORE_MANAGED}
        stmt = (
            update(TransactionRecord)
            .where(TransactionRecord.id == transaction_id)
            .values(**values, version=TransactionRecord.version + 1)
            .execution_options(synchronize_session=False)
        )
        with storage_errors("update"):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                return None
            await self.db.commit()
        return await self.get(transaction_id)

    async def replace_collections(
        self,
        transaction_id: str,
        documents: List[DocumentRef],
        activities: List[ActivityEntry],
        expected_version: int,
    ) -> Optional[Transaction]:
        stmt = (
            update(TransactionRecord)
            .where(
                TransactionRecord.id == transaction_id,
                TransactionRecord.version == expected_version,
            )
            .values(
                documents=dump_documents(documents),
                activities=dump_activities(activities),
                version=expected_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        with storage_errors("replace_collections"):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                await self.db.rollback()
                return None
            await self.db.commit()
        return await self.get(transaction_id)

    async def delete(self, transaction_id: str) -> bool:
        stmt = (
            delete(TransactionRecord)
            .where(TransactionRecord.id == transaction_id)
            .execution_options(synchronize_session=False)
        )
        with storage_errors("delete"):
            result = await self.db.execute(stmt)
            deleted = result.rowcount > 0
            await self.db.commit()
        return deleted

    async def count_by_status(self) -> Dict[TransactionStatus, int]:
        query = select(TransactionRecord.status, func.count()).group_by(TransactionRecord.status)
        with storage_errors("count_by_status"):
            result = await self.db.execute(query)
            rows = result.all()
        return {TransactionStatus(row_status): count for row_status, count in rows}
