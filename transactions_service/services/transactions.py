"""Transaction service

Lifecycle operations on the transaction aggregate: create, read, list,
update, status changes, deletion, and the activity/document operations on
its embedded collections.

Embedded collections are changed by read-modify-write. To keep two
concurrent writers from silently dropping each other's entries, the write
is conditional on the version that was read; when another write got in
first, the record is reloaded and the change re-applied, up to
``NESTED_MUTATION_MAX_ATTEMPTS`` times.
"""

from typing import Any, Callable, List, Optional, Type, TypeVar, Union
import logging

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from transactions_service.config import settings
from transactions_service.exceptions import ConflictError, NotFoundError, ValidationError
from transactions_service.repositories.base import TransactionStore
from transactions_service.schemas.transaction import (
    ActivityCreate,
    DocumentCreate,
    StatusUpdate,
    Transaction,
    TransactionCreate,
    TransactionStats,
    TransactionStatus,
    TransactionUpdate,
)
from transactions_service.services.collections import (
    append_entry,
    find_and_mutate,
    increment_likes,
    remove_by_id,
)

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def validate_payload(model_cls: Type[PayloadT], payload: Any) -> PayloadT:
    """
    Validate a raw payload into ``model_cls``.

    Pydantic errors are converted into ValidationError naming the first
    offending field.
    """
    if isinstance(payload, model_cls):
        return payload
    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        message = f"Invalid {field}: {first.get('msg')}" if field else "Invalid payload"
        raise ValidationError(message=message, field=field, details={"errors": errors}) from e


def coerce_status(status: Union[TransactionStatus, str]) -> TransactionStatus:
    return validate_payload(StatusUpdate, {"status": status}).status


class TransactionService:
    """Operations on transactions held in a TransactionStore"""

    def __init__(self, store: TransactionStore, max_attempts: Optional[int] = None):
        self.store = store
        self.max_attempts = max_attempts or settings.NESTED_MUTATION_MAX_ATTEMPTS

    # Lifecycle

    async def create(self, payload: Union[TransactionCreate, dict]) -> Transaction:
        """Create a transaction. The status is always GATHERING_DOCS."""
        request = validate_payload(TransactionCreate, payload)
        transaction = await self.store.insert(request.to_transaction())
        logger.info(f"Created transaction {transaction.id} ({transaction.address}, {transaction.city})")
        return transaction

    async def get(self, transaction_id: str) -> Transaction:
        transaction = await self.store.get(transaction_id)
        if transaction is None:
            raise NotFoundError.for_resource("transaction", transaction_id)
        return transaction

    async def list_transactions(
        self, status: Optional[Union[TransactionStatus, str]] = None
    ) -> List[Transaction]:
        """All transactions, or those with the given status, newest first"""
        if status is not None:
            status = coerce_status(status)
        return await self.store.find(status=status)

    async def list_by_coordinator(self, coordinator_name: str) -> List[Transaction]:
        return await self.store.find(coordinator_name=coordinator_name)

    async def update(self, transaction_id: str, payload: Union[TransactionUpdate, dict]) -> Transaction:
        """Overwrite only the supplied descriptive fields"""
        request = validate_payload(TransactionUpdate, payload)
        fields = request.update_fields()
        if not fields:
            return await self.get(transaction_id)

        transaction = await self.store.update_fields(transaction_id, fields)
        if transaction is None:
            raise NotFoundError.for_resource("transaction", transaction_id)
        logger.debug(f"Updated transaction {transaction_id}: {sorted(fields)}")
        return transaction

    async def update_status(self, transaction_id: str, status: Union[TransactionStatus, str]) -> Transaction:
        """Replace the status. Any status may follow any other."""
        new_status = coerce_status(status)
        transaction = await self.store.update_fields(transaction_id, {"status": new_status})
        if transaction is None:
            raise NotFoundError.for_resource("transaction", transaction_id)
        logger.info(f"Transaction {transaction_id} moved to {new_status.value}")
        return transaction

    async def delete(self, transaction_id: str) -> None:
        if not await self.store.delete(transaction_id):
            raise NotFoundError.for_resource("transaction", transaction_id)
        logger.info(f"Deleted transaction {transaction_id}")

    # Activities

    async def add_activity(self, transaction_id: str, payload: Union[ActivityCreate, dict]) -> Transaction:
        """Prepend a new activity (newest first)"""
        request = validate_payload(ActivityCreate, payload)

        def mutate(transaction: Transaction) -> None:
            append_entry(transaction.activities, request.to_activity(), at_front=True)

        return await self._mutate_collections(transaction_id, mutate)

    async def like_activity(self, transaction_id: str, activity_id: str) -> Transaction:
        def mutate(transaction: Transaction) -> None:
            find_and_mutate(transaction.activities, activity_id, increment_likes, "activity")

        return await self._mutate_collections(transaction_id, mutate)

    async def remove_activity(self, transaction_id: str, activity_id: str) -> Transaction:
        def mutate(transaction: Transaction) -> None:
            remove_by_id(transaction.activities, activity_id, "activity")

        return await self._mutate_collections(transaction_id, mutate)

    # Documents

    async def add_document(self, transaction_id: str, payload: Union[DocumentCreate, dict]) -> Transaction:
        """Append a document reference (upload order)"""
        request = validate_payload(DocumentCreate, payload)

        def mutate(transaction: Transaction) -> None:
            append_entry(transaction.documents, request.to_document())

        return await self._mutate_collections(transaction_id, mutate)

    async def remove_document(self, transaction_id: str, document_id: str) -> Transaction:
        def mutate(transaction: Transaction) -> None:
            remove_by_id(transaction.documents, document_id, "document")

        return await self._mutate_collections(transaction_id, mutate)

    # Aggregation

    async def get_stats(self) -> TransactionStats:
        """Count of all transactions and per observed status"""
        counts = await self.store.count_by_status()
        by_status = {status.value: count for status, count in counts.items() if count > 0}
        return TransactionStats(total=sum(by_status.values()), by_status=by_status)

    async def _mutate_collections(
        self, transaction_id: str, mutate: Callable[[Transaction], None]
    ) -> Transaction:
        """Load, apply ``mutate`` in memory, write back if nobody else wrote meanwhile"""
        for attempt in range(1, self.max_attempts + 1):
            transaction = await self.get(transaction_id)
            mutate(transaction)

            saved = await self.store.replace_collections(
                transaction_id,
                documents=transaction.documents,
                activities=transaction.activities,
                expected_version=transaction.version,
            )
            if saved is not None:
                return saved

            logger.warning(
                f"Concurrent write on transaction {transaction_id}, "
                f"re-applying change (attempt {attempt}/{self.max_attempts})"
            )

        raise ConflictError(
            message=f"Transaction with ID {transaction_id} is being modified concurrently, try again",
            details={"resource": "transaction", "id": transaction_id, "attempts": self.max_attempts}
        )
