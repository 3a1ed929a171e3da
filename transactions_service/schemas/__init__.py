"""Domain models and request payloads"""
from transactions_service.schemas.transaction import (
    ActivityCreate,
    ActivityEntry,
    DocumentCreate,
    DocumentRef,
    LoanType,
    PropertyType,
    StatusUpdate,
    Transaction,
    TransactionCreate,
    TransactionStats,
    TransactionStatus,
    TransactionType,
    TransactionUpdate,
)

__all__ = [
    "ActivityCreate",
    "ActivityEntry",
    "DocumentCreate",
    "DocumentRef",
    "LoanType",
    "PropertyType",
    "StatusUpdate",
    "Transaction",
    "TransactionCreate",
    "TransactionStats",
    "TransactionStatus",
    "TransactionType",
    "TransactionUpdate",
]
