"""Storage port and its implementations"""
from transactions_service.repositories.base import TransactionStore
from transactions_service.repositories.memory_store import InMemoryTransactionStore
from transactions_service.repositories.sqlalchemy_store import SqlAlchemyTransactionStore

__all__ = [
    "TransactionStore",
    "InMemoryTransactionStore",
    "SqlAlchemyTransactionStore",
]
