"""Database models package"""
from transactions_service.models.transaction import TransactionRecord

__all__ = [
    "TransactionRecord",
]
