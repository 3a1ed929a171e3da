"""Services package"""
from transactions_service.services.auth import AuthService, CurrentUser
from transactions_service.services.transactions import TransactionService

__all__ = ["AuthService", "CurrentUser", "TransactionService"]
