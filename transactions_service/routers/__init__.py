"""API routers package"""
from transactions_service.routers.auth import router as auth_router
from transactions_service.routers.transactions import router as transactions_router
from transactions_service.routers.documents import router as documents_router

__all__ = [
    "auth_router",
    "transactions_router",
    "documents_router",
]
