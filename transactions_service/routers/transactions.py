"""Transactions router"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from transactions_service.database import get_db
from transactions_service.repositories.sqlalchemy_store import SqlAlchemyTransactionStore
from transactions_service.routers.auth import get_current_user
from transactions_service.schemas.transaction import (
    ActivityCreate,
    StatusUpdate,
    Transaction,
    TransactionCreate,
    TransactionStats,
    TransactionStatus,
    TransactionUpdate,
)
from transactions_service.services.auth import CurrentUser
from transactions_service.services.transactions import TransactionService

router = APIRouter(prefix="/transactions", tags=["Transactions"])


# Dependencies
def get_transaction_service(db: AsyncSession = Depends(get_db)) -> TransactionService:
    """Transaction service bound to the request's database session"""
    return TransactionService(SqlAlchemyTransactionStore(db))


# Endpoints
@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    request: TransactionCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Create a new transaction"""
    return await service.create(request)


@router.get("", response_model=List[Transaction])
async def list_transactions(
    status_filter: Optional[TransactionStatus] = Query(None, alias="status"),
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """List transactions, newest first, optionally filtered by status"""
    return await service.list_transactions(status=status_filter)


@router.get("/stats", response_model=TransactionStats)
async def get_stats(
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Get transaction counts by status"""
    return await service.get_stats()


@router.get("/coordinator/{coordinator_name}", response_model=List[Transaction])
async def list_by_coordinator(
    coordinator_name: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """List transactions handled by a coordinator"""
    return await service.list_by_coordinator(coordinator_name)


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Get a transaction by ID"""
    return await service.get(transaction_id)


@router.patch("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    request: TransactionUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Update descriptive fields of a transaction"""
    return await service.update(transaction_id, request)


@router.patch("/{transaction_id}/status", response_model=Transaction)
async def update_status(
    transaction_id: str,
    request: StatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Move a transaction to another status"""
    return await service.update_status(transaction_id, request.status)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Delete a transaction"""
    await service.delete(transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{transaction_id}/activities", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def add_activity(
    transaction_id: str,
    request: ActivityCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Add an activity to the transaction's feed"""
    return await service.add_activity(transaction_id, request)


@router.post("/{transaction_id}/activities/{activity_id}/like", response_model=Transaction)
async def like_activity(
    transaction_id: str,
    activity_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Like an activity"""
    return await service.like_activity(transaction_id, activity_id)


@router.delete("/{transaction_id}/activities/{activity_id}", response_model=Transaction)
async def remove_activity(
    transaction_id: str,
    activity_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Remove an activity"""
    return await service.remove_activity(transaction_id, activity_id)
