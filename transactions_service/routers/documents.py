"""Documents router - file intake and document references on a transaction"""
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from typing import Optional
import os
import uuid
import logging
import aiofiles

from transactions_service.config import settings
from transactions_service.exceptions import AppException
from transactions_service.routers.auth import get_current_user
from transactions_service.routers.transactions import get_transaction_service
from transactions_service.schemas.transaction import DocumentCreate, Transaction
from transactions_service.services.auth import CurrentUser
from transactions_service.services.transactions import TransactionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["Documents"])


def validate_upload_file(file: UploadFile, file_size: int) -> None:
    """Validate uploaded file type and size"""
    # Check file size
    if file_size > settings.max_upload_size_bytes:
        max_mb = settings.MAX_UPLOAD_SIZE_MB
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {max_mb}MB"
        )

    # Check file extension
    file_ext = ""
    if file.filename:
        file_ext = os.path.splitext(file.filename)[1].lower()

    if file_ext and file_ext not in settings.allowed_extensions_list:
        allowed = ", ".join(settings.allowed_extensions_list)
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"File type not allowed. Allowed extensions: {allowed}"
        )

    # Check MIME type
    content_type = (file.content_type or "").lower()
    if content_type and content_type not in settings.allowed_mimetypes_list:
        allowed = ", ".join(settings.allowed_mimetypes_list)
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"MIME type not allowed. Allowed types: {allowed}"
        )


def detect_mime_type(file_ext: str, content_type: Optional[str]) -> str:
    """Detect MIME type from extension or content type"""
    mime_map = {
        ".pdf": "application/pdf",
        ".png": "image/png",
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".gif": "image/gif",
        ".doc": "application/msword",
        ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ".xls": "application/vnd.ms-excel",
        ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        ".txt": "text/plain",
    }

    # Try to get from extension first
    if file_ext and file_ext.lower() in mime_map:
        return mime_map[file_ext.lower()]

    # Fall back to provided content type
    if content_type and content_type.lower() in settings.allowed_mimetypes_list:
        return content_type.lower()

    # Default to octet-stream for unknown types
    return "application/octet-stream"


async def store_upload(file_content: bytes, file_ext: str) -> str:
    """Write uploaded bytes under UPLOAD_DIR and return the stored filename"""
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    stored_filename = f"{uuid.uuid4().hex}{file_ext.lower()}"
    file_path = os.path.join(settings.UPLOAD_DIR, stored_filename)

    async with aiofiles.open(file_path, 'wb') as f:
        await f.write(file_content)

    return stored_filename


@router.post("/{transaction_id}/documents", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def upload_document(
    transaction_id: str,
    file: UploadFile = File(...),
    uploaded_by: Optional[str] = Form(None, alias="uploadedBy"),
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Upload a document and attach it to a transaction"""
    # Verify transaction exists before storing anything
    await service.get(transaction_id)

    # Read file content
    file_content = await file.read()
    file_size = len(file_content)

    # Validate file type and size
    validate_upload_file(file, file_size)

    file_ext = os.path.splitext(file.filename)[1] if file.filename else ""
    stored_filename = await store_upload(file_content, file_ext)
    logger.info(f"Stored upload {file.filename} as {stored_filename} for transaction {transaction_id}")

    document = DocumentCreate(
        name=file.filename or stored_filename,
        url=f"{settings.UPLOAD_URL_PREFIX}/{stored_filename}",
        uploaded_by=uploaded_by or current_user.attribution,
        file_size=file_size,
        mime_type=detect_mime_type(file_ext, file.content_type),
    )
    try:
        return await service.add_document(transaction_id, document)
    except AppException:
        # Nothing references the stored file
        os.remove(os.path.join(settings.UPLOAD_DIR, stored_filename))
        logger.warning(f"Discarded upload {stored_filename}, transaction {transaction_id} not updated")
        raise


@router.delete("/{transaction_id}/documents/{document_id}", response_model=Transaction)
async def remove_document(
    transaction_id: str,
    document_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: TransactionService = Depends(get_transaction_service)
):
    """Remove a document from a transaction"""
    return await service.remove_document(transaction_id, document_id)
