"""Authentication router"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import logging

from transactions_service.config import settings
from transactions_service.exceptions import AuthenticationError
from transactions_service.services.auth import (
    AuthService,
    CurrentUser,
    SERVICE_USER_CLAIMS,
    TEST_USER_CLAIMS,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

bearer_scheme = HTTPBearer(auto_error=False)


# Request/Response Models
class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds, 0 for long-lived service tokens


# Dependencies
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """Get current caller identity from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Not authenticated")
    return AuthService.authenticate(credentials.credentials)


def require_token_issuing() -> None:
    """Token issuing endpoints exist only when enabled"""
    if not settings.AUTH_TOKEN_ISSUING_ENABLED:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found"
        )


# Endpoints
@router.post("/login", response_model=TokenResponse, dependencies=[Depends(require_token_issuing)])
async def login(request: LoginRequest):
    """Login and get access token (no credential store; any non-empty pair is accepted)"""
    timestamp = int(datetime.utcnow().timestamp() * 1000)
    token = AuthService.create_access_token(data={
        "sub": f"user-{timestamp}",
        "username": request.username,
        "email": f"{request.username}@example.com",
        "roles": ["user"],
    })
    logger.info(f"Issued access token for {request.username}")
    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )


@router.get("/test-token", response_model=TokenResponse, dependencies=[Depends(require_token_issuing)])
async def get_test_token():
    """Generate a token for the fixed test user"""
    return TokenResponse(
        access_token=AuthService.create_access_token(data=TEST_USER_CLAIMS),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )


@router.get("/service-token", response_model=TokenResponse, dependencies=[Depends(require_token_issuing)])
async def get_service_token():
    """Generate a long-lived token for service-to-service calls"""
    return TokenResponse(
        access_token=AuthService.create_service_token(data=SERVICE_USER_CLAIMS),
        expires_in=0
    )


@router.get("/me", response_model=CurrentUser)
async def get_me(current_user: CurrentUser = Depends(get_current_user)):
    """Get current caller identity"""
    return current_user
