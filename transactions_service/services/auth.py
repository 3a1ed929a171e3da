"""Authentication service - bearer token issuing and validation"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from jose import jwt, JWTError
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from transactions_service.config import settings
from transactions_service.exceptions import AuthenticationError


class CurrentUser(BaseModel):
    """Caller identity attached to an authenticated request"""
    user_id: str
    username: Optional[str] = None
    email: Optional[str] = None
    roles: List[str] = Field(default_factory=list)

    @property
    def attribution(self) -> str:
        """Name used when recording who did something"""
        return self.username or self.user_id


TEST_USER_CLAIMS = {
    "sub": "test-user-id",
    "username": "testuser",
    "email": "test@example.com",
    "roles": ["user"],
}

SERVICE_USER_CLAIMS = {
    "sub": "service-user-id",
    "username": "service",
    "email": "service@example.com",
    "roles": ["user", "service"],
}


class AuthService:
    """Issues and validates JWT bearer tokens"""

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create JWT access token"""
        to_encode = data.copy()
        expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode.update({"exp": expire, "type": "access"})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def create_service_token(data: dict) -> str:
        """Create a long-lived token for service-to-service calls"""
        return AuthService.create_access_token(
            data, expires_delta=timedelta(days=settings.SERVICE_TOKEN_EXPIRE_DAYS)
        )

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """Decode and validate JWT token"""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            return payload
        except JWTError:
            raise AuthenticationError(message="Invalid or expired token")

    @staticmethod
    def identity_from_payload(payload: Dict[str, Any]) -> CurrentUser:
        """Build the caller identity from validated token claims"""
        # A missing type claim counts as an access token
        if payload.get("type", "access") != "access":
            raise AuthenticationError(message="Invalid token type")
        if not payload.get("sub"):
            raise AuthenticationError(message="Invalid token payload")
        try:
            return CurrentUser(
                user_id=str(payload["sub"]),
                username=payload.get("username"),
                email=payload.get("email"),
                roles=payload.get("roles") or [],
            )
        except PydanticValidationError:
            raise AuthenticationError(message="Invalid token payload")

    @classmethod
    def authenticate(cls, token: str) -> CurrentUser:
        return cls.identity_from_payload(cls.decode_token(token))
