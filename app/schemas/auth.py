from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class LoginRequest(BaseModel):
    """Admin credentials."""
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Issued session token."""
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class SessionResponse(BaseModel):
    """Current session state."""
    authenticated: bool
    email: Optional[str] = None
