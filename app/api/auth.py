from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.services.auth_service import AuthService, InvalidCredentialsError
from app.schemas.auth import LoginRequest, TokenResponse, SessionResponse

router = APIRouter(prefix="/auth", tags=["Auth"])

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request, db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db, events=getattr(request.app.state, "session_events", None))


def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


def require_admin(
    token: Optional[str] = Depends(get_token),
    auth: AuthService = Depends(get_auth_service),
) -> str:
    """Dependency for admin-only routes. Returns the signed-in email."""
    email = auth.current_user(token)
    if not email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return email


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Sign in",
    description="Sign in with the admin email and password and receive a bearer token."
)
def login(
    credentials: LoginRequest,
    auth: AuthService = Depends(get_auth_service)
):
    try:
        session = auth.sign_in(credentials.email, credentials.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e)
        )

    return TokenResponse(access_token=session.token, expires_at=session.expires_at)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Sign out",
    description="End the current session."
)
def logout(
    token: Optional[str] = Depends(get_token),
    auth: AuthService = Depends(get_auth_service)
):
    if not token or not auth.sign_out(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    return None


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Current session",
    description="Report whether the caller is signed in."
)
def current_session(
    token: Optional[str] = Depends(get_token),
    auth: AuthService = Depends(get_auth_service)
):
    email = auth.current_user(token)
    return SessionResponse(authenticated=email is not None, email=email)
