import hmac
import secrets
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.session import AdminSession

logger = logging.getLogger(__name__)

settings = get_settings()

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

SessionListener = Callable[[str, Optional[str]], None]


class InvalidCredentialsError(Exception):
    """Exception raised when sign-in credentials don't match."""
    pass


def _utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the stored columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SessionEvents:
    """
    Registry of session change listeners.

    Listeners are called with ``(event, email)`` for every sign-in and
    sign-out. One instance is owned by the application and handed to each
    AuthService.
    """

    def __init__(self):
        self._listeners: List[SessionListener] = []

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, event: str, email: Optional[str]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, email)
            except Exception as e:
                logger.error(f"Session listener failed on {event}: {e}")


class AuthService:
    """
    Admin authentication backed by the admin_sessions table.

    Sessions are opaque bearer tokens with a fixed lifetime. An expired
    session is removed the next time it is looked up, and periodically by
    the purge task.

    Sign-ins and sign-outs are reported to the given SessionEvents.
    """

    def __init__(
        self,
        db: Session,
        events: SessionEvents = None,
        admin_email: str = None,
        admin_password: str = None,
        ttl_minutes: int = None,
    ):
        self.db = db
        self.events = events or SessionEvents()
        self.admin_email = admin_email or settings.ADMIN_EMAIL
        self.admin_password = admin_password or settings.ADMIN_PASSWORD
        self.ttl = timedelta(minutes=ttl_minutes or settings.SESSION_TTL_MINUTES)

    def _check_credentials(self, email: str, password: str) -> bool:
        email_ok = hmac.compare_digest(
            email.strip().lower().encode(), self.admin_email.strip().lower().encode()
        )
        password_ok = hmac.compare_digest(password.encode(), self.admin_password.encode())
        return email_ok and password_ok

    def sign_in(self, email: str, password: str) -> AdminSession:
        """
        Start a session for valid admin credentials.

        Raises:
            InvalidCredentialsError: If email or password don't match
        """
        if not self._check_credentials(email, password):
            logger.warning(f"Failed sign-in attempt for {email}")
            raise InvalidCredentialsError("Invalid email or password")

        now = _utcnow()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            email=self.admin_email,
            created_at=now,
            expires_at=now + self.ttl,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(f"{session.email} signed in")
        self.events.notify(SIGNED_IN, session.email)
        return session

    def _get_session(self, token: str) -> Optional[AdminSession]:
        return self.db.query(AdminSession).filter(AdminSession.token == token).first()

    def sign_out(self, token: str) -> bool:
        """End a session. Returns False if the token was unknown."""
        session = self._get_session(token)
        if not session:
            return False

        email = session.email
        self.db.delete(session)
        self.db.commit()

        logger.info(f"{email} signed out")
        self.events.notify(SIGNED_OUT, email)
        return True

    def current_user(self, token: Optional[str]) -> Optional[str]:
        """
        Email of the admin owning ``token``, or None.

        An expired session is deleted and reported as signed out.
        """
        if not token:
            return None

        session = self._get_session(token)
        if not session:
            return None

        if session.expires_at <= _utcnow():
            email = session.email
            self.db.delete(session)
            self.db.commit()
            logger.info(f"Session for {email} expired")
            self.events.notify(SIGNED_OUT, email)
            return None

        return session.email

    def is_authenticated(self, token: Optional[str]) -> bool:
        return self.current_user(token) is not None

    def purge_expired(self) -> int:
        """Delete all expired sessions. Returns how many were removed."""
        expired = (
            self.db.query(AdminSession)
            .filter(AdminSession.expires_at <= _utcnow())
            .all()
        )
        emails = [session.email for session in expired]
        for session in expired:
            self.db.delete(session)
        self.db.commit()

        for email in emails:
            self.events.notify(SIGNED_OUT, email)
        if expired:
            logger.info(f"Purged {len(expired)} expired session(s)")
        return len(expired)
