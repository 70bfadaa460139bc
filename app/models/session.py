from sqlalchemy import Column, Integer, String, DateTime

from app.database import Base


class AdminSession(Base):
    """An authenticated admin session identified by an opaque bearer token."""
    __tablename__ = "admin_sessions"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(128), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False)
    # Naive UTC timestamps
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<AdminSession(id={self.id}, email='{self.email}', expires_at={self.expires_at})>"
