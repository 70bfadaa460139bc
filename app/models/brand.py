from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Brand(Base):
    """
    Brand referenced by products.

    Brands are created on first use when a product is saved and are
    never deleted by the application.
    """
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship("Product", back_populates="brand_ref")

    def __repr__(self):
        return f"<Brand(id={self.id}, name='{self.name}')>"
