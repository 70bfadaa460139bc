from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.models.brand import Brand  # noqa: F401  (relationship target)


class Product(Base):
    """
    Product model representing an item shown in the catalog.

    Attributes:
        id: Unique identifier for the product
        code: Human-readable code, category prefix plus running number (e.g. SHI003)
        name: Product name
        brand: Brand name as typed by the admin
        brand_id: Optional reference to the resolved Brand row
        category: Category name, normally one of the catalog categories
        price: Product price (non-negative)
        available: Whether the product is shown in the public catalog
        affiliate_url: Optional purchase link, stored as entered
        image_url: Optional public URL of the uploaded image
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    # Not unique: codes are generated from a snapshot count, see generate_code
    code = Column(String(32), nullable=False, index=True)
    name = Column(String(255), nullable=False, default="", index=True)
    brand = Column(String(255), nullable=False, default="")
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True, index=True)
    category = Column(String(64), nullable=False, default="Other", index=True)
    price = Column(Float, nullable=False, default=0)
    available = Column(Boolean, nullable=False, default=True, index=True)
    affiliate_url = Column(String(2048), nullable=True)
    image_url = Column(String(2048), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    brand_ref = relationship("Brand", back_populates="products")

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_non_negative'),
    )

    @property
    def brand_name(self) -> str:
        """Display name of the brand, preferring the linked Brand row."""
        if self.brand_ref is not None:
            return self.brand_ref.name
        return self.brand or ""

    def __repr__(self):
        return f"<Product(id={self.id}, code='{self.code}', category='{self.category}')>"
