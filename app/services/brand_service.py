from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Optional, List
import logging

from app.models.brand import Brand

logger = logging.getLogger(__name__)


class BrandService:
    """Brand lookup and get-or-create by name."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_name(self, name: str) -> Optional[Brand]:
        """Case-insensitive lookup on the trimmed name."""
        return (
            self.db.query(Brand)
            .filter(func.lower(Brand.name) == name.strip().lower())
            .first()
        )

    def get_or_create(self, name: Optional[str]) -> Optional[Brand]:
        """
        Return the brand matching ``name``, creating it when missing.

        A blank name resolves to no brand. The new row is flushed, not
        committed, so it joins the caller's transaction.

        Args:
            name: Brand name as typed

        Returns:
            Brand instance or None for a blank name
        """
        if not name or not name.strip():
            return None

        brand = self.find_by_name(name)
        if brand:
            return brand

        brand = Brand(name=name.strip())
        self.db.add(brand)
        self.db.flush()
        logger.info(f"Brand #{brand.id} '{brand.name}' created")
        return brand

    def list_brands(self) -> List[Brand]:
        return self.db.query(Brand).order_by(Brand.name.asc()).all()
