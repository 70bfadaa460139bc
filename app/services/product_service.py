from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, List, Tuple
import logging

from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from app.services.brand_service import BrandService
from app.services.catalog_engine import OTHER_CATEGORY, filter_products, generate_code
from app.utils.cache import (
    CacheService,
    cache_service,
    CATALOG_PREFIX,
    CATALOG_AVAILABLE_KEY,
)

logger = logging.getLogger(__name__)


class ProductNotFoundError(Exception):
    """Exception raised when the requested product doesn't exist."""
    pass


def _category_or_other(category: Optional[str]) -> str:
    return category if category and category.strip() else OTHER_CATEGORY


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ProductService:
    """
    Service class for Product storage operations.

    This service handles:
    - Listing products newest first, optionally only available ones
    - Creating products with a generated code
    - Updating, toggling availability and deleting products
    - Resolving brand names to Brand rows
    - Invalidating the cached public catalog on every change

    CODE GENERATION:
    ================
    Codes come from ``generate_code`` over a fresh snapshot of all products,
    counting the products already in the category. Two admins saving in the
    same category at the same moment can read the same count and store the
    same code. The column carries no unique constraint, so such a collision
    is stored rather than rejected.
    """

    def __init__(self, db: Session, cache: CacheService = None):
        self.db = db
        self.cache = cache or cache_service
        self.brands = BrandService(db)

    def list_products(self, available_only: bool = False) -> List[Product]:
        """
        List products ordered by creation time, newest first.

        Args:
            available_only: Only return products marked available

        Returns:
            List of products
        """
        query = self.db.query(Product)
        if available_only:
            query = query.filter(Product.available.is_(True))
        return query.order_by(Product.created_at.desc(), Product.id.desc()).all()

    def search(self, query: Optional[str] = None, available_only: bool = False) -> List[Product]:
        """List products matching ``query`` on name, brand or code."""
        return filter_products(self.list_products(available_only), query)

    def list_catalog_products(self) -> List[dict]:
        """
        Available products for the public catalog, as serialized dicts.

        Served from Redis when cached, otherwise read from the database
        and cached.
        """
        cached = self.cache.get(CATALOG_PREFIX, CATALOG_AVAILABLE_KEY)
        if cached is not None:
            return cached

        items = [
            ProductResponse.model_validate(p).model_dump(mode="json")
            for p in self.list_products(available_only=True)
        ]
        self.cache.set(CATALOG_PREFIX, CATALOG_AVAILABLE_KEY, items)
        return items

    def next_code(self, category: Optional[str]) -> str:
        """Code the next product in ``category`` would get right now."""
        return generate_code(_category_or_other(category), self.list_products())

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        A blank category is stored as "Other". A missing code is generated
        from the category and the current product list.

        Args:
            product_data: Product creation data

        Returns:
            Created product instance
        """
        category = _category_or_other(product_data.category)
        code = product_data.code or generate_code(category, self.list_products())

        try:
            brand = self.brands.get_or_create(product_data.brand)
            product = Product(
                code=code,
                name=product_data.name or "",
                brand=product_data.brand or "",
                brand_id=brand.id if brand else None,
                category=category,
                price=product_data.price or 0,
                available=product_data.available,
                affiliate_url=_blank_to_none(product_data.affiliate_url),
                image_url=_blank_to_none(product_data.image_url),
            )
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error creating product: {e}")
            raise

        self.cache.invalidate_catalog()
        logger.info(f"Product #{product.id} created with code {product.code}")
        return product

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Get a product by ID, or None if not found."""
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_or_raise(self, product_id: int) -> Product:
        product = self.get_by_id(product_id)
        if not product:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")
        return product

    def update(self, product_id: int, product_data: ProductUpdate) -> Product:
        """
        Update an existing product.

        Only fields present in ``product_data`` are changed. The code is kept
        unless a new one is given explicitly; changing the category does not
        regenerate it. A blank code is regenerated from the product category.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        product = self.get_or_raise(product_id)
        update_data = product_data.model_dump(exclude_unset=True)

        try:
            for field, value in update_data.items():
                if value is None and field not in ("affiliate_url", "image_url"):
                    continue
                if field == "brand":
                    brand = self.brands.get_or_create(value)
                    product.brand = value or ""
                    product.brand_id = brand.id if brand else None
                elif field == "category":
                    product.category = _category_or_other(value)
                elif field == "code":
                    product.code = value.strip()
                elif field in ("affiliate_url", "image_url"):
                    setattr(product, field, _blank_to_none(value))
                else:
                    setattr(product, field, value)

            if not product.code:
                others = [p for p in self.list_products() if p.id != product.id]
                product.code = generate_code(product.category, others)

            self.db.commit()
            self.db.refresh(product)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating product #{product_id}: {e}")
            raise

        self.cache.invalidate_catalog()
        logger.info(f"Product #{product.id} updated")
        return product

    def set_availability(self, product_id: int, available: bool) -> Product:
        """Show or hide a product in the public catalog."""
        return self.update(product_id, ProductUpdate(available=available))

    def set_image(self, product_id: int, image_url: str) -> Tuple[Product, Optional[str]]:
        """
        Point a product at a newly stored image.

        Returns:
            Tuple of (updated product, previous image URL or None)
        """
        previous = self.get_or_raise(product_id).image_url
        product = self.update(product_id, ProductUpdate(image_url=image_url))
        return product, previous

    def delete(self, product_id: int) -> Optional[str]:
        """
        Delete a product. Deletion is immediate and cannot be undone.

        Returns:
            Image URL of the deleted product, so callers can clean it up

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        product = self.get_or_raise(product_id)
        image_url = product.image_url

        try:
            self.db.delete(product)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting product #{product_id}: {e}")
            raise

        self.cache.invalidate_catalog()
        logger.info(f"Product #{product_id} deleted")
        return image_url
