from pydantic import BaseModel

from app.schemas.product import ProductResponse


class CatalogSection(BaseModel):
    """One category section of the public catalog."""
    category: str
    icon: str
    products: list[ProductResponse]


class CatalogResponse(BaseModel):
    """Public catalog grouped by category, in catalog order."""
    query: str
    total: int
    sections: list[CatalogSection]
