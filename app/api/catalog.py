from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.services.catalog_engine import build_catalog
from app.services.product_service import ProductService
from app.schemas.catalog import CatalogResponse

router = APIRouter(prefix="/catalog", tags=["Catalog"])


@router.get(
    "/",
    response_model=CatalogResponse,
    summary="Public catalog",
    description="""
    Available products grouped by category, newest first within a category.

    Sections follow the fixed category order; products in unknown categories
    are listed under "Other" at the end. Empty sections are omitted.
    Product lists are cached in Redis.
    """
)
def get_catalog(
    search: Optional[str] = Query(None, description="Search by code, name or brand"),
    db: Session = Depends(get_db)
):
    service = ProductService(db)
    sections = build_catalog(service.list_catalog_products(), search)

    return CatalogResponse(
        query=(search or "").strip(),
        total=sum(len(section["products"]) for section in sections),
        sections=sections
    )
