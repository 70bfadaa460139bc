from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.api.auth import require_admin
from app.services.product_service import ProductService, ProductNotFoundError
from app.services.storage_service import (
    StorageService,
    InvalidUploadError,
    UploadTooLargeError,
    get_storage,
)
from app.schemas.product import (
    AvailabilityUpdate,
    NextCodeResponse,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse
)
from app.tasks.maintenance_tasks import delete_stored_image

router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(require_admin)])


def _not_found(e: ProductNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="""
    Create a product. When no code is given one is generated from the
    category: the first three letters upper-cased plus the number of
    products already in the category, plus one (e.g. SHI003).

    Codes are derived from the current product list, so two products saved
    at the same moment in the same category can receive the same code.
    """
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new product.

    - **name**, **brand**: free text
    - **category**: catalog category, blank is stored as "Other"
    - **price**: non-negative number
    - **available**: shown in the public catalog
    - **affiliate_url**: purchase link, a scheme is added for display if missing
    """
    service = ProductService(db)
    return service.create(product_data)


@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List all products",
    description="All products, newest first, with optional search on code, name and brand."
)
def list_products(
    search: Optional[str] = Query(None, description="Search by code, name or brand"),
    available: Optional[bool] = Query(None, description="Only available (true) products"),
    db: Session = Depends(get_db)
):
    service = ProductService(db)
    products = service.search(search, available_only=bool(available))

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=len(products)
    )


@router.get(
    "/next-code",
    response_model=NextCodeResponse,
    summary="Preview the next product code",
    description="Code a new product in the given category would receive right now."
)
def next_code(
    category: str = Query(..., description="Catalog category"),
    db: Session = Depends(get_db)
):
    service = ProductService(db)
    return NextCodeResponse(category=category, code=service.next_code(category))


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get detailed information about a specific product."
)
def get_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    service = ProductService(db)
    try:
        return service.get_or_raise(product_id)
    except ProductNotFoundError as e:
        raise _not_found(e)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a product.

    Partial updates are supported. The product code is kept unless a new
    code is sent explicitly.
    """
    service = ProductService(db)
    try:
        return service.update(product_id, product_data)
    except ProductNotFoundError as e:
        raise _not_found(e)


@router.patch(
    "/{product_id}/availability",
    response_model=ProductResponse,
    summary="Toggle availability",
    description="Show or hide a product in the public catalog."
)
def set_availability(
    product_id: int,
    payload: AvailabilityUpdate,
    db: Session = Depends(get_db)
):
    service = ProductService(db)
    try:
        return service.set_availability(product_id, payload.available)
    except ProductNotFoundError as e:
        raise _not_found(e)


@router.post(
    "/{product_id}/image",
    response_model=ProductResponse,
    summary="Upload product image",
    description="Store an image file and set it as the product image. Replaces any previous image."
)
def upload_image(
    product_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage)
):
    service = ProductService(db)
    if not service.get_by_id(product_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    data = file.file.read()
    try:
        image_url = storage.store(file.filename, data, file.content_type)
    except UploadTooLargeError as e:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(e)
        )
    except InvalidUploadError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    product, previous = service.set_image(product_id, image_url)
    if previous and previous != image_url:
        delete_stored_image.delay(previous)

    return product


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="Delete a product by ID. Deletion is immediate and cannot be undone."
)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    service = ProductService(db)
    try:
        image_url = service.delete(product_id)
    except ProductNotFoundError as e:
        raise _not_found(e)

    if image_url:
        delete_stored_image.delay(image_url)

    return None
