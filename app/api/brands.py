from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.api.auth import require_admin
from app.services.brand_service import BrandService
from app.schemas.brand import BrandResponse

router = APIRouter(prefix="/brands", tags=["Brands"], dependencies=[Depends(require_admin)])


@router.get(
    "/",
    response_model=list[BrandResponse],
    summary="List brands",
    description="All brands ordered by name. Brands are created when products are saved."
)
def list_brands(db: Session = Depends(get_db)):
    return BrandService(db).list_brands()
