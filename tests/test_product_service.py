"""Tests for ProductService and BrandService against the database."""
import pytest

from app.schemas.dashboard import ProductForm
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.brand_service import BrandService
from app.services.catalog_engine import generate_code
from app.services.product_service import ProductService, ProductNotFoundError


def test_concurrent_creates_can_collide(db_session):
    """
    Test two admins saving in the same category from one snapshot.

    Both compute the code from the same product list, so both products
    are stored with the same code.
    """
    service = ProductService(db_session)
    service.create(ProductCreate(name="Existing", category="Shirts"))

    snapshot = service.list_products()
    first = service.create(ProductCreate(name="A", category="Shirts", code=generate_code("Shirts", snapshot)))
    second = service.create(ProductCreate(name="B", category="Shirts", code=generate_code("Shirts", snapshot)))

    assert first.code == second.code == "SHI002"
    assert first.id != second.id


def test_code_reused_after_delete(db_session):
    """Test deleting a product frees its count, so a later code repeats."""
    service = ProductService(db_session)
    first = service.create(ProductCreate(name="One", category="Bags"))
    second = service.create(ProductCreate(name="Two", category="Bags"))

    service.delete(first.id)
    third = service.create(ProductCreate(name="Three", category="Bags"))

    assert second.code == third.code == "BAG002"


def test_create_links_brand(db_session):
    service = ProductService(db_session)

    first = service.create(ProductCreate(name="Tee", brand="Uniqlo"))
    second = service.create(ProductCreate(name="Polo", brand="UNIQLO"))

    assert first.brand_id == second.brand_id
    assert second.brand == "UNIQLO"
    assert second.brand_name == "Uniqlo"


def test_update_relinks_brand(db_session):
    service = ProductService(db_session)
    product = service.create(ProductCreate(name="Tee", brand="Uniqlo"))

    updated = service.update(product.id, ProductUpdate(brand="Zara"))

    assert updated.brand_name == "Zara"
    assert [b.name for b in BrandService(db_session).list_brands()] == ["Uniqlo", "Zara"]


def test_update_blank_code_matches_dashboard(db_session):
    """Test the service and the dashboard form agree on a cleared code."""
    service = ProductService(db_session)
    product = service.create(ProductCreate(name="Oxford", category="Shirts", code="CUSTOM1"))

    form = ProductForm.from_product(product).model_copy(update={"code": ""})
    expected = form.to_payload(service.list_products()).code
    updated = service.update(product.id, ProductUpdate(code="  "))

    assert updated.code == expected == "SHI001"


def test_update_clears_affiliate_url(db_session):
    service = ProductService(db_session)
    product = service.create(ProductCreate(name="Tee", affiliate_url="shop.example.com"))

    updated = service.update(product.id, ProductUpdate(affiliate_url=""))

    assert updated.affiliate_url is None


def test_get_or_create_blank_brand(db_session):
    assert BrandService(db_session).get_or_create("  ") is None


def test_delete_missing_product(db_session):
    with pytest.raises(ProductNotFoundError):
        ProductService(db_session).delete(42)


def test_delete_returns_image_url(db_session):
    service = ProductService(db_session)
    product = service.create(ProductCreate(name="Tee", image_url="/media/1_tee.png"))

    assert service.delete(product.id) == "/media/1_tee.png"
    assert service.get_by_id(product.id) is None


def test_list_available_only(db_session):
    service = ProductService(db_session)
    service.create(ProductCreate(name="Shown"))
    service.create(ProductCreate(name="Hidden", available=False))

    assert [p.name for p in service.list_products(available_only=True)] == ["Shown"]
    assert len(service.list_products()) == 2
