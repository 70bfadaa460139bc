"""Tests for the admin dashboard view-model."""
import pytest
from pydantic import ValidationError

from app.schemas.dashboard import DashboardState, ProductForm


PRODUCT = {
    "id": 3,
    "code": "JAC001",
    "name": "Bomber",
    "brand": "Alpha",
    "category": "Jackets",
    "price": 450000,
    "available": False,
    "affiliate_url": None,
    "image_url": "/media/1_bomber.png",
}


def test_initial_state():
    state = DashboardState()

    assert state.mode == "create"
    assert state.form.category == "Shirts"
    assert state.form.available is True
    assert state.products == []


def test_load_cycle():
    state = DashboardState().load_started()
    assert state.loading is True

    loaded = state.load_succeeded([PRODUCT])
    assert loaded.loading is False
    assert loaded.products[0].code == "JAC001"
    assert loaded.products[0].display_price == "450,000"

    failed = state.load_failed("network down")
    assert failed.loading is False
    assert failed.error == "network down"


def test_transitions_do_not_mutate():
    state = DashboardState()
    changed = state.field_changed("name", "Parka")

    assert state.form.name == ""
    assert changed.form.name == "Parka"


def test_field_changed_rejects_unknown_field():
    with pytest.raises(ValueError):
        DashboardState().field_changed("stock", 3)
    with pytest.raises(ValueError):
        DashboardState().field_changed("id", 3)


def test_edit_switches_mode():
    state = DashboardState().edit_product(PRODUCT)

    assert state.mode == "edit"
    assert state.form.id == 3
    assert state.form.affiliate_url == ""
    assert state.form.available is False

    assert state.reset_form().mode == "create"


def test_submit_cycle():
    state = DashboardState().field_changed("name", "Parka").submit_started()
    assert state.submitting is True

    done = state.submit_succeeded()
    assert done.submitting is False
    assert done.form == ProductForm()

    failed = state.submit_failed("Could not save product")
    assert failed.error == "Could not save product"
    assert failed.form.name == "Parka"


def test_state_is_serializable():
    data = DashboardState().edit_product(PRODUCT).model_dump(mode="json")

    assert data["mode"] == "edit"
    assert data["form"]["code"] == "JAC001"


def test_payload_generates_code():
    existing = [{"category": "Shirts"}, {"category": "Shirts"}, {"category": "Pants"}]
    form = ProductForm(name="Flannel", price="125000")

    payload = form.to_payload(existing)

    assert payload.code == "SHI003"
    assert payload.price == 125000
    assert payload.affiliate_url is None
    assert payload.image_url is None


def test_payload_cleared_code_skips_edited_product():
    existing = [PRODUCT, {"id": 8, "category": "Jackets"}]
    form = ProductForm.from_product(PRODUCT).model_copy(update={"code": ""})

    assert form.to_payload(existing).code == "JAC002"


def test_payload_keeps_code_when_editing():
    payload = ProductForm.from_product(PRODUCT).to_payload([])

    assert payload.code == "JAC001"
    assert payload.image_url == "/media/1_bomber.png"


@pytest.mark.parametrize("price", ["", "abc", "nan", None])
def test_payload_price_defaults_to_zero(price):
    form = ProductForm.model_construct(**{**ProductForm().model_dump(), "price": price})

    assert form.to_payload([]).price == 0


def test_payload_blank_category_is_other():
    payload = ProductForm(category="").to_payload([])

    assert payload.category == "Other"
    assert payload.code == "OTH001"


def test_payload_negative_price_rejected():
    with pytest.raises(ValidationError):
        ProductForm(price="-5").to_payload([])
