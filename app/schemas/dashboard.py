"""
Admin dashboard view-model.

The dashboard state is a plain serializable model. Each transition returns a
new state and leaves the old one untouched, so a UI shell can keep history,
persist it or diff it as it likes.
"""
import math
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.schemas.product import ProductCreate, ProductResponse
from app.services.catalog_engine import (
    DEFAULT_CATEGORY,
    OTHER_CATEGORY,
    generate_code,
    read_field,
)


def _coerce_price(value: Any) -> float:
    """Form price to a number, 0 when blank or not a finite number."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class ProductForm(BaseModel):
    """Product form fields as edited by the admin."""
    id: Optional[int] = None
    code: str = ""
    name: str = ""
    brand: str = ""
    category: str = DEFAULT_CATEGORY
    price: Union[str, float] = ""
    available: bool = True
    affiliate_url: str = ""
    image_url: str = ""

    @classmethod
    def from_product(cls, product: Any) -> "ProductForm":
        """Fill the form from an existing product for editing."""
        return cls(
            id=read_field(product, "id"),
            code=read_field(product, "code", ""),
            name=read_field(product, "name", ""),
            brand=read_field(product, "brand", ""),
            category=read_field(product, "category", DEFAULT_CATEGORY),
            price=read_field(product, "price", ""),
            available=bool(read_field(product, "available", False)),
            affiliate_url=read_field(product, "affiliate_url", ""),
            image_url=read_field(product, "image_url", ""),
        )

    def to_payload(self, existing_products: Iterable[Any] = ()) -> ProductCreate:
        """
        Build the save payload.

        A blank code is generated from the form category and the given
        snapshot of products. When editing, the product itself is left out
        of the count.
        """
        others = [p for p in existing_products if self.id is None or read_field(p, "id") != self.id]
        return ProductCreate(
            code=self.code.strip() or generate_code(self.category, others),
            name=self.name or "",
            brand=self.brand or "",
            category=self.category or OTHER_CATEGORY,
            price=_coerce_price(self.price),
            available=bool(self.available),
            affiliate_url=self.affiliate_url or None,
            image_url=self.image_url or None,
        )


class DashboardState(BaseModel):
    """State of the admin dashboard: product list, form and status flags."""
    products: list[ProductResponse] = Field(default_factory=list)
    loading: bool = False
    submitting: bool = False
    error: Optional[str] = None
    form: ProductForm = Field(default_factory=ProductForm)

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def mode(self) -> str:
        return "create" if self.form.id is None else "edit"

    def load_started(self) -> "DashboardState":
        return self.model_copy(update={"loading": True, "error": None})

    def load_succeeded(self, products: Iterable[Any]) -> "DashboardState":
        items = [
            p if isinstance(p, ProductResponse) else ProductResponse.model_validate(p)
            for p in products
        ]
        return self.model_copy(update={"products": items, "loading": False, "error": None})

    def load_failed(self, message: str) -> "DashboardState":
        return self.model_copy(update={"loading": False, "error": message})

    def field_changed(self, field: str, value: Any) -> "DashboardState":
        """Set one form field. The id is only set through edit_product."""
        if field == "id" or field not in ProductForm.model_fields:
            raise ValueError(f"Unknown form field: {field}")
        form = ProductForm.model_validate({**self.form.model_dump(), field: value})
        return self.model_copy(update={"form": form})

    def edit_product(self, product: Any) -> "DashboardState":
        return self.model_copy(update={"form": ProductForm.from_product(product), "error": None})

    def reset_form(self) -> "DashboardState":
        return self.model_copy(update={"form": ProductForm()})

    def submit_started(self) -> "DashboardState":
        return self.model_copy(update={"submitting": True, "error": None})

    def submit_succeeded(self) -> "DashboardState":
        # The form is cleared after a save, the caller reloads the list
        return self.model_copy(update={"submitting": False, "form": ProductForm()})

    def submit_failed(self, message: str) -> "DashboardState":
        return self.model_copy(update={"submitting": False, "error": message})
