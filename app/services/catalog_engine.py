"""
Catalog engine: product code generation, search and category grouping.

Everything in this module is a pure function over an in-memory snapshot of
products. Products may be ORM objects, pydantic models or plain dicts; fields
are read by name and missing or None fields are treated as empty.
"""
import math
import re
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Sequence

CATEGORY_ORDER = ("Shirts", "T-Shirts", "Jackets", "Pants", "Accessories", "Shoes", "Bags")
OTHER_CATEGORY = "Other"
DEFAULT_CATEGORY = "Shirts"
DEFAULT_PREFIX = "OTH"

CATEGORY_ICONS = {
    "Shirts": "👕",
    "T-Shirts": "👚",
    "Jackets": "🧥",
    "Pants": "👖",
    "Accessories": "🕶️",
    "Shoes": "👟",
    "Bags": "👜",
    OTHER_CATEGORY: "📦",
}
DEFAULT_ICON = "📦"

PRICE_PLACEHOLDER = "—"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")


def read_field(product: Any, name: str, default: Any = None) -> Any:
    """Read a field from a dict-like or attribute-style product."""
    if isinstance(product, Mapping):
        value = product.get(name, default)
    else:
        value = getattr(product, name, default)
    return default if value is None else value


def brand_display_name(product: Any) -> str:
    """Resolved brand name when the product links a Brand, else the brand text."""
    name = read_field(product, "brand_name") or read_field(product, "brand")
    return str(name) if name else ""


def generate_code(category: Optional[str], existing_products: Iterable[Any]) -> str:
    """
    Derive the code for a new product in ``category``.

    The prefix is the first three characters of the category, upper-cased
    (``OTH`` for an empty category). The suffix is the number of existing
    products with exactly this category plus one, zero-padded to three digits.

    Two callers working from the same snapshot get the same code; nothing
    here reserves the number.
    """
    label = "" if category is None else str(category)
    prefix = label[:3].upper() if label.strip() else DEFAULT_PREFIX
    count = sum(1 for product in existing_products if read_field(product, "category") == category)
    return f"{prefix}{count + 1:03d}"


def filter_products(products: Iterable[Any], query: Optional[str]) -> List[Any]:
    """
    Case-insensitive substring search over name, brand and code.

    An empty or whitespace-only query returns every product in input order.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(products)

    matched = []
    for product in products:
        name = str(read_field(product, "name", "")).lower()
        brand = brand_display_name(product).lower()
        code = str(read_field(product, "code", "")).lower()
        if needle in name or needle in brand or needle in code:
            matched.append(product)
    return matched


def group_by_category(
    products: Iterable[Any],
    order: Sequence[str] = CATEGORY_ORDER,
) -> Dict[str, List[Any]]:
    """
    Bucket products by category following ``order``.

    Categories outside ``order`` go to the "Other" bucket, which comes after
    the known ones. Empty buckets are dropped. Products keep their input
    order within a bucket.
    """
    buckets: Dict[str, List[Any]] = {category: [] for category in order}
    for product in products:
        category = read_field(product, "category")
        key = category if isinstance(category, str) and category in buckets else OTHER_CATEGORY
        buckets.setdefault(key, []).append(product)
    return {category: items for category, items in buckets.items() if items}


def category_icon(category: Optional[str]) -> str:
    return CATEGORY_ICONS.get(category, DEFAULT_ICON)


def build_catalog(
    products: Iterable[Any],
    query: Optional[str] = None,
    order: Sequence[str] = CATEGORY_ORDER,
) -> List[Dict[str, Any]]:
    """Filter then group products into display sections."""
    grouped = group_by_category(filter_products(products, query), order)
    return [
        {"category": category, "icon": category_icon(category), "products": items}
        for category, items in grouped.items()
    ]


def format_price(value: Any) -> str:
    """
    Format a price with grouped thousands, e.g. ``1000 -> "1,000"``.

    Values that are not finite numbers render as the placeholder.
    """
    if value is None or isinstance(value, bool):
        return PRICE_PLACEHOLDER
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return PRICE_PLACEHOLDER
    if not math.isfinite(number):
        return PRICE_PLACEHOLDER
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def normalize_affiliate_url(value: Optional[str]) -> Optional[str]:
    """
    Prefix ``https://`` to a link that has no scheme.

    Empty input gives None. The result is not validated as a URL.
    """
    if value is None:
        return None
    url = str(value).strip()
    if not url:
        return None
    if _SCHEME_RE.match(url):
        return url
    return f"https://{url}"
