"""Conversions between store rows, form drafts and write payloads."""

from __future__ import annotations

import math
from collections.abc import Sequence

from pydantic import ValidationError

from src.models.product import Product, ProductDraft, ProductWrite

FEATURES_SEPARATOR = ","
FEATURES_DISPLAY_SEPARATOR = ", "


class DraftValidationError(ValueError):
    """Raised when a draft violates the form's input constraints."""


def normalize_features(features: Sequence[str] | str) -> list[str]:
    """Return features as an ordered list of trimmed tags.

    Text is split on commas and empty tags are dropped, so ``"a,,b"`` gives
    ``["a", "b"]`` and blank text gives ``[]``. A value that is already a list
    is returned unchanged, so normalizing twice yields the same list.
    """
    if isinstance(features, str):
        tags = (feature.strip() for feature in features.split(FEATURES_SEPARATOR))
        return [tag for tag in tags if tag]
    return list(features)


def features_for_display(features: Sequence[str] | str) -> str:
    """Join a features list back into the text shown in the form input."""
    if isinstance(features, str):
        return features
    return FEATURES_DISPLAY_SEPARATOR.join(features)


def parse_price(text: str, field: str = "price") -> float:
    """Convert a numeric form input to a float."""
    try:
        value = float(text)
    except (TypeError, ValueError) as exc:
        raise DraftValidationError(f"{field} must be a number, got {text!r}") from exc
    if not math.isfinite(value):
        raise DraftValidationError(f"{field} must be a finite number, got {text!r}")
    return value


def parse_optional_price(text: str, field: str = "original_price") -> float | None:
    """Convert an optional numeric form input; empty text means absent."""
    if not text.strip():
        return None
    return parse_price(text, field)


def format_amount(value: float | None) -> str:
    if value is None:
        return ""
    text = str(value)
    return text[:-2] if text.endswith(".0") else text


def draft_from_product(product: Product) -> ProductDraft:
    """Copy a stored product into a form draft.

    Absent optional values become empty strings and absent features an empty
    list, matching what the form inputs expect.
    """
    return ProductDraft(
        name=product.name,
        short_description=product.short_description or "",
        description=product.description or "",
        price=format_amount(product.price),
        original_price=format_amount(product.original_price or None),
        image_url=product.image_url or "",
        file_url=product.file_url or "",
        category_id=product.category_id or "",
        is_active=product.is_active,
        is_featured=product.is_featured,
        has_live_demo=product.has_live_demo,
        live_demo_url=product.live_demo_url or "",
        features=list(product.features or []),
    )


def _required(draft: ProductDraft, field: str) -> None:
    if not getattr(draft, field):
        raise DraftValidationError(f"{field} is required")


def build_product_record(draft: ProductDraft) -> ProductWrite:
    """Normalize a draft into the full record sent to the store.

    Raises:
        DraftValidationError: If a required field is empty, a price is not a
            number or a URL field is not an http(s) URL.
    """
    for field in ("name", "description", "price", "image_url", "file_url", "category_id"):
        _required(draft, field)

    price = parse_price(draft.price)
    original_price = parse_optional_price(draft.original_price)

    try:
        return ProductWrite(
            name=draft.name,
            short_description=draft.short_description or None,
            description=draft.description,
            price=price,
            original_price=original_price,
            image_url=draft.image_url,
            file_url=draft.file_url,
            category_id=draft.category_id,
            is_active=draft.is_active,
            is_featured=draft.is_featured,
            has_live_demo=draft.has_live_demo,
            live_demo_url=draft.live_demo_url or None,
            features=normalize_features(draft.features),
        )
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            if error["loc"]
            else error["msg"]
            for error in exc.errors()
        )
        raise DraftValidationError(details) from exc
