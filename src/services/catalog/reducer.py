"""Pure state transitions for the product editor.

Every function takes the current :class:`EditorState` and returns a new one;
none of them talk to the record store.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from src.models.editor import (
    MAX_NOTIFICATIONS,
    DraftFieldUpdate,
    EditorState,
    Notification,
)
from src.models.product import Category, Product, ProductDraft
from src.services.catalog.normalization import draft_from_product


def empty_draft() -> ProductDraft:
    return ProductDraft()


def apply_field_update(state: EditorState, update: DraftFieldUpdate) -> EditorState:
    """Write one typed form value into the draft."""
    draft = state.draft.model_copy(update={update.field: update.value})
    return state.model_copy(update={"draft": draft})


def begin_edit(state: EditorState, product: Product) -> EditorState:
    """Replace the draft with a copy of ``product`` and mark it as edited."""
    return state.model_copy(
        update={
            "draft": draft_from_product(product),
            "editing_id": product.id,
        }
    )


def reset_form(state: EditorState) -> EditorState:
    """Clear the draft and the editing reference."""
    return state.model_copy(update={"draft": empty_draft(), "editing_id": None})


def set_loading(state: EditorState, loading: bool) -> EditorState:
    return state.model_copy(update={"loading": loading})


def replace_products(state: EditorState, products: Iterable[Product]) -> EditorState:
    return state.model_copy(update={"products": list(products)})


def replace_categories(state: EditorState, categories: Iterable[Category]) -> EditorState:
    return state.model_copy(update={"categories": list(categories)})


def notify(
    state: EditorState,
    level: Literal["success", "error"],
    message: str,
) -> EditorState:
    """Append a notification, keeping only the most recent ones."""
    notifications = [*state.notifications, Notification(level=level, message=message)]
    return state.model_copy(
        update={"notifications": notifications[-MAX_NOTIFICATIONS:]}
    )


def find_product(state: EditorState, product_id: str) -> Product | None:
    for product in state.products:
        if product.id == product_id:
            return product
    return None
