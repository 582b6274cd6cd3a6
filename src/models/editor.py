"""Schemas used by the product editor API."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, StrictBool, StrictStr

from src.models.product import Category, Product, ProductDraft
from src.services.catalog.normalization import features_for_display

MAX_NOTIFICATIONS = 20


class Notification(BaseModel):
    """Transient message shown to the console user after an action."""

    level: Literal["success", "error"]
    message: str
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())


class EditorState(BaseModel):
    """Complete view-model state of one product editor."""

    products: list[Product] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    draft: ProductDraft = Field(default_factory=ProductDraft)
    editing_id: str | None = None
    loading: bool = False
    notifications: list[Notification] = Field(default_factory=list)

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None


class TextFieldUpdate(BaseModel):
    """Update of a text or numeric-text form field."""

    field: Literal[
        "name",
        "short_description",
        "description",
        "price",
        "original_price",
        "image_url",
        "file_url",
        "category_id",
        "live_demo_url",
    ]
    value: StrictStr


class FlagFieldUpdate(BaseModel):
    """Update of a checkbox form field."""

    field: Literal["is_active", "is_featured", "has_live_demo"]
    value: StrictBool


class FeaturesUpdate(BaseModel):
    """Update of the features field, typed text or an already split list."""

    field: Literal["features"]
    value: list[StrictStr] | StrictStr


DraftFieldUpdate = Annotated[
    TextFieldUpdate | FlagFieldUpdate | FeaturesUpdate,
    Field(discriminator="field"),
]
"""A single form edit, discriminated by the field it targets."""


class EditorSessionView(BaseModel):
    """Render-ready snapshot of an editor session returned by the API."""

    session_id: str
    products: list[Product]
    categories: list[Category]
    draft: ProductDraft
    editing_id: str | None
    loading: bool
    notifications: list[Notification]
    is_editing: bool
    form_title: str
    submit_label: str
    features_text: str

    @classmethod
    def from_state(cls, session_id: str, state: EditorState) -> EditorSessionView:
        if state.loading:
            submit_label = "Saving..."
        elif state.is_editing:
            submit_label = "Update Product"
        else:
            submit_label = "Create Product"

        return cls(
            session_id=session_id,
            products=state.products,
            categories=state.categories,
            draft=state.draft,
            editing_id=state.editing_id,
            loading=state.loading,
            notifications=state.notifications,
            is_editing=state.is_editing,
            form_title="Edit Product" if state.is_editing else "Add New Product",
            submit_label=submit_label,
            features_text=features_for_display(state.draft.features),
        )
