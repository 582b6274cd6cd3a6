"""Product domain models and form schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def _check_http_url(value: str) -> str:
    # Validate like a url input, but keep the text exactly as typed.
    _HTTP_URL.validate_python(value)
    return value


HttpUrlText = Annotated[str, AfterValidator(_check_http_url)]


class Category(BaseModel):
    """Represents a category row owned by the record store."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(..., description="Store-assigned identifier of the category")
    name: str = ""
    description: str | None = None
    slug: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, value: Any) -> Any:
        return "" if value is None else value


class Product(BaseModel):
    """Represents a product row owned by the record store.

    Rows are taken as the authoritative snapshot, so only the identity is
    required here; form constraints are enforced on :class:`ProductWrite`.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(..., description="Store-assigned identifier of the product")
    name: str = ""
    short_description: str | None = None
    description: str | None = None
    price: float | None = 0
    original_price: float | None = None
    image_url: str | None = None
    file_url: str | None = None
    category_id: str | None = None
    is_active: bool = True
    is_featured: bool = False
    has_live_demo: bool = False
    live_demo_url: str | None = None
    features: list[str] | None = None
    created_at: datetime | None = Field(
        None,
        description="Store-assigned creation timestamp, used for default ordering",
    )

    @field_validator("name", mode="before")
    @classmethod
    def _null_name(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_active", "is_featured", "has_live_demo", mode="before")
    @classmethod
    def _null_flag(cls, value: Any) -> Any:
        # A NULL column reads as an unchecked box.
        return False if value is None else value


class ProductDraft(BaseModel):
    """Form-bound staging copy of a product's editable fields.

    Prices are kept as the text typed into the form. ``features`` holds either
    the raw comma separated text or an already normalized list.
    """

    name: str = ""
    short_description: str = ""
    description: str = ""
    price: str = ""
    original_price: str = ""
    image_url: str = ""
    file_url: str = ""
    category_id: str = ""
    is_active: bool = True
    is_featured: bool = False
    has_live_demo: bool = False
    live_demo_url: str = ""
    features: list[str] | str = Field(default_factory=list)


class ProductWrite(BaseModel):
    """Normalized record sent to the store on insert or full-record update."""

    name: str = Field(..., min_length=1)
    short_description: str | None = None
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    original_price: float | None = Field(
        None,
        ge=0,
        description="Absent when the form field was left empty",
    )
    image_url: HttpUrlText
    file_url: HttpUrlText
    category_id: str = Field(..., min_length=1)
    is_active: bool
    is_featured: bool
    has_live_demo: bool
    live_demo_url: str | None = Field(
        None,
        description="Checked as a URL only while has_live_demo is set",
    )
    features: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_live_demo_url(self) -> ProductWrite:
        # The demo URL input is hidden, and never validated, without a live demo.
        if self.has_live_demo and self.live_demo_url:
            try:
                _check_http_url(self.live_demo_url)
            except ValidationError as exc:
                raise ValueError(f"live_demo_url: {exc.errors()[0]['msg']}") from exc
        return self
