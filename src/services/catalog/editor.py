"""Product editor view-model mediating between the record store and the form."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

from pydantic import ValidationError

from src.config import settings
from src.models.editor import DraftFieldUpdate, EditorState
from src.models.product import Category, Product
from src.services.catalog import reducer
from src.services.catalog.normalization import (
    DraftValidationError,
    build_product_record,
)
from src.services.clients.store_client import RecordStore, StoreError

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION_PROMPT = "Are you sure you want to delete this product?"

StateListener = Callable[[EditorState], Awaitable[None]]
Confirm = Callable[[str], bool | Awaitable[bool]]


class SaveInProgressError(RuntimeError):
    """Raised when a submit arrives while another save is still in flight."""


class ProductNotFoundError(LookupError):
    """Raised when editing a product that is not in the loaded list."""


class ProductEditor:
    """Render and reconcile a single product draft against the store.

    State changes go through the pure functions in
    :mod:`src.services.catalog.reducer`; after each change the optional
    ``on_change`` listener receives the new state.
    """

    def __init__(
        self,
        store: RecordStore,
        state: EditorState | None = None,
        *,
        on_change: StateListener | None = None,
        products_table: str | None = None,
        categories_table: str | None = None,
    ) -> None:
        self._store = store
        self._state = state or EditorState()
        self._on_change = on_change
        self._products_table = products_table or settings.PRODUCTS_TABLE
        self._categories_table = categories_table or settings.CATEGORIES_TABLE

    @property
    def state(self) -> EditorState:
        return self._state

    async def _commit(self, state: EditorState) -> None:
        self._state = state
        if self._on_change is not None:
            await self._on_change(state)

    async def mount(self) -> None:
        """Load products and categories concurrently."""
        # Fetch in parallel, apply in sequence.
        products, categories = await asyncio.gather(
            self._fetch_products(),
            self._fetch_categories(),
        )
        await self._apply_products(products)
        await self._apply_categories(categories)

    async def load_products(self) -> None:
        """Replace the product list with the store's, newest first."""
        await self._apply_products(await self._fetch_products())

    async def load_categories(self) -> None:
        """Replace the category list with the store's."""
        await self._apply_categories(await self._fetch_categories())

    async def _fetch_products(self) -> list[Product] | StoreError:
        try:
            rows = await self._store.select(
                self._products_table,
                order_by="created_at",
                descending=True,
            )
            return [Product.model_validate(row) for row in rows or []]
        except (StoreError, ValidationError) as exc:
            return _as_store_error(exc)

    async def _fetch_categories(self) -> list[Category] | StoreError:
        try:
            rows = await self._store.select(self._categories_table)
            return [Category.model_validate(row) for row in rows or []]
        except (StoreError, ValidationError) as exc:
            return _as_store_error(exc)

    async def _apply_products(self, result: list[Product] | StoreError) -> None:
        if isinstance(result, StoreError):
            # Keep the previous snapshot rather than blanking the list.
            logger.warning("Failed to load products: %s", result.message)
            await self._commit(
                reducer.notify(self._state, "error", f"Error loading products: {result.message}")
            )
            return
        await self._commit(reducer.replace_products(self._state, result))

    async def _apply_categories(self, result: list[Category] | StoreError) -> None:
        if isinstance(result, StoreError):
            logger.warning("Failed to load categories: %s", result.message)
            await self._commit(
                reducer.notify(
                    self._state, "error", f"Error loading categories: {result.message}"
                )
            )
            return
        await self._commit(reducer.replace_categories(self._state, result))

    async def update_field(self, update: DraftFieldUpdate) -> None:
        await self._commit(reducer.apply_field_update(self._state, update))

    async def edit(self, product: Product | str) -> None:
        """Copy a product into the draft and remember it as being edited."""
        if isinstance(product, str):
            found = reducer.find_product(self._state, product)
            if found is None:
                raise ProductNotFoundError(f"Unknown product {product}")
            product = found
        await self._commit(reducer.begin_edit(self._state, product))

    async def cancel(self) -> None:
        await self._commit(reducer.reset_form(self._state))

    async def submit(self) -> bool:
        """Insert or update the draft, depending on whether a product is edited.

        Returns:
            True when the store accepted the record.

        Raises:
            SaveInProgressError: If a previous submit has not finished yet.
        """
        if self._state.loading:
            raise SaveInProgressError("A save is already in progress")

        await self._commit(reducer.set_loading(self._state, True))
        editing_id = self._state.editing_id
        try:
            try:
                record = build_product_record(self._state.draft)
                payload = record.model_dump()
                if editing_id is not None:
                    await self._store.update(
                        self._products_table,
                        payload,
                        match={"id": editing_id},
                    )
                    message = "Product updated successfully!"
                else:
                    await self._store.insert(self._products_table, [payload])
                    message = "Product created successfully!"
            except (StoreError, DraftValidationError) as exc:
                logger.warning(
                    "Saving product failed: %s",
                    exc,
                    extra={"editing_id": editing_id},
                )
                await self._commit(
                    reducer.notify(self._state, "error", f"Error saving product: {exc}")
                )
                return False

            logger.info(
                "Product saved",
                extra={"editing_id": editing_id, "product_name": record.name},
            )
            await self._commit(reducer.notify(reducer.reset_form(self._state), "success", message))
            await self.load_products()
            return True
        finally:
            await self._commit(reducer.set_loading(self._state, False))

    async def delete_product(self, product_id: str, confirm: Confirm) -> bool:
        """Delete a product after the user confirms. There is no undo.

        Returns:
            True when the store deleted the product.
        """
        confirmed = confirm(DELETE_CONFIRMATION_PROMPT)
        if inspect.isawaitable(confirmed):
            confirmed = await confirmed
        if not confirmed:
            return False

        try:
            await self._store.delete(self._products_table, match={"id": product_id})
        except StoreError as exc:
            logger.warning(
                "Deleting product failed: %s", exc, extra={"product_id": product_id}
            )
            await self._commit(
                reducer.notify(self._state, "error", f"Error deleting product: {exc}")
            )
            return False

        logger.info("Product deleted", extra={"product_id": product_id})
        await self._commit(
            reducer.notify(self._state, "success", "Product deleted successfully!")
        )
        await self.load_products()
        return True


def _as_store_error(exc: StoreError | ValidationError) -> StoreError:
    if isinstance(exc, StoreError):
        return exc
    return StoreError(f"Unexpected row format: {exc.error_count()} invalid field(s)")
