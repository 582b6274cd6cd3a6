"""Routes driving the product editor of the admin console."""

from __future__ import annotations

import logging
from typing import Annotated

import redis.asyncio as redis
from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from src.models.editor import (
    EditorSessionView,
    FeaturesUpdate,
    FlagFieldUpdate,
    TextFieldUpdate,
)
from src.services.catalog.editor import (
    ProductEditor,
    ProductNotFoundError,
    SaveInProgressError,
)
from src.services.catalog.session_store import EditorSessionStore, get_redis_client
from src.services.clients.store_client import RecordStore, StoreDependency

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/sessions", tags=["products"])


def _get_session_store(
    client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> EditorSessionStore:
    return EditorSessionStore(client)


SessionStoreDependency = Annotated[EditorSessionStore, Depends(_get_session_store)]


def _require_store(store: RecordStore | None) -> RecordStore:
    if store is None:
        logger.warning("Admin request received but record store is not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Record store is not configured in this environment",
        )
    return store


async def _open_editor(
    session_id: str,
    store: RecordStore | None,
    sessions: EditorSessionStore,
) -> ProductEditor:
    record_store = _require_store(store)
    state = await sessions.fetch(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Unknown session id")

    async def persist(new_state) -> None:
        await sessions.save(session_id, new_state)

    return ProductEditor(record_store, state, on_change=persist)


@router.post(
    "",
    response_model=EditorSessionView,
    status_code=status.HTTP_201_CREATED,
    summary="Open an editor session and load products and categories",
)
async def open_session(
    store: StoreDependency,
    sessions: SessionStoreDependency,
) -> EditorSessionView:
    _require_store(store)
    session_id = await sessions.create()
    editor = await _open_editor(session_id, store, sessions)
    await editor.mount()
    return EditorSessionView.from_state(session_id, editor.state)


@router.get(
    "/{session_id}",
    response_model=EditorSessionView,
    summary="Fetch the current editor state",
)
async def fetch_session(
    session_id: str,
    store: StoreDependency,
    sessions: SessionStoreDependency,
) -> EditorSessionView:
    editor = await _open_editor(session_id, store, sessions)
    return EditorSessionView.from_state(session_id, editor.state)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Discard an editor session",
)
async def discard_session(
    session_id: str,
    sessions: SessionStoreDependency,
) -> Response:
    if not await sessions.discard(session_id):
        raise HTTPException(status_code=404, detail="Unknown session id")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{session_id}/reload",
    response_model=EditorSessionView,
    summary="Reload products and categories from the store",
)
async def reload_session(
    session_id: str,
    store: StoreDependency,
    sessions: SessionStoreDependency,
) -> EditorSessionView:
    editor = await _open_editor(session_id, store, sessions)
    await editor.mount()
    return EditorSessionView.from_state(session_id, editor.state)


@router.patch(
    "/{session_id}/draft",
    response_model=EditorSessionView,
    summary="Change one field of the draft",
)
async def update_draft(
    session_id: str,
    payload: Annotated[
        TextFieldUpdate | FlagFieldUpdate | FeaturesUpdate,
        Body(discriminator="field"),
    ],
    store: StoreDependency,
    sessions: SessionStoreDependency,
) -> EditorSessionView:
    editor = await _open_editor(session_id, store, sessions)
    await editor.update_field(payload)
    return EditorSessionView.from_state(session_id, editor.state)


@router.post(
    "/{session_id}/edit/{product_id}",
    response_model=EditorSessionView,
    summary="Start editing a loaded product",
)
async def edit_product(
    session_id: str,
    product_id: str,
    store: StoreDependency,
    sessions: SessionStoreDependency,
) -> EditorSessionView:
    editor = await _open_editor(session_id, store, sessions)
    try:
        await editor.edit(product_id)
    except ProductNotFoundError as error:
        raise HTTPException(status_code=404, detail=str(error)) from error
    return EditorSessionView.from_state(session_id, editor.state)


@router.post(
    "/{session_id}/cancel",
    response_model=EditorSessionView,
    summary="Discard the draft without contacting the store",
)
async def cancel_edit(
    session_id: str,
    store: StoreDependency,
    sessions: SessionStoreDependency,
) -> EditorSessionView:
    editor = await _open_editor(session_id, store, sessions)
    await editor.cancel()
    return EditorSessionView.from_state(session_id, editor.state)


@router.post(
    "/{session_id}/submit",
    response_model=EditorSessionView,
    summary="Create or update the product held in the draft",
    description=(
        "Store and validation failures are reported as an error notification "
        "in the returned state; the draft is kept so the user can retry."
    ),
)
async def submit_draft(
    session_id: str,
    store: StoreDependency,
    sessions: SessionStoreDependency,
) -> EditorSessionView:
    editor = await _open_editor(session_id, store, sessions)
    try:
        await editor.submit()
    except SaveInProgressError as error:
        raise HTTPException(status_code=409, detail=str(error)) from error
    return EditorSessionView.from_state(session_id, editor.state)


@router.delete(
    "/{session_id}/products/{product_id}",
    response_model=EditorSessionView,
    summary="Delete a product once the user has confirmed",
)
async def delete_product(
    session_id: str,
    product_id: str,
    store: StoreDependency,
    sessions: SessionStoreDependency,
    confirm: bool = False,
) -> EditorSessionView:
    editor = await _open_editor(session_id, store, sessions)
    await editor.delete_product(product_id, confirm=lambda _prompt: confirm)
    return EditorSessionView.from_state(session_id, editor.state)
