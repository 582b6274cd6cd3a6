"""Tests for the PostgREST record store client."""

import json

import httpx
import pytest

from src.services.clients.store_client import PostgrestRecordStore, StoreError


def _store(handler):
    return PostgrestRecordStore(
        url="https://project.supabase.co/",
        api_key="service-key",
        transport=httpx.MockTransport(handler),
    )


class _Recorder:
    """Mock transport handler that records requests and replays a response."""

    def __init__(self, response=None):
        self.requests = []
        self._response = response or httpx.Response(200, json=[])

    def __call__(self, request):
        self.requests.append(request)
        return self._response


@pytest.mark.asyncio
async def test_select_orders_and_authenticates():
    recorder = _Recorder(httpx.Response(200, json=[{"id": 1, "name": "Kit"}]))
    store = _store(recorder)

    rows = await store.select("products", order_by="created_at", descending=True)

    assert rows == [{"id": 1, "name": "Kit"}]
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/products"
    assert request.url.params["select"] == "*"
    assert request.url.params["order"] == "created_at.desc"
    assert request.headers["apikey"] == "service-key"
    assert request.headers["authorization"] == "Bearer service-key"
    await store.aclose()


@pytest.mark.asyncio
async def test_select_without_order_leaves_store_default():
    recorder = _Recorder()
    store = _store(recorder)

    await store.select("categories")

    assert "order" not in recorder.requests[0].url.params
    await store.aclose()


@pytest.mark.asyncio
async def test_insert_posts_rows_and_asks_for_representation():
    recorder = _Recorder(httpx.Response(201, json=[{"id": 9, "name": "Kit"}]))
    store = _store(recorder)

    rows = await store.insert("products", [{"name": "Kit", "original_price": None}])

    assert rows == [{"id": 9, "name": "Kit"}]
    request = recorder.requests[0]
    assert request.method == "POST"
    assert json.loads(request.content) == [{"name": "Kit", "original_price": None}]
    assert request.headers["prefer"] == "return=representation"
    await store.aclose()


@pytest.mark.asyncio
async def test_update_filters_by_identity():
    recorder = _Recorder()
    store = _store(recorder)

    await store.update("products", {"name": "Renamed"}, match={"id": "7"})

    request = recorder.requests[0]
    assert request.method == "PATCH"
    assert request.url.params["id"] == "eq.7"
    assert json.loads(request.content) == {"name": "Renamed"}
    await store.aclose()


@pytest.mark.asyncio
async def test_delete_filters_by_identity_and_handles_empty_body():
    recorder = _Recorder(httpx.Response(204))
    store = _store(recorder)

    rows = await store.delete("products", match={"id": "7"})

    assert rows == []
    request = recorder.requests[0]
    assert request.method == "DELETE"
    assert request.url.params["id"] == "eq.7"
    await store.aclose()


@pytest.mark.asyncio
async def test_unfiltered_writes_are_refused():
    recorder = _Recorder()
    store = _store(recorder)

    with pytest.raises(ValueError):
        await store.delete("products", match={})

    assert recorder.requests == []
    await store.aclose()


@pytest.mark.asyncio
async def test_error_response_raises_store_error_with_message():
    recorder = _Recorder(
        httpx.Response(
            409,
            json={
                "code": "23505",
                "message": "duplicate key value violates unique constraint",
            },
        )
    )
    store = _store(recorder)

    with pytest.raises(StoreError) as excinfo:
        await store.insert("products", [{"name": "Kit"}])

    assert excinfo.value.message == "duplicate key value violates unique constraint"
    assert excinfo.value.code == "23505"
    assert excinfo.value.status_code == 409
    await store.aclose()


@pytest.mark.asyncio
async def test_non_json_error_falls_back_to_text():
    store = _store(_Recorder(httpx.Response(502, text="Bad Gateway")))

    with pytest.raises(StoreError, match="Bad Gateway"):
        await store.select("products")
    await store.aclose()


@pytest.mark.asyncio
async def test_non_json_success_body_raises_store_error():
    store = _store(_Recorder(httpx.Response(200, text="<html>maintenance</html>")))

    with pytest.raises(StoreError, match="Unreadable response") as excinfo:
        await store.select("products")

    assert excinfo.value.status_code == 200
    await store.aclose()


@pytest.mark.asyncio
async def test_transport_failure_raises_store_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    store = _store(handler)

    with pytest.raises(StoreError, match="connection refused"):
        await store.select("products")
    await store.aclose()


def test_credentials_are_required():
    with pytest.raises(ValueError):
        PostgrestRecordStore(url="", api_key="key")
    with pytest.raises(ValueError):
        PostgrestRecordStore(url="https://project.supabase.co", api_key="")
