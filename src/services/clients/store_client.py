"""Record store client abstractions and implementations."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Annotated, Any

import httpx
from fastapi import Depends

from src.config import settings

logger = logging.getLogger(__name__)

Row = dict[str, Any]


class StoreError(RuntimeError):
    """Error reported by the record store for a single call."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class RecordStore(ABC):
    """Abstract select/insert/update/delete interface over named collections."""

    @abstractmethod
    async def select(
        self,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        """Return every row of the collection."""

    @abstractmethod
    async def insert(self, collection: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        """Insert rows and return them as stored."""

    @abstractmethod
    async def update(
        self,
        collection: str,
        values: Mapping[str, Any],
        *,
        match: Mapping[str, Any],
    ) -> list[Row]:
        """Update rows whose columns equal ``match`` and return them."""

    @abstractmethod
    async def delete(self, collection: str, *, match: Mapping[str, Any]) -> list[Row]:
        """Delete rows whose columns equal ``match`` and return them."""


class PostgrestRecordStore(RecordStore):
    """Record store backed by a Supabase project's PostgREST endpoint."""

    def __init__(
        self,
        *,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("Store URL is required to initialize record store client")
        if not api_key:
            raise ValueError("Store API key is required to initialize record store client")

        self._base_url = f"{url.rstrip('/')}/rest/v1"
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def select(
        self,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Row]:
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        return await self._request("GET", collection, params=params)

    async def insert(self, collection: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        return await self._request(
            "POST",
            collection,
            json=[dict(row) for row in rows],
            headers={"Prefer": "return=representation"},
        )

    async def update(
        self,
        collection: str,
        values: Mapping[str, Any],
        *,
        match: Mapping[str, Any],
    ) -> list[Row]:
        return await self._request(
            "PATCH",
            collection,
            params=self._filters(match),
            json=dict(values),
            headers={"Prefer": "return=representation"},
        )

    async def delete(self, collection: str, *, match: Mapping[str, Any]) -> list[Row]:
        return await self._request(
            "DELETE",
            collection,
            params=self._filters(match),
            headers={"Prefer": "return=representation"},
        )

    @staticmethod
    def _filters(match: Mapping[str, Any]) -> dict[str, str]:
        if not match:
            # PostgREST would apply an unfiltered write to the whole table
            raise ValueError("At least one filter is required for update and delete")
        return {column: f"eq.{value}" for column, value in match.items()}

    async def _request(
        self,
        method: str,
        collection: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> list[Row]:
        try:
            response = await self._client.request(
                method,
                f"/{collection}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("Record store request failed: %s %s: %s", method, collection, exc)
            raise StoreError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            raise self._error_from_response(response)

        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Record store returned a non-JSON body for %s %s", method, collection)
            raise StoreError(
                f"Unreadable response from record store: {exc}",
                status_code=response.status_code,
            ) from exc
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    @staticmethod
    def _error_from_response(response: httpx.Response) -> StoreError:
        code = None
        message = response.text or response.reason_phrase
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or message
            code = body.get("code")

        logger.warning(
            "Record store returned %s: %s",
            response.status_code,
            message,
            extra={"store_error_code": code},
        )
        return StoreError(message, code=code, status_code=response.status_code)


_record_store: RecordStore | None = None


def _initialize_store() -> RecordStore | None:
    if not settings.store_enabled:
        return None
    return PostgrestRecordStore(
        url=settings.SUPABASE_URL,
        api_key=settings.SUPABASE_KEY,
        timeout=settings.STORE_TIMEOUT_SECONDS,
    )


_record_store = _initialize_store()


def get_record_store() -> RecordStore | None:
    """FastAPI dependency returning the configured record store if any."""

    return _record_store


StoreDependency = Annotated[RecordStore | None, Depends(get_record_store)]
