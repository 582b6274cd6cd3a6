"""System-level routes such as health checks."""

from __future__ import annotations

import httpx
from fastapi import APIRouter

from src.config import settings

router = APIRouter(tags=["system"])


@router.get("/")
async def read_root() -> dict[str, str]:
    """Hello World endpoint used by smoke tests."""

    return {"message": "Hello World"}


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint with record store connectivity check."""

    if not settings.store_enabled:
        store_status = "not_configured"
    else:
        store_url = f"{settings.SUPABASE_URL.rstrip('/')}/rest/v1/"
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    store_url,
                    headers={"apikey": settings.SUPABASE_KEY},
                    timeout=5.0,
                )
                store_status = (
                    "connected" if response.status_code == 200 else "disconnected"
                )
        except Exception:
            store_status = "disconnected"

    return {
        "status": "healthy",
        "store": store_status,
        "environment": settings.ENVIRONMENT,
    }
