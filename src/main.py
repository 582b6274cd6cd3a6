"""ASGI entry point for the catalog admin service."""

from src.application import create_app

app = create_app()

__all__ = ["app"]
