"""
Configuration settings for the application.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Hosted record store (Supabase / PostgREST)
    SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
    SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")
    STORE_TIMEOUT_SECONDS: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))
    PRODUCTS_TABLE: str = os.getenv("PRODUCTS_TABLE", "products")
    CATEGORIES_TABLE: str = os.getenv("CATEGORIES_TABLE", "categories")

    # Redis / editor session settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    ADMIN_SESSION_KEY_PREFIX: str = os.getenv(
        "ADMIN_SESSION_KEY_PREFIX",
        "admin:session:",
    )
    ADMIN_SESSION_TTL_SECONDS: int = int(
        os.getenv("ADMIN_SESSION_TTL_SECONDS", "3600")
    )

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    @property
    def store_enabled(self) -> bool:
        """Return True when a record store client can be initialized."""
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)

    def __init__(self):
        self.env = os.getenv("ENV", "dev")
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with env={self.env}, debug={self.debug}, "
            f"log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
