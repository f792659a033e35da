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

    # Hosted REST backend
    BACKEND_URL: str = os.getenv("BACKEND_URL", "http://localhost:54321")
    BACKEND_API_KEY: str | None = os.getenv("BACKEND_API_KEY")
    BACKEND_TIMEOUT_SECONDS: float = float(os.getenv("BACKEND_TIMEOUT_SECONDS", "10"))

    # Redis settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    ANALYTICS_SNAPSHOT_KEY: str = os.getenv(
        "ANALYTICS_SNAPSHOT_KEY",
        "storefront:analytics:snapshot",
    )
    ANALYTICS_DASHBOARD_KEY: str = os.getenv(
        "ANALYTICS_DASHBOARD_KEY",
        "storefront:analytics:dashboard-open",
    )

    # Search-as-you-type
    SEARCH_DEBOUNCE_MS: int = int(os.getenv("SEARCH_DEBOUNCE_MS", "300"))
    SEARCH_RESULT_LIMIT: int = int(os.getenv("SEARCH_RESULT_LIMIT", "10"))
    SEARCH_TIMEOUT_SECONDS: float = float(os.getenv("SEARCH_TIMEOUT_SECONDS", "10"))
    SEARCH_SESSION_LIMIT: int = int(os.getenv("SEARCH_SESSION_LIMIT", "1000"))

    # Catalog
    FEATURED_PRODUCTS_LIMIT: int = int(os.getenv("FEATURED_PRODUCTS_LIMIT", "8"))

    # Analytics
    ANALYTICS_WINDOW_DAYS: int = int(os.getenv("ANALYTICS_WINDOW_DAYS", "30"))
    ANALYTICS_REFRESH_SECONDS: int = int(os.getenv("ANALYTICS_REFRESH_SECONDS", "30"))
    # A snapshot outlives at most two missed refreshes.
    ANALYTICS_SNAPSHOT_TTL_SECONDS: int = int(
        os.getenv("ANALYTICS_SNAPSHOT_TTL_SECONDS", str(2 * ANALYTICS_REFRESH_SECONDS))
    )
    ESTIMATED_CONVERSION_RATE: float = float(
        os.getenv("ESTIMATED_CONVERSION_RATE", "0.1")
    )

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    @property
    def backend_configured(self) -> bool:
        """Return True when requests to the backend can be authenticated."""
        return bool(self.BACKEND_URL and self.BACKEND_API_KEY)

    @property
    def search_debounce_seconds(self) -> float:
        return self.SEARCH_DEBOUNCE_MS / 1000

    def __init__(self):
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with environment={self.ENVIRONMENT}, "
            f"log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
