"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Optional environment variables:
        - HOST: Server host (default: 0.0.0.0)
        - PORT: Server port (default: 8080)
        - DATA_DIR: Directory holding products/categories/collections JSON
        - CATALOG_SOURCE: Where the catalog is loaded from (json, supabase)
        - SUPABASE_URL / SUPABASE_SERVICE_KEY: Required when CATALOG_SOURCE=supabase
        - ENVIRONMENT: Environment name (development, staging, production)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=4, description="Number of uvicorn workers")

    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Catalog Source
    # ==========================================================================
    catalog_source: str = Field(
        default="json",
        description="Catalog backend: 'json' (data_dir files) or 'supabase'"
    )

    @field_validator("catalog_source", mode="before")
    @classmethod
    def parse_catalog_source(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in ("json", "supabase"):
                raise ValueError(f"catalog_source must be 'json' or 'supabase', got {v!r}")
        return v

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding products.json, categories.json and collections.json"
    )

    @field_validator("data_dir", mode="before")
    @classmethod
    def parse_data_dir(cls, v):
        if isinstance(v, str):
            return Path(v)
        return v

    @property
    def products_file(self) -> Path:
        return self.data_dir / "products.json"

    @property
    def categories_file(self) -> Path:
        return self.data_dir / "categories.json"

    @property
    def collections_file(self) -> Path:
        return self.data_dir / "collections.json"

    # ==========================================================================
    # Supabase Configuration
    # ==========================================================================
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_service_key: Optional[str] = Field(default=None, description="Supabase service role key")

    # ==========================================================================
    # Catalog Behaviour
    # ==========================================================================
    new_arrivals_days: int = Field(
        default=30,
        description="Window (days) for the new arrivals listing"
    )
    category_default_limit: int = Field(
        default=3,
        description="Products returned by the category endpoint when no limit is given"
    )

    # ==========================================================================
    # HTTP Caching
    # ==========================================================================
    products_cache_seconds: int = Field(
        default=300,
        description="s-maxage for the full catalog listing"
    )
    product_cache_seconds: int = Field(
        default=120,
        description="s-maxage for single product, category and collection responses"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance

    Raises:
        ValidationError: If an environment variable has an invalid value
    """
    # Try to find .env file in project root
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        os.environ.setdefault("ENV_FILE", str(env_file))

    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: A new settings instance with overrides applied
    """
    test_defaults = {
        "environment": "testing",
        "debug": True,
        "catalog_source": "json",
    }
    test_defaults.update(overrides)

    return Settings(_env_file=None, **test_defaults)
