"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.domain import DEFAULT_PAGE_SIZE


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="STORES_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Store Locator API"
    api_prefix: str = "/api"
    store_file: Path = Field(
        default=Path("data/starbucks.csv"),
        description="Store dataset imported at startup when the index is empty (.csv or .xlsx).",
    )
    import_on_startup: bool = Field(default=True, description="Run the bulk import during application startup.")
    import_delimiter: str = Field(default=",", min_length=1, max_length=1)
    default_distance_unit: Literal["m", "km", "mi"] = Field(
        default="km",
        description="Unit applied to distances given as a bare number.",
    )
    nearby_radius: str = Field(
        default="50km",
        description="Radius encoded into the stores-nearby link of customer representations.",
    )
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    max_page_size: int = Field(default=500, ge=1)
    link_scheme: Literal["http", "https"] = Field(
        default="http",
        description="Scheme used when a forwarded host makes nearby links absolute.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:4200",
            "http://127.0.0.1:4200",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    supabase_stores_table: str = Field(default="stores", description="Table mirroring the store index.")

    @field_validator("store_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
