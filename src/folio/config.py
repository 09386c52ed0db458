"""Site configuration using Pydantic Settings."""

from pathlib import Path
from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SITE_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_ROOT = Path(__file__).resolve().parent


def get_default_database_url() -> str:
    """Return the default database URL anchored to the project directory.

    Returns:
        The sqlite connection URL pointing at the folio.db file in the project root.
    """
    database_path = SITE_ROOT / "folio.db"
    return f"sqlite+aiosqlite:///{database_path.as_posix()}"


class Settings(BaseSettings):
    """Site configuration settings.

    Loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=str(SITE_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Database
    database_url: str = Field(default_factory=get_default_database_url)

    # Seed content
    seed_on_startup: bool = Field(
        default=True,
        description="Load the bundled posts/categories when the database is empty.",
    )
    seed_data_dir: Path = Field(
        default_factory=lambda: PACKAGE_ROOT / "data",
        description="Directory holding posts.json and categories.json.",
    )

    # Logging
    log_dir: Path = Field(
        default_factory=lambda: SITE_ROOT / "logs",
        description="Directory to store site log files.",
    )
    log_max_bytes: int = Field(
        default=1_048_576,
        description="Maximum log file size before rotation (in bytes).",
    )
    log_retention_days: int = Field(
        default=5,
        ge=0,
        description="Number of days to retain rotated log files.",
    )
    uvicorn_log_level: str = Field(
        default="info",
        description="Log level for uvicorn loggers (e.g., info, warning, error).",
    )

    # Theme
    theme_cookie_name: str = "theme-preference"
    theme_cookie_max_age: int = 31_536_000  # 1 year

    # Post selection
    featured_min_rating: int = Field(default=4, ge=0, le=5)
    featured_limit: int = Field(default=6, ge=1)
    recent_limit: int = Field(default=10, ge=1)
    related_limit: int = Field(default=4, ge=1)

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        """Normalize sqlite URLs to be anchored to the project directory.

        Args:
            value: The configured database URL.

        Returns:
            A database URL with a root-relative sqlite path resolved.
        """
        sqlite_prefix = "sqlite+aiosqlite:///"
        absolute_prefix = "sqlite+aiosqlite:////"
        if value.startswith(sqlite_prefix) and not value.startswith(absolute_prefix):
            relative_path = value.split(sqlite_prefix, 1)[1]
            if relative_path and not Path(relative_path).is_absolute():
                database_path = (SITE_ROOT / relative_path).resolve()
                return f"{sqlite_prefix}{database_path.as_posix()}"
        return value

    @field_validator("log_dir", "seed_data_dir", mode="before")
    @classmethod
    def normalize_dir(cls, value: Union[str, Path]) -> Path:
        """Normalize directory paths relative to the project root.

        Args:
            value: The configured directory.

        Returns:
            An absolute path.
        """
        path = value if isinstance(value, Path) else Path(value)
        if not path.is_absolute():
            return (SITE_ROOT / path).resolve()
        return path


# Global settings instance
settings = Settings()
