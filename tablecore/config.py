"""
Configuration for tablecore.

Values are read from environment variables (prefix ``TABLECORE_``) and an
optional ``.env`` file.
"""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """
    Package settings.

    Attributes:
        DEFAULT_LOCALE: locale used when a title has no entry for the requested one
        NUMBER_PRECISION: decimal places kept when importing numeric cells
        LOG_LEVEL: level of the ``tablecore`` logger
        HEADER_FILL_COLOR: RGB hex fill of exported header rows
        MIN_COLUMN_WIDTH / MAX_COLUMN_WIDTH: clamp for exported column widths
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLECORE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    DEFAULT_LOCALE: str = "en"
    NUMBER_PRECISION: int = 4
    LOG_LEVEL: str = "INFO"
    HEADER_FILL_COLOR: str = "D9E1F2"
    MIN_COLUMN_WIDTH: int = 10
    MAX_COLUMN_WIDTH: int = 60

    @field_validator("NUMBER_PRECISION")
    @classmethod
    def validate_precision(cls, v: int) -> int:
        if v < 0:
            raise ValueError("NUMBER_PRECISION must be >= 0")
        return v

    @field_validator("HEADER_FILL_COLOR")
    @classmethod
    def validate_fill_color(cls, v: str) -> str:
        text = v.strip().lstrip("#").upper()
        if len(text) != 6 or any(c not in "0123456789ABCDEF" for c in text):
            raise ValueError(f"HEADER_FILL_COLOR must be a 6-digit hex colour, got {v!r}")
        return text


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached settings instance (call ``get_settings.cache_clear()`` to reload)."""
    return Settings()
