"""
Settings for the poster engine and its service wrapper.

Values come from the environment (prefix ``POSTER_``) or a ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class PosterSettings(BaseSettings):
    """Runtime configuration."""

    # Bounded wait for any single resource (image, font, glyph)
    resource_timeout: float = 5.0
    http_timeout: float = 30.0

    # Extra directories searched before the system font locations
    font_dirs: List[Path] = []
    # Optional PNG overrides for the built-in icon glyphs (<icon_id>.png)
    icons_dir: Optional[Path] = None

    output_dir: Path = Path("/tmp/posters")

    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    telegram_api_base: str = "https://api.telegram.org"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="POSTER_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_settings() -> PosterSettings:
    """Return the process-wide settings instance."""
    return PosterSettings()
