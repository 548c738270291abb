"""
Settings - Centralized configuration management

Values come from the environment with the QUOTESMITH_ prefix, e.g.
QUOTESMITH_FONTS_DIR=/srv/fonts.

License: MIT
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""
    model_config = SettingsConfigDict(env_prefix="QUOTESMITH_")

    # ========== Fonts ==========
    # Directory with <Family>-Regular.ttf, -Bold, -Italic, -BoldItalic
    fonts_dir: str = str(BASE_DIR / "fonts")

    # ========== Assets ==========
    asset_timeout: float = 10.0  # seconds
    asset_base_url: str = ""  # prefix for site-relative logo paths
    # Local asset paths resolve inside this directory only
    assets_dir: str = str(BASE_DIR / "assets")
    # Hosts remote assets may be fetched from; "*" allows any host
    asset_hosts: List[str] = []

    # ========== Logging ==========
    log_level: str = "INFO"

    # ========== Showcase ==========
    showcase_path: str = "/case-studies"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
