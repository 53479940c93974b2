"""Configuration management using Pydantic settings with optional file persistence."""

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Paths ---

APP_NAME = "graphql-endpoint-scraper"

DEFAULT_OUTPUT_FILE = "twitter-graphql-endpoints.json"


def get_config_dir() -> Path:
    """Get the configuration directory (e.g. ~/.config/graphql-endpoint-scraper)."""
    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", Path.home() / ".config")).expanduser()
    else:
        base = Path("~/.config").expanduser()

    return base / APP_NAME


CONFIG_FILE = get_config_dir() / "config.json"


def load_config_file(path: Path = CONFIG_FILE) -> dict[str, Any]:
    """Load settings from the JSON config file if it exists."""
    if not path.exists():
        return {}

    try:
        text = path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        return json.loads(text)
    except (OSError, json.JSONDecodeError):
        return {}


def save_config_file(config_data: dict[str, Any], path: Path = CONFIG_FILE) -> None:
    """Save settings to the JSON config file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_data, indent=2), encoding="utf-8")


class BrowserSettings(BaseSettings):
    """Browser configuration."""

    model_config = SettingsConfigDict(env_prefix="GES_BROWSER_")

    headless: bool = Field(default=True)
    stealth: bool = Field(default=True, description="Patch automation fingerprints before the first navigation")
    proxy_server: Optional[str] = Field(default=None, description="Proxy server URL (e.g., http://host:8080)")
    proxy_bypass: Optional[str] = Field(default=None, description="Comma-separated hosts to bypass proxy")
    cdp_url: Optional[str] = Field(default=None, description="Attach to an already running browser instead of launching one")


class ScraperSettings(BaseSettings):
    """Target application and scan behaviour."""

    model_config = SettingsConfigDict(env_prefix="GES_SCRAPER_")

    entry_url: str = Field(default="https://x.com/explore", description="Route navigated to before harvesting")
    service_worker_url: str = Field(default="https://x.com/sw.js", description="Service worker holding the asset manifest")
    chunk_registry: str = Field(default="webpackChunk_twitter_responsive_web", description="Global webpack chunk array")

    navigation_timeout: float = Field(default=30.0, description="Seconds allowed for the entry navigation")
    readiness_timeout: float = Field(default=15.0, description="Seconds to wait for the chunk registry to fill")
    fetch_timeout: float = Field(default=30.0, description="Seconds allowed per bundle fetch")

    bundle_keywords: list[str] = Field(
        default_factory=lambda: ["main", "vendor", "bundle.", "ondemand."],
        description="A bundle URL is scanned if it contains any of these",
    )
    minimal_form_window: int = Field(default=500, description="Max chars between queryId and operationName in the fallback pattern")
    progress_interval: int = Field(default=50, description="Report scan progress every N bundles")


class OutputSettings(BaseSettings):
    """Result artifact and logging."""

    model_config = SettingsConfigDict(env_prefix="GES_OUTPUT_")

    path: str = Field(default=DEFAULT_OUTPUT_FILE, description="Where the endpoint JSON is written")
    logging_level: str = Field(default="WARNING")


class AppSettings(BaseSettings):
    """Root application settings.

    Priority: Environment Variables > Config File > Defaults
    """

    model_config = SettingsConfigDict(env_prefix="GES_", extra="ignore")

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    scraper: ScraperSettings = Field(default_factory=ScraperSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    def save(self) -> Path:
        """Save current configuration to file."""
        save_config_file(self.model_dump(mode="json", exclude_none=True))
        return CONFIG_FILE

    def get_output_path(self) -> Path:
        return Path(self.output.path).expanduser()


def _load_settings() -> AppSettings:
    """Load settings with file config as base, env vars overlay."""
    file_data = load_config_file()
    # Pydantic will overlay env vars on top
    return AppSettings(**file_data)


settings = _load_settings()
