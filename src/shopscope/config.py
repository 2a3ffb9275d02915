"""Settings management for ShopScope."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class APIConfig:
    """Connection settings for the admin REST API."""
    base_url: str = "http://localhost:5000/api"
    token: str | None = None
    timeout: float = 15.0


@dataclass
class Settings:
    """Global application settings."""

    # Paths
    project_root: Path = field(default_factory=lambda: _PROJECT_ROOT)
    exports_dir: Path = field(default_factory=lambda: _PROJECT_ROOT / os.getenv("SHOPSCOPE_EXPORTS_DIR", "exports"))
    logs_dir: Path = field(default_factory=lambda: _PROJECT_ROOT / os.getenv("SHOPSCOPE_LOGS_DIR", "logs"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("SHOPSCOPE_LOG_LEVEL", "INFO"))

    # List screen behaviour
    debounce_ms: int = field(default_factory=lambda: _env_int("SHOPSCOPE_DEBOUNCE_MS", 300))
    fetch_limit: int = field(default_factory=lambda: _env_int("SHOPSCOPE_FETCH_LIMIT", 100))
    default_page_size: int = field(default_factory=lambda: _env_int("SHOPSCOPE_PAGE_SIZE", 10))
    currency: str = field(default_factory=lambda: os.getenv("SHOPSCOPE_CURRENCY", "KSh"))

    # API
    api: APIConfig = field(default_factory=APIConfig)

    def __post_init__(self) -> None:
        for d in [self.exports_dir, self.logs_dir]:
            d.mkdir(parents=True, exist_ok=True)

        self.api = APIConfig(
            base_url=os.getenv("SHOPSCOPE_API_BASE_URL", self.api.base_url),
            token=os.getenv("SHOPSCOPE_API_TOKEN") or self.api.token,
            timeout=_env_float("SHOPSCOPE_API_TIMEOUT", self.api.timeout),
        )


def get_settings() -> Settings:
    """Get the global settings instance."""
    return Settings()
