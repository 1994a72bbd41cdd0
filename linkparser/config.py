"""Centralised settings for the HTML link parser.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) HtmlLinkParser/1.0"
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("LINKPARSER_REQUEST_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("LINKPARSER_USER_AGENT", DEFAULT_USER_AGENT)
    )
    accept_header: str = field(
        default_factory=lambda: os.environ.get("LINKPARSER_ACCEPT", DEFAULT_ACCEPT)
    )
    cancel_poll_interval: float = field(
        default_factory=lambda: float(os.environ.get("LINKPARSER_CANCEL_POLL", "0.05"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LINKPARSER_LOG_LEVEL", "WARNING")
    )
    log_json: bool = field(
        default_factory=lambda: _env_bool("LINKPARSER_LOG_JSON", "false")
    )

    @property
    def request_headers(self) -> dict[str, str]:
        """Headers sent with every page request."""
        return {"User-Agent": self.user_agent, "Accept": self.accept_header}


# Module-level singleton — import this everywhere:
#   from linkparser.config import settings
settings = Settings()
