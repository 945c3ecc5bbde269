"""Configuration helpers for doimeta."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_CROSSREF_URL = "https://api.crossref.org/works"
_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime configuration loaded from env vars with sensible defaults."""

    vault_dir: Path = Field(default_factory=Path.cwd)
    identifier_key: str = "doi"
    crossref_base_url: str = DEFAULT_CROSSREF_URL
    crossref_mailto: str | None = None
    request_timeout: float = 30.0
    escape_identifier: bool = False
    log_level: str = "INFO"

    @property
    def user_agent(self) -> str:
        agent = "doimeta/0.1"
        if self.crossref_mailto:
            agent += f" (mailto:{self.crossref_mailto})"
        return agent

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        return cls(
            vault_dir=Path(os.environ.get("DOIMETA_VAULT_DIR", Path.cwd())),
            identifier_key=os.environ.get("DOIMETA_IDENTIFIER_KEY", "doi"),
            crossref_base_url=os.environ.get("DOIMETA_CROSSREF_URL", DEFAULT_CROSSREF_URL),
            crossref_mailto=os.environ.get("DOIMETA_CROSSREF_MAILTO"),
            request_timeout=float(os.environ.get("DOIMETA_REQUEST_TIMEOUT", "30")),
            escape_identifier=os.environ.get("DOIMETA_ESCAPE_IDENTIFIER", "").lower() in _TRUTHY,
            log_level=os.environ.get("DOIMETA_LOG_LEVEL", "INFO"),
        )


def get_settings() -> Settings:
    """Convenience accessor for lazy modules."""
    return Settings.load()
