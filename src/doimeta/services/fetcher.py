"""Fetches citation metadata for a DOI from the Crossref Works API."""

from __future__ import annotations

from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from doimeta.errors import FetchError, MalformedResponseError
from doimeta.models import CitationRecord
from doimeta.settings import Settings

logger = structlog.get_logger(__name__)


class MetadataFetcher(Protocol):
    """Protocol for components that turn an identifier into a citation."""

    name: str

    async def fetch(self, identifier: str) -> CitationRecord:
        ...


class CrossrefFetcher:
    """Issues a single lookup against the Crossref registry."""

    name = "crossref"

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    def build_url(self, identifier: str) -> str:
        if self._settings.escape_identifier:
            identifier = quote(identifier)
        return f"{self._settings.crossref_base_url.rstrip('/')}/{identifier}"

    async def fetch(self, identifier: str) -> CitationRecord:
        url = self.build_url(identifier)
        logger.info("fetch.attempt", fetcher=self.name, identifier=identifier, url=url)
        response = await self._client.get(
            url,
            headers={"User-Agent": self._settings.user_agent},
            timeout=self._settings.request_timeout,
        )
        if response.status_code != 200:
            logger.warning("fetch.http_error", identifier=identifier, status=response.status_code)
            raise FetchError(response.status_code)
        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("fetch.malformed", identifier=identifier, error=str(exc))
            raise MalformedResponseError(f"Response body is not JSON: {exc}") from exc
        return parse_citation(data)


def parse_citation(data: Any) -> CitationRecord:
    """Validate a decoded Crossref response into a ``CitationRecord``."""
    if not isinstance(data, dict) or not isinstance(data.get("message"), dict):
        logger.warning("fetch.malformed", error="missing message object")
        raise MalformedResponseError("Response has no 'message' object")
    try:
        return CitationRecord.model_validate(data["message"])
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        logger.warning("fetch.malformed", error="validation", fields=fields)
        raise MalformedResponseError(
            f"Response is missing or has invalid fields: {', '.join(fields)}"
        ) from exc
