"""Orchestrates a DOI lookup and the front matter rewrite for one document."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Protocol

import structlog

from doimeta.errors import FetchError, MalformedResponseError
from doimeta.models import CitationRecord
from doimeta.settings import Settings
from .fetcher import MetadataFetcher
from .frontmatter import merge, replace_front_matter, serialize

logger = structlog.get_logger(__name__)


class UpdateStatus(str, Enum):
    UPDATED = "updated"
    MISSING_IDENTIFIER = "missing_identifier"
    FETCH_FAILED = "fetch_failed"
    MALFORMED_RESPONSE = "malformed_response"
    BLOCK_NOT_FOUND = "block_not_found"


@dataclass(slots=True)
class UpdateOutcome:
    status: UpdateStatus
    text: str
    message: str
    citation: CitationRecord | None = None
    block: dict[str, Any] | None = None

    @property
    def changed(self) -> bool:
        return self.status is UpdateStatus.UPDATED


class MetadataCache(Protocol):
    """Yields the parsed front matter of a document."""

    def front_matter(self, document: Any) -> dict[str, Any] | None:
        ...


class Notifier(Protocol):
    """Fire-and-forget sink for short user-facing notices."""

    def notify(self, message: str) -> None:
        ...


class DocumentStore(Protocol):
    """Reads and persists the full text of a document."""

    async def read(self, document: Any) -> str:
        ...

    async def modify(self, document: Any, text: str) -> None:
        ...


class FrontMatterUpdater:
    """Looks up a document's DOI and rewrites its front matter block."""

    def __init__(self, fetcher: MetadataFetcher, settings: Settings) -> None:
        self._fetcher = fetcher
        self._settings = settings

    def identifier_from(self, front_matter: Mapping[str, Any] | None) -> str | None:
        if not front_matter:
            return None
        value = front_matter.get(self._settings.identifier_key)
        # falsy, boolean and non-scalar values count as missing
        if not value or isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return None
        identifier = str(value).strip()
        return identifier or None

    async def update(self, text: str, front_matter: Mapping[str, Any] | None) -> UpdateOutcome:
        identifier = self.identifier_from(front_matter)
        if identifier is None:
            logger.info("updater.missing_identifier", key=self._settings.identifier_key)
            return UpdateOutcome(
                status=UpdateStatus.MISSING_IDENTIFIER,
                text=text,
                message=f"{self._settings.identifier_key.upper()} not found in front matter",
            )

        try:
            citation = await self._fetcher.fetch(identifier)
        except FetchError as exc:
            return UpdateOutcome(
                status=UpdateStatus.FETCH_FAILED,
                text=text,
                message=f"Error fetching metadata: {exc}",
            )
        except MalformedResponseError as exc:
            return UpdateOutcome(
                status=UpdateStatus.MALFORMED_RESPONSE,
                text=text,
                message=f"Unexpected metadata response: {exc}",
            )

        block = merge(front_matter, citation)
        new_text, replaced = replace_front_matter(text, serialize(block))
        if not replaced:
            logger.warning("updater.block_not_found", identifier=identifier)
            return UpdateOutcome(
                status=UpdateStatus.BLOCK_NOT_FOUND,
                text=text,
                message="No front matter block found; document left unchanged",
                citation=citation,
                block=block,
            )
        logger.info("updater.updated", identifier=identifier, keys=list(block))
        return UpdateOutcome(
            status=UpdateStatus.UPDATED,
            text=new_text,
            message="Metadata updated successfully",
            citation=citation,
            block=block,
        )


async def load_metadata_using_doi(
    document: Any,
    *,
    cache: MetadataCache,
    store: DocumentStore,
    notifier: Notifier,
    updater: FrontMatterUpdater,
    dry_run: bool = False,
) -> UpdateOutcome:
    """Command callback: refresh one document's front matter from its DOI."""
    front_matter = cache.front_matter(document)
    text = await store.read(document)
    outcome = await updater.update(text, front_matter)
    if outcome.changed and not dry_run:
        await store.modify(document, outcome.text)
    if outcome.changed and dry_run:
        notifier.notify("Dry run: metadata not written")
    else:
        notifier.notify(outcome.message)
    return outcome
