"""Service abstractions for the doimeta application."""

from .fetcher import CrossrefFetcher, MetadataFetcher, parse_citation
from .frontmatter import merge, parse_front_matter, replace_front_matter, serialize
from .updater import (
    DocumentStore,
    FrontMatterUpdater,
    MetadataCache,
    Notifier,
    UpdateOutcome,
    UpdateStatus,
    load_metadata_using_doi,
)
from .vault import ConsoleNotifier, Vault

__all__ = [
    "CrossrefFetcher",
    "MetadataFetcher",
    "parse_citation",
    "merge",
    "serialize",
    "parse_front_matter",
    "replace_front_matter",
    "FrontMatterUpdater",
    "UpdateOutcome",
    "UpdateStatus",
    "MetadataCache",
    "Notifier",
    "DocumentStore",
    "load_metadata_using_doi",
    "Vault",
    "ConsoleNotifier",
]
