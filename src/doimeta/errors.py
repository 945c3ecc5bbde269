"""Error taxonomy shared by the fetcher, rewriter, and updater."""

from __future__ import annotations


class DoiMetaError(RuntimeError):
    """Base class for recoverable doimeta failures."""


class FetchError(DoiMetaError):
    """Raised when the registry answers with a non-200 status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP error {status_code}")
        self.status_code = status_code


class MalformedResponseError(DoiMetaError):
    """Raised when a 200 response does not carry a usable citation payload."""


class FrontMatterError(DoiMetaError):
    """Raised when an existing front matter block cannot be decoded."""
