"""Filesystem-backed host adapters: a vault of Markdown notes and a console notifier."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console

from .frontmatter import parse_front_matter

logger = structlog.get_logger(__name__)


class Vault:
    """Serves front matter and note text from a directory of Markdown files."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, document: str | Path) -> Path:
        path = Path(document)
        if not path.is_absolute():
            path = self._root / path
        return path

    def front_matter(self, document: str | Path) -> dict[str, Any] | None:
        path = self.resolve(document)
        return parse_front_matter(path.read_text(encoding="utf-8"))

    async def read(self, document: str | Path) -> str:
        path = self.resolve(document)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def modify(self, document: str | Path, text: str) -> None:
        path = self.resolve(document)
        await asyncio.to_thread(path.write_text, text, encoding="utf-8")
        logger.info("vault.modified", path=str(path), size=len(text))


class ConsoleNotifier:
    """Prints notices to a rich console and keeps them for later inspection."""

    def __init__(self, console: Console | None = None, style: str = "cyan") -> None:
        self._console = console or Console()
        self._style = style
        self.messages: list[str] = []

    def notify(self, message: str) -> None:
        self.messages.append(message)
        self._console.print(message, style=self._style, markup=False)
