"""Core data models used throughout the doimeta application."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Author(BaseModel):
    """Represents a single contributor as listed by Crossref."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    given_name: str | None = Field(default=None, alias="given")
    family_name: str | None = Field(default=None, alias="family")
    name: str | None = None

    @property
    def citation_name(self) -> str:
        """Render the author as ``family, given``."""
        if self.family_name and self.given_name:
            return f"{self.family_name}, {self.given_name}"
        return self.family_name or self.given_name or self.name or ""


class PublishedDate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    date_parts: list[list[int | None]] = Field(default_factory=list, alias="date-parts")


class CitationRecord(BaseModel):
    """Bibliographic fields retrieved from the registry for one DOI."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: list[str] = Field(min_length=1)
    authors: list[Author] = Field(alias="author")
    container_title: list[str] | None = Field(default=None, alias="container-title")
    published_print: PublishedDate | None = Field(default=None, alias="published-print")
    volume: str | None = None
    issue: str | None = None
    page: str | None = None
    doi: str | None = Field(default=None, alias="DOI")
    url: str | None = Field(default=None, alias="URL")

    @property
    def first_title(self) -> str:
        return self.title[0]

    @property
    def journal(self) -> str | None:
        if self.container_title:
            return self.container_title[0]
        return None

    @property
    def year(self) -> int | None:
        if self.published_print is None:
            return None
        parts = self.published_print.date_parts
        if not parts or not parts[0]:
            return None
        return parts[0][0]

    @property
    def author_line(self) -> str:
        return " and ".join(author.citation_name for author in self.authors)
