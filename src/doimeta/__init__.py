"""Fill Markdown front matter with Crossref citation metadata."""

__version__ = "0.1.0"
