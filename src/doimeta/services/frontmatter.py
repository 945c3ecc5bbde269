"""Merge citation fields into a front matter block and render it back to text.

The rendered block keeps a fixed layout: ``---`` delimiters, keys in sorted
order, ``key: value`` for scalars and an indented ``  - item`` line per list
element. Text is written verbatim when a YAML reader loads it back as the same
string, and double-quoted otherwise.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Mapping

import structlog
import yaml

from doimeta.errors import FrontMatterError
from doimeta.models import CitationRecord

logger = structlog.get_logger(__name__)

DELIMITER = "---"
BLOCK_PATTERN = re.compile(r"\A---\n(.*?)\n---\n", flags=re.DOTALL)
# derived keys: title arrives wrapped in literal quotes, the rest may read as numbers
QUOTED_KEYS = frozenset({"title"})
NUMERIC_KEYS = frozenset({"volume", "issue", "pages"})


def derive_fields(citation: CitationRecord) -> dict[str, Any]:
    """Map a citation onto front matter keys; absent fields map to None."""
    return {
        "title": f'"{citation.first_title}"',
        "author": citation.author_line,
        "journal": citation.journal,
        "year": citation.year,
        "volume": citation.volume,
        "issue": citation.issue,
        "pages": citation.page,
        "url": citation.url,
    }


def merge(existing: Mapping[str, Any] | None, citation: CitationRecord) -> dict[str, Any]:
    """Return a sorted copy of ``existing`` with the citation fields applied.

    Derived keys whose value is absent are removed, including any value the
    existing block held for them.
    """
    merged = dict(existing or {})
    for key, value in derive_fields(citation).items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return {key: merged[key] for key in sorted(merged, key=str)}


def serialize(block: Mapping[str, Any]) -> str:
    """Render ``block`` as a delimited front matter block (no trailing newline)."""
    lines = [DELIMITER]
    for key in sorted(block, key=str):
        value = block[key]
        if isinstance(value, (list, tuple)):
            if not value:
                lines.append(f"{key}: []")
                continue
            lines.append(f"{key}:")
            lines.extend(f"  - {render_scalar(item)}" for item in value)
            continue
        rendered = render_scalar(value, key=str(key))
        lines.append(f"{key}: {rendered}" if rendered else f"{key}:")
    lines.append(DELIMITER)
    return "\n".join(lines)


def render_scalar(value: Any, key: str | None = None) -> str:
    """Render one value; ``key`` enables the title and numeric-field rules."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _render_float(value)
    if isinstance(value, (dict, list, tuple)):
        # nested structures go out as a JSON flow collection
        return json.dumps(value, ensure_ascii=False, default=str)
    if not isinstance(value, str):
        return str(value)
    if key in QUOTED_KEYS and _is_pre_quoted(value):
        inner = value[1:-1]
        return value if _reads_back(value, inner) else json.dumps(inner, ensure_ascii=False)
    if _reads_back(value, value):
        return value
    if key in NUMERIC_KEYS and _reads_back_as_number(value):
        return value
    return json.dumps(value, ensure_ascii=False)


def _render_float(value: float) -> str:
    if math.isnan(value):
        return ".nan"
    if math.isinf(value):
        return ".inf" if value > 0 else "-.inf"
    # YAML 1.1 floats need a dot in the mantissa
    mantissa, sep, exponent = repr(value).partition("e")
    if "." not in mantissa:
        mantissa += ".0"
    return mantissa + sep + exponent


def _is_pre_quoted(text: str) -> bool:
    return len(text) >= 2 and text.startswith('"') and text.endswith('"')


def _load_single(text: str) -> tuple[bool, Any]:
    if "\n" in text or "\r" in text:
        return False, None
    try:
        loaded = yaml.safe_load(f"value: {text}")
    except yaml.YAMLError:
        return False, None
    if not isinstance(loaded, dict) or list(loaded) != ["value"]:
        return False, None
    return True, loaded["value"]


def _reads_back(text: str, expected: str) -> bool:
    ok, result = _load_single(text)
    return ok and isinstance(result, str) and result == expected


def _reads_back_as_number(text: str) -> bool:
    ok, result = _load_single(text)
    return ok and type(result) in (int, float)


def parse_front_matter(text: str) -> dict[str, Any] | None:
    """Decode the leading front matter block of ``text``.

    Returns None when the document has no leading block or the block is not
    a mapping. An empty block decodes to an empty dict.
    """
    match = BLOCK_PATTERN.match(text)
    if not match:
        return None
    try:
        loaded = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Front matter is not valid YAML: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        logger.debug("frontmatter.not_mapping", kind=type(loaded).__name__)
        return None
    return loaded


def replace_front_matter(text: str, block_text: str) -> tuple[str, bool]:
    """Swap the leading block for ``block_text``; report whether one was found."""
    new_text, count = BLOCK_PATTERN.subn(lambda _match: block_text + "\n", text, count=1)
    return new_text, bool(count)
