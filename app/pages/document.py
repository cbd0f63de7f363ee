"""
Page source documents: front-matter + Markdown body.

A source looks like::

    ---
    layout: post
    title: Refactoring a Lambda API
    date: 2025-05-01
    ---
    Markdown body...
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

MARKER = "---"
END_MARKERS = ("---", "...")
REQUIRED_KEYS = ("layout", "title")


class ParseError(ValueError):
    """Malformed front-matter. `field` names the offending key or block."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


@dataclass(frozen=True)
class Document:
    layout: str
    title: str
    body: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    # Unhashable: metadata is a mapping.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "layout", _checked_str("layout", self.layout))
        object.__setattr__(self, "title", _checked_str("title", self.title))
        if not isinstance(self.body, str):
            raise ParseError("body", f"must be a string, got {type(self.body).__name__}")
        metadata = {str(k): v for k, v in dict(self.metadata).items()}
        for key in REQUIRED_KEYS:
            if key in metadata:
                raise ParseError(key, "belongs in the document field, not metadata")
        # Read-only view; callers can't mutate a parsed document.
        object.__setattr__(self, "metadata", MappingProxyType(metadata))


def _split(text: str) -> tuple[str, str]:
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != MARKER:
        raise ParseError("front-matter", f"document must start with a '{MARKER}' line")
    for i in range(1, len(lines)):
        if lines[i].rstrip() in END_MARKERS:
            return "".join(lines[1:i]), "".join(lines[i + 1:])
    raise ParseError("front-matter", "closing marker line not found")


def _checked_str(key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ParseError(key, f"must be a string, got {type(value).__name__}")
    value = value.strip()
    if not value:
        raise ParseError(key, "must not be blank")
    return value


def parse_document(text: str) -> Document:
    """Split and validate a page source. Raises ParseError on malformed input."""
    raw, body = _split(text)
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ParseError("front-matter", f"invalid YAML: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError("front-matter", "must be a mapping of keys to values")

    for key in REQUIRED_KEYS:
        if data.get(key) is None:
            raise ParseError(key, "missing required key")
    metadata = {k: v for k, v in data.items() if k not in REQUIRED_KEYS}
    return Document(layout=data["layout"], title=data["title"], body=body, metadata=metadata)


def load_document(path: str | Path) -> Document:
    return parse_document(Path(path).read_text(encoding="utf-8"))


def dump_document(doc: Document) -> str:
    """Serialize back to front-matter source; parse_document() inverts this."""
    data: dict[str, Any] = {"layout": doc.layout, "title": doc.title}
    data.update(doc.metadata)
    header = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"{MARKER}\n{header}{MARKER}\n{doc.body}"
