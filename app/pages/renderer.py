from __future__ import annotations

import logging
import re
from pathlib import Path
from collections.abc import Iterable
from typing import Any, Sequence

import markdown
from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from markupsafe import Markup

from app.pages.document import Document, ParseError, parse_document

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
DEFAULT_EXTENSIONS = ("fenced_code", "tables", "toc")
LAYOUT_RE = re.compile(r"[A-Za-z0-9_-]+")


def build_environment(template_dir: str | Path | None = None) -> Environment:
    """Standalone Jinja2 environment for rendering outside a request."""
    return Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def layout_template_name(layout: str) -> str:
    if not LAYOUT_RE.fullmatch(layout or ""):
        raise ParseError("layout", f"invalid layout name {layout!r}")
    return f"layouts/{layout}.html"


def render_markdown(body: str, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> str:
    # markdown.markdown() builds a fresh converter, so no state leaks between pages.
    return markdown.markdown(body or "", extensions=list(extensions), output_format="html")


def tag_list(value: Any) -> list[str]:
    """`tags: aws`, `tags: 2025` and `tags: [aws, lambda]` are all valid front-matter."""
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return [str(value)]
    return [str(t) for t in value]


def render_document(
    doc: Document,
    env: Environment,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> str:
    """
    Apply the document's layout to its title and rendered body.

    Layout templates receive `page`, `title`, `metadata`, `tags` (always a
    list of strings) and `content` (already-safe HTML). Raises ParseError
    naming `layout` when the layout can't be resolved.
    """
    name = layout_template_name(doc.layout)
    try:
        template = env.get_template(name)
    except TemplateNotFound as e:
        raise ParseError("layout", f"unknown layout {doc.layout!r}") from e

    content = Markup(render_markdown(doc.body, extensions))
    logger.debug("Rendering %r with layout %s", doc.title, doc.layout)
    return template.render(
        page=doc,
        title=doc.title,
        metadata=doc.metadata,
        tags=tag_list(doc.metadata.get("tags")),
        content=content,
    )


def render_source(
    text: str,
    env: Environment,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> str:
    return render_document(parse_document(text), env, extensions=extensions)
