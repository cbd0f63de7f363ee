from flask import Blueprint, Response, abort, current_app

from app.pages.document import Document, dump_document, parse_document
from app.pages.renderer import render_document
from app.pages.storage import page_key

bp = Blueprint("routes", __name__)


def _load_page(slug: str) -> Document:
    try:
        key = page_key(slug)
    except ValueError:
        abort(404)
    storage = current_app.extensions["page_storage"]
    if not storage.exists(key):
        current_app.logger.info("Page source not found: %s", key)
        abort(404)
    return parse_document(storage.read_text(key))


def _render(slug: str) -> str:
    doc = _load_page(slug)
    return render_document(
        doc,
        current_app.jinja_env,
        extensions=current_app.config["MARKDOWN_EXTENSIONS"],
    )


@bp.get("/")
def index():
    return _render("index")


@bp.get("/health")
def health():
    """Health check endpoint. Returns JSON."""
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """Fast health check for probes. No storage access."""
    return "ok", 200


@bp.get("/source/<path:slug>")
def page_source(slug: str):
    """Normalized front-matter source of a page."""
    doc = _load_page(slug)
    return Response(dump_document(doc), mimetype="text/markdown")


@bp.get("/<path:slug>")
def page(slug: str):
    return _render(slug)
