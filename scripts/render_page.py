#!/usr/bin/env python
"""
Render one page source (front-matter + Markdown) to HTML.

Usage:
    # Print to stdout
    python scripts/render_page.py content/index.md

    # Write to a file (parent directories are created)
    python scripts/render_page.py content/index.md -o build/index.html

    # Publish to the configured output storage (OUTPUT_ROOT, or S3 under S3_OUTPUT_PREFIX)
    python scripts/render_page.py content/index.md --publish index.html

    # Use a different layouts directory
    python scripts/render_page.py content/index.md --templates ./my-templates

Environment:
    MARKDOWN_EXTENSIONS: comma-separated Python-Markdown extensions
    CONTENT_BACKEND, OUTPUT_ROOT, S3_*: where --publish writes
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.pages.config import load_config  # noqa: E402
from app.pages.document import ParseError, load_document  # noqa: E402
from app.pages.renderer import build_environment, render_document  # noqa: E402
from app.pages.storage import LocalStorage, StorageError, storage_from_config  # noqa: E402


def render_file(source: Path, templates: Path | None = None, config: dict | None = None) -> str:
    config = config if config is not None else load_config()
    doc = load_document(source)
    return render_document(doc, build_environment(templates), extensions=config["MARKDOWN_EXTENSIONS"])


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Render a Markdown page into its layout")
    parser.add_argument("source", type=Path, help="Page source with front-matter")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("-o", "--output", type=Path, default=None, help="Write HTML to this file instead of stdout")
    target.add_argument("--publish", metavar="KEY", default=None, help="Write HTML to the configured output storage under KEY")
    parser.add_argument("--templates", type=Path, default=None, help="Layouts directory (defaults to packaged templates)")
    args = parser.parse_args(argv)

    if not args.source.is_file():
        print(f"ERROR: Source not found: {args.source}", file=sys.stderr)
        return 1

    config = load_config()
    try:
        html = render_file(args.source, args.templates, config)
    except ParseError as e:
        print(f"ERROR: {args.source}: {e}", file=sys.stderr)
        return 1

    if args.output is not None:
        LocalStorage(root=args.output.resolve().parent).write_html(args.output.name, html)
        print(f"Wrote {args.output}")
    elif args.publish is not None:
        try:
            storage_from_config(config, output=True).write_html(args.publish, html)
        except StorageError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        print(f"Published {args.publish}")
    else:
        sys.stdout.write(html)
    return 0


if __name__ == "__main__":
    sys.exit(main())
