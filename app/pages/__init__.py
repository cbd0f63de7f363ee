import logging

from flask import Flask, render_template
from dotenv import load_dotenv

from app.pages.config import load_config
from app.pages.document import ParseError
from app.pages.routes import bp as routes_bp
from app.pages.storage import S3Storage, storage_from_config


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates")
    app.config.from_mapping(load_config())

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    storage = storage_from_config(app.config)
    if isinstance(storage, S3Storage):
        missing_s3 = [k for k in ("S3_ENDPOINT", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY") if not app.config.get(k)]
        if missing_s3:
            app.logger.error("STORAGE CONFIG ERROR: Missing required S3 env vars: %s", ", ".join(missing_s3))
            if env in ("prod", "production"):
                raise RuntimeError(f"Missing S3 settings: {', '.join(missing_s3)}")
    else:
        app.logger.info("Serving page sources from %s", storage.root)
    app.extensions["page_storage"] = storage

    app.register_blueprint(routes_bp)

    @app.errorhandler(ParseError)
    def _err_parse(e: ParseError):  # type: ignore[no-redef]
        app.logger.exception("Page source is malformed (field=%s): %s", e.field, e.message)
        return render_template("errors/500.html", field=e.field), 500

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500")
        return render_template("errors/500.html"), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
