import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str

    content_backend: str
    content_root: str
    output_root: str
    s3_endpoint: str
    s3_region: str
    s3_bucket: str
    s3_access_key_id: str
    s3_secret_access_key: str
    s3_prefix: str
    s3_output_prefix: str

    markdown_extensions: tuple[str, ...]


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        content_backend=_getenv("CONTENT_BACKEND", "local"),
        content_root=_getenv("CONTENT_ROOT", "content"),
        output_root=_getenv("OUTPUT_ROOT", "build"),
        s3_endpoint=_getenv("S3_ENDPOINT", ""),
        s3_region=_getenv("S3_REGION", "nyc3"),
        s3_bucket=_getenv("S3_BUCKET", ""),
        s3_access_key_id=_getenv("S3_ACCESS_KEY_ID", ""),
        s3_secret_access_key=_getenv("S3_SECRET_ACCESS_KEY", ""),
        s3_prefix=_getenv("S3_PREFIX", ""),
        s3_output_prefix=_getenv("S3_OUTPUT_PREFIX", "site"),
        markdown_extensions=tuple(
            e.strip()
            for e in _getenv("MARKDOWN_EXTENSIONS", "fenced_code,tables,toc").split(",")
            if e.strip()
        ),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "CONTENT_BACKEND": s.content_backend,
        "CONTENT_ROOT": s.content_root,
        "OUTPUT_ROOT": s.output_root,
        "S3_ENDPOINT": s.s3_endpoint,
        "S3_REGION": s.s3_region,
        "S3_BUCKET": s.s3_bucket,
        "S3_ACCESS_KEY_ID": s.s3_access_key_id,
        "S3_SECRET_ACCESS_KEY": s.s3_secret_access_key,
        "S3_PREFIX": s.s3_prefix,
        "S3_OUTPUT_PREFIX": s.s3_output_prefix,
        "MARKDOWN_EXTENSIONS": s.markdown_extensions,
    }
