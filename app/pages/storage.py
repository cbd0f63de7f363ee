from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

SLUG_SEGMENT_RE = re.compile(r"[a-z0-9_-]+")

# First slug segments owned by routes; pages can't live under them.
RESERVED_SLUGS = frozenset({"source", "health", "healthz"})

S3_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class StorageError(RuntimeError):
    pass


class Storage:
    """Page sources are read from a Storage; rendered pages are written to one."""

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        raise NotImplementedError

    def open(self, key: str) -> BinaryIO:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        raise NotImplementedError

    def read_text(self, key: str, encoding: str = "utf-8") -> str:
        f = self.open(key)
        try:
            return f.read().decode(encoding)
        finally:
            f.close()

    def write_html(self, key: str, html: str) -> None:
        self.put_bytes(key, html.encode("utf-8"), content_type="text/html; charset=utf-8")


@dataclass(frozen=True)
class LocalStorage(Storage):
    root: Path

    def _path(self, key: str) -> Path:
        safe_key = key.lstrip("/").replace("\\", "/")
        root = self.root.resolve()
        p = (root / safe_key).resolve()
        if p != root and root not in p.parents:
            raise StorageError(f"Key escapes storage root: {key!r}")
        return p

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)

    def open(self, key: str) -> BinaryIO:
        return self._path(key).open("rb")

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()


@dataclass(frozen=True)
class S3Storage(Storage):
    """Objects live under `prefix` in an S3-compatible bucket."""

    endpoint: str
    region: str
    bucket: str
    access_key_id: str
    secret_access_key: str
    prefix: str = ""

    def _client(self):
        try:
            import boto3  # type: ignore
        except Exception as e:  # pragma: no cover
            raise StorageError("boto3 required for S3 storage. Install boto3.") from e
        return boto3.client(
            "s3",
            endpoint_url=f"https://{self.endpoint}" if self.endpoint else None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def _key(self, key: str) -> str:
        prefix = self.prefix.strip("/")
        key = key.lstrip("/")
        return f"{prefix}/{key}" if prefix else key

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> None:
        extra: dict[str, object] = {"ContentType": content_type} if content_type else {}
        self._client().put_object(Bucket=self.bucket, Key=self._key(key), Body=data, **extra)

    def open(self, key: str) -> BinaryIO:
        obj = self._client().get_object(Bucket=self.bucket, Key=self._key(key))
        return obj["Body"]  # type: ignore[return-value]

    def exists(self, key: str) -> bool:
        from botocore.exceptions import ClientError

        try:
            self._client().head_object(Bucket=self.bucket, Key=self._key(key))
        except ClientError as e:
            # Anything but "not there" (credentials, missing bucket) is a real failure.
            if str(e.response.get("Error", {}).get("Code")) in S3_MISSING_CODES:
                return False
            raise
        return True


def page_key(slug: str) -> str:
    """Map a URL slug ("posts/lambda-refactor") to its source key."""
    segments = (slug or "").strip("/").split("/")
    if not all(SLUG_SEGMENT_RE.fullmatch(s) for s in segments):
        raise ValueError(f"Invalid page slug: {slug!r}")
    if segments[0] in RESERVED_SLUGS:
        raise ValueError(f"Slug uses a reserved prefix: {slug!r}")
    return "/".join(segments) + ".md"


def storage_from_config(config: dict, *, output: bool = False) -> Storage:
    """Source storage, or with `output=True` where rendered pages are published."""
    backend = (config.get("CONTENT_BACKEND") or "local").strip().lower()
    if backend == "s3":
        return S3Storage(
            endpoint=(config.get("S3_ENDPOINT") or "").strip(),
            region=(config.get("S3_REGION") or "nyc3").strip(),
            bucket=(config.get("S3_BUCKET") or "").strip(),
            access_key_id=(config.get("S3_ACCESS_KEY_ID") or "").strip(),
            secret_access_key=(config.get("S3_SECRET_ACCESS_KEY") or "").strip(),
            prefix=(config.get("S3_OUTPUT_PREFIX" if output else "S3_PREFIX") or "").strip(),
        )
    # default local
    if output:
        root = Path(config.get("OUTPUT_ROOT") or "build")
    else:
        root = Path(config.get("CONTENT_ROOT") or "content")
    if not root.is_absolute():
        root = Path(os.getcwd()) / root
    return LocalStorage(root=root)
