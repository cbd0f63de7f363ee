import io

import pytest
from botocore.exceptions import ClientError

from app.pages.storage import LocalStorage, S3Storage, StorageError, page_key, storage_from_config


def test_page_key_maps_slugs_to_sources():
    assert page_key("index") == "index.md"
    assert page_key("/posts/lambda-refactor/") == "posts/lambda-refactor.md"


@pytest.mark.parametrize("slug", ["", "../etc/passwd", "posts/../index", "Index", "a b", "posts//x"])
def test_page_key_rejects_bad_slugs(slug):
    with pytest.raises(ValueError):
        page_key(slug)


@pytest.mark.parametrize("slug", ["source", "source/index", "health", "healthz/x"])
def test_page_key_rejects_route_prefixes(slug):
    with pytest.raises(ValueError):
        page_key(slug)


def test_page_key_allows_reserved_words_deeper_in_the_path():
    assert page_key("posts/source") == "posts/source.md"


def test_local_storage_round_trip(tmp_path):
    storage = LocalStorage(root=tmp_path)
    storage.write_html("build/index.html", "<p>é</p>")
    assert storage.exists("build/index.html")
    assert not storage.exists("build")
    assert storage.read_text("build/index.html") == "<p>é</p>"
    assert (tmp_path / "build" / "index.html").read_bytes() == "<p>é</p>".encode("utf-8")


def test_local_storage_refuses_keys_outside_root(tmp_path):
    storage = LocalStorage(root=tmp_path / "content")
    with pytest.raises(StorageError):
        storage.exists("../secret.md")
    with pytest.raises(StorageError):
        storage.write_html("../../escape.html", "x")


def test_storage_from_config_defaults_to_local(tmp_path):
    storage = storage_from_config({"CONTENT_ROOT": str(tmp_path)})
    assert isinstance(storage, LocalStorage)
    assert storage.root == tmp_path


def test_storage_from_config_output_side(tmp_path):
    config = {"CONTENT_ROOT": str(tmp_path / "content"), "OUTPUT_ROOT": str(tmp_path / "build")}
    storage = storage_from_config(config, output=True)
    assert isinstance(storage, LocalStorage)
    assert storage.root == tmp_path / "build"


def test_storage_from_config_s3():
    config = {
        "CONTENT_BACKEND": "S3",
        "S3_BUCKET": "pages",
        "S3_ENDPOINT": "nyc3.example.com",
        "S3_PREFIX": "content",
        "S3_OUTPUT_PREFIX": "site",
    }
    source = storage_from_config(config)
    assert isinstance(source, S3Storage)
    assert source.bucket == "pages"
    assert source.region == "nyc3"
    assert source.prefix == "content"
    assert storage_from_config(config, output=True).prefix == "site"


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "HeadObject")


class _FakeS3:
    def __init__(self, head_error_code="404"):
        self.objects = {}
        self.content_types = {}
        self.head_error_code = head_error_code

    def put_object(self, Bucket, Key, Body, **extra):
        self.objects[(Bucket, Key)] = Body
        self.content_types[(Bucket, Key)] = extra.get("ContentType")

    def get_object(self, Bucket, Key):
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}

    def head_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise _client_error(self.head_error_code)
        return {}


def _s3(monkeypatch, fake, prefix=""):
    monkeypatch.setattr(S3Storage, "_client", lambda self: fake)
    return S3Storage(endpoint="", region="", bucket="pages", access_key_id="k", secret_access_key="s", prefix=prefix)


def test_s3_storage_reads_and_writes_under_prefix(monkeypatch):
    fake = _FakeS3()
    storage = _s3(monkeypatch, fake, prefix="site/")

    assert not storage.exists("index.html")
    storage.write_html("index.html", "<p>hi</p>")
    assert ("pages", "site/index.html") in fake.objects
    assert fake.content_types[("pages", "site/index.html")] == "text/html; charset=utf-8"
    assert storage.exists("index.html")
    assert storage.read_text("index.html") == "<p>hi</p>"


def test_s3_exists_surfaces_access_errors(monkeypatch):
    storage = _s3(monkeypatch, _FakeS3(head_error_code="403"))
    with pytest.raises(ClientError):
        storage.exists("index.md")


def test_s3_exists_treats_no_such_key_as_missing(monkeypatch):
    storage = _s3(monkeypatch, _FakeS3(head_error_code="NoSuchKey"))
    assert storage.exists("index.md") is False
