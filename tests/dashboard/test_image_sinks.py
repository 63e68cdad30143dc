"""Unit tests for the image sinks and the sink factory.

HTTP calls go through ``httpx.MockTransport``; S3 calls through botocore's
``Stubber``.  No network or Docker required.
"""

from __future__ import annotations

import io

import httpx
import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from widgetdeck.dashboard.settings import DashboardSettings
from widgetdeck.dashboard.store import HttpImageSink, ImageSink, LocalImageSink, create_image_sink
from widgetdeck.dashboard.store.http import ImagePushError
from widgetdeck.dashboard.store.s3 import S3ImageSink, _create_s3_client

# -- Local --------------------------------------------------------------------


async def test_local_read_missing_returns_none(tmp_path) -> None:
    sink = LocalImageSink(tmp_path / "missing.sqlite")
    assert await sink.read_image() is None


async def test_local_write_and_read(tmp_path) -> None:
    sink = LocalImageSink(tmp_path / "nested" / "db" / "dashboard.sqlite")
    await sink.write_image(b"image-bytes")

    assert sink.path.read_bytes() == b"image-bytes"
    assert await sink.read_image() == b"image-bytes"


async def test_local_overwrite_leaves_no_temp_files(tmp_path) -> None:
    sink = LocalImageSink(tmp_path / "dashboard.sqlite")
    await sink.write_image(b"one")
    await sink.write_image(b"two")

    assert await sink.read_image() == b"two"
    assert [p.name for p in tmp_path.iterdir()] == ["dashboard.sqlite"]


async def test_local_empty_file_returns_none(tmp_path) -> None:
    path = tmp_path / "dashboard.sqlite"
    path.write_bytes(b"")
    assert await LocalImageSink(path).read_image() is None


def test_sinks_satisfy_protocol(tmp_path) -> None:
    assert isinstance(LocalImageSink(tmp_path / "x"), ImageSink)
    assert isinstance(HttpImageSink("http://test"), ImageSink)


# -- HTTP ---------------------------------------------------------------------


def _http_sink(handler) -> HttpImageSink:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpImageSink("http://persist.test/", client=client)


async def test_http_read_not_found_returns_none() -> None:
    sink = _http_sink(lambda request: httpx.Response(404))
    assert await sink.read_image() is None


async def test_http_read_returns_body() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, content=b"stored")

    sink = _http_sink(handler)
    assert await sink.read_image() == b"stored"
    assert seen == ["http://persist.test/db/dashboard.sqlite"]


async def test_http_write_posts_raw_body() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, text="OK")

    sink = _http_sink(handler)
    await sink.write_image(b"\x00\x01image")

    (request,) = captured
    assert request.method == "POST"
    assert request.url.path == "/api/save-db"
    assert request.content == b"\x00\x01image"


async def test_http_write_rejected_raises() -> None:
    sink = _http_sink(lambda request: httpx.Response(500, text="disk full"))
    with pytest.raises(ImagePushError, match="500 disk full"):
        await sink.write_image(b"image")


# -- S3 -----------------------------------------------------------------------


@pytest.fixture
def s3_client():
    return _create_s3_client(None, "test", "test", region="us-east-1")


async def test_s3_read_missing_key_returns_none(s3_client) -> None:
    sink = S3ImageSink(bucket="bucket", key="db/dashboard.sqlite", client=s3_client)
    with Stubber(s3_client) as stubber:
        stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
        assert await sink.read_image() is None


async def test_s3_write_and_read(s3_client) -> None:
    sink = S3ImageSink(bucket="bucket", key="db/dashboard.sqlite", client=s3_client)
    data = b"sqlite-image"
    with Stubber(s3_client) as stubber:
        stubber.add_response("put_object", {})
        stubber.add_response(
            "get_object",
            {"Body": StreamingBody(io.BytesIO(data), len(data))},
            {"Bucket": "bucket", "Key": "db/dashboard.sqlite"},
        )

        await sink.write_image(data)
        assert await sink.read_image() == data
        stubber.assert_no_pending_responses()


# -- Factory ------------------------------------------------------------------


def test_factory_defaults_to_local(settings: DashboardSettings, data_root) -> None:
    sink = create_image_sink(settings)
    assert isinstance(sink, LocalImageSink)
    assert sink.path == data_root / "db" / "dashboard.sqlite"


def test_factory_http_requires_url() -> None:
    with pytest.raises(ValueError, match="PERSIST_URL"):
        create_image_sink(DashboardSettings(image_sink="http"))


def test_factory_http() -> None:
    sink = create_image_sink(DashboardSettings(image_sink="http", persist_url="http://persist.test"))
    assert isinstance(sink, HttpImageSink)


def test_factory_s3_requires_bucket() -> None:
    with pytest.raises(ValueError, match="S3_BUCKET"):
        create_image_sink(DashboardSettings(image_sink="s3"))


def test_factory_s3() -> None:
    sink = create_image_sink(
        DashboardSettings(
            image_sink="s3",
            s3_bucket="bucket",
            s3_region="us-east-1",
            s3_access_key="test",
            s3_secret_key="test",
        )
    )
    assert isinstance(sink, S3ImageSink)
