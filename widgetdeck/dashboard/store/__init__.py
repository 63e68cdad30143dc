"""Durable sinks for the embedded database image."""

from __future__ import annotations

from typing import TYPE_CHECKING

from widgetdeck.dashboard.store.base import ImageSink
from widgetdeck.dashboard.store.http import HttpImageSink
from widgetdeck.dashboard.store.local import LocalImageSink

if TYPE_CHECKING:
    from widgetdeck.dashboard.settings import DashboardSettings

__all__ = ["HttpImageSink", "ImageSink", "LocalImageSink", "create_image_sink"]


def create_image_sink(settings: DashboardSettings) -> ImageSink:
    """Create the image sink backend based on configuration."""
    if settings.image_sink == "http":
        if not settings.persist_url:
            msg = "WIDGETDECK_PERSIST_URL is required when image_sink = 'http'"
            raise ValueError(msg)
        return HttpImageSink(settings.persist_url)
    if settings.image_sink == "s3":
        from widgetdeck.dashboard.store.s3 import S3ImageSink

        if not settings.s3_bucket:
            msg = "WIDGETDECK_S3_BUCKET is required when image_sink = 's3'"
            raise ValueError(msg)
        return S3ImageSink(
            bucket=settings.s3_bucket,
            key=settings.s3_key,
            endpoint_url=settings.s3_endpoint,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key.get_secret_value() if settings.s3_secret_key else None,
            region=settings.s3_region,
            path_style=settings.s3_path_style,
        )
    return LocalImageSink(settings.db_path)
