"""In-process blob store with synchronous prefix-filtered notifications."""

import hashlib
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import BinaryIO

from pydantic import BaseModel

from call_scorecard.domain.events import StorageEvent
from call_scorecard.exceptions import (
    ObjectNotFoundError,
    StorageDownloadError,
    StorageUploadError,
)
from call_scorecard.logging import setup_logging

from .interfaces import StorageClient

logger = setup_logging()

Listener = Callable[[StorageEvent], object]


class Blob(BaseModel, frozen=True):
    """A stored object."""

    key: str
    data: bytes
    content_type: str
    etag: str
    created_at: datetime


class InMemoryBlobStore(StorageClient):
    """
    Blob store kept in process memory.

    Every successful upload emits one object-created event to each listener
    whose prefix matches, synchronously and in subscription order. A failing
    listener does not undo the write; its error is logged and kept in
    ``delivery_errors``, the same way a notification target's failure leaves
    the stored object in place.
    """

    def __init__(self):
        self._buckets: dict[str, dict[str, Blob]] = {}
        self._listeners: list[tuple[str, Listener]] = []
        self._lock = threading.Lock()
        self.delivery_errors: list[tuple[StorageEvent, Exception]] = []

    def subscribe(self, prefix: str, listener: Listener) -> None:
        self._listeners.append((prefix, listener))

    def download(self, bucket_name: str, object_name: str) -> bytes:
        return self.get_blob(bucket_name, object_name).data

    def get_blob(self, bucket_name: str, object_name: str) -> Blob:
        with self._lock:
            bucket = self._buckets.get(bucket_name)
            if bucket is None:
                raise StorageDownloadError(
                    object_name, cause=Exception(f"Bucket '{bucket_name}' does not exist")
                )
            blob = bucket.get(object_name)
        if blob is None:
            raise ObjectNotFoundError(object_name)
        return blob

    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        payload = data.read()
        if len(payload) != size:
            raise StorageUploadError(
                object_name,
                cause=Exception(f"Expected {size} bytes, got {len(payload)}"),
            )
        blob = Blob(
            key=object_name,
            data=payload,
            content_type=content_type,
            etag=hashlib.md5(payload).hexdigest(),
            created_at=datetime.now(timezone.utc),
        )
        with self._lock:
            bucket = self._buckets.get(bucket_name)
            if bucket is None:
                raise StorageUploadError(
                    object_name, cause=Exception(f"Bucket '{bucket_name}' does not exist")
                )
            bucket[object_name] = blob

        logger.info(
            "File stored in memory",
            extra={"bucket_name": bucket_name, "object_name": object_name},
        )
        self._notify(
            StorageEvent(
                event_name="s3:ObjectCreated:Put",
                bucket_name=bucket_name,
                key=object_name,
                etag=blob.etag,
                size=len(payload),
            )
        )

    def exists(self, bucket_name: str, object_name: str) -> bool:
        with self._lock:
            return object_name in self._buckets.get(bucket_name, {})

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        with self._lock:
            self._buckets.setdefault(bucket_name, {})

    def keys(self, bucket_name: str, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(
                key for key in self._buckets.get(bucket_name, {}) if key.startswith(prefix)
            )

    def _notify(self, event: StorageEvent) -> None:
        for prefix, listener in list(self._listeners):
            if not event.key.startswith(prefix):
                continue
            try:
                listener(event)
            except Exception as e:
                logger.exception(
                    "Notification listener failed",
                    extra={"bucket_name": event.bucket_name, "key": event.key},
                )
                self.delivery_errors.append((event, e))
