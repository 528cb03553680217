"""Parsing of S3-compatible object notifications."""

import json
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from call_scorecard.exceptions import InvalidEventError

OBJECT_CREATED = "ObjectCreated"


class StorageEvent(BaseModel, frozen=True):
    """A single object notification delivered to a stage."""

    event_name: str
    bucket_name: str
    key: str
    etag: str | None = None
    size: int | None = None

    @property
    def is_object_created(self) -> bool:
        return OBJECT_CREATED in self.event_name


class _S3Object(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(min_length=1)
    etag: str | None = Field(default=None, alias="eTag")
    size: int | None = None


class _S3Bucket(BaseModel):
    name: str = Field(min_length=1)


class _S3Entity(BaseModel):
    bucket: _S3Bucket
    object: _S3Object


class _EventRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_name: str = Field(alias="eventName")
    s3: _S3Entity


class _EventDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    records: list[_EventRecord] = Field(alias="Records")


def parse_storage_events(body: bytes | str) -> list[StorageEvent]:
    """
    Parses a MinIO / S3 notification document.

    Object keys arrive URL-encoded and are decoded here. Records that are not
    object-created notifications are dropped.

    Args:
        body: Raw notification payload.

    Returns:
        The object-created events contained in the document.

    Raises:
        InvalidEventError: If the payload is not a notification document.
    """
    try:
        document = _EventDocument.model_validate(json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise InvalidEventError(str(e), cause=e) from e

    events = [
        StorageEvent(
            event_name=record.event_name,
            bucket_name=record.s3.bucket.name,
            key=unquote_plus(record.s3.object.key),
            etag=record.s3.object.etag,
            size=record.s3.object.size,
        )
        for record in document.records
    ]
    return [event for event in events if event.is_object_created]
