"""MinIO implementation of the StorageClient interface."""

from typing import BinaryIO

from minio import Minio
from minio.error import S3Error
from minio.notificationconfig import NotificationConfig, PrefixFilterRule
from minio.notificationconfig import QueueConfig as NotificationQueueConfig

from call_scorecard.exceptions import (
    ObjectNotFoundError,
    StorageDownloadError,
    StorageUploadError,
)
from call_scorecard.logging import setup_logging

from .interfaces import StorageClient

logger = setup_logging()

_MISSING_CODES = {"NoSuchKey", "NoSuchObject"}
_OBJECT_CREATED_EVENTS = ["s3:ObjectCreated:*"]


class MinioStorageClient(StorageClient):
    """Handles blob storage operations using MinIO."""

    def __init__(self, client: Minio):
        self._client = client

    def download(self, bucket_name: str, object_name: str) -> bytes:
        try:
            response = self._client.get_object(bucket_name, object_name)
            try:
                data = response.data
            finally:
                response.close()
                response.release_conn()
            logger.info(
                "File downloaded from MinIO",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            return data
        except S3Error as e:
            if e.code in _MISSING_CODES:
                logger.warning(
                    "Object not found in MinIO",
                    extra={"bucket_name": bucket_name, "object_name": object_name},
                )
                raise ObjectNotFoundError(object_name, cause=e) from e
            logger.exception(
                "MinIO download failed",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            raise StorageDownloadError(object_name, cause=e) from e
        except Exception as e:
            logger.exception(
                "MinIO download failed",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            raise StorageDownloadError(object_name, cause=e) from e

    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        try:
            self._client.put_object(
                bucket_name=bucket_name,
                object_name=object_name,
                data=data,
                length=size,
                content_type=content_type,
            )
            logger.info(
                "File uploaded to MinIO",
                extra={
                    "bucket_name": bucket_name,
                    "object_name": object_name,
                },
            )
        except Exception as e:
            logger.exception(
                "MinIO upload failed",
                extra={"bucket_name": bucket_name, "object_name": object_name},
            )
            raise StorageUploadError(object_name, cause=e) from e

    def exists(self, bucket_name: str, object_name: str) -> bool:
        try:
            self._client.stat_object(bucket_name, object_name)
            return True
        except S3Error as e:
            if e.code in _MISSING_CODES:
                return False
            raise StorageDownloadError(object_name, cause=e) from e

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        if not self._client.bucket_exists(bucket_name):
            self._client.make_bucket(bucket_name)
            logger.info("Bucket created", extra={"bucket_name": bucket_name})
        else:
            logger.info("Bucket already exists", extra={"bucket_name": bucket_name})

    def register_notification(
        self, bucket_name: str, config_id: str, queue_arn: str, prefix: str
    ) -> None:
        """
        Registers a prefix-filtered object-created notification for one stage.

        The bucket's notification configuration is shared by every stage, so
        the entry identified by ``config_id`` is replaced and all others are
        kept.

        Args:
            bucket_name: The bucket emitting notifications.
            config_id: Stable identifier of this stage's entry.
            queue_arn: ARN of the MinIO AMQP target feeding the stage's queue.
            prefix: Key prefix that triggers the stage.
        """
        current = self._client.get_bucket_notification(bucket_name)
        queues = [
            queue
            for queue in current.queue_config_list or []
            if queue.config_id != config_id
        ]
        queues.append(
            NotificationQueueConfig(
                queue_arn,
                _OBJECT_CREATED_EVENTS,
                config_id=config_id,
                prefix_filter_rule=PrefixFilterRule(prefix),
            )
        )
        self._client.set_bucket_notification(
            bucket_name,
            NotificationConfig(
                cloud_func_config_list=current.cloud_func_config_list,
                queue_config_list=queues,
                topic_config_list=current.topic_config_list,
            ),
        )
        logger.info(
            "Bucket notification registered",
            extra={"bucket_name": bucket_name, "config_id": config_id, "prefix": prefix},
        )
