"""StorageClient wrapper that enforces a stage's execution identity."""

from typing import BinaryIO

from call_scorecard.domain.policies import ExecutionIdentity
from call_scorecard.exceptions import PermissionDeniedError
from call_scorecard.logging import setup_logging

from .interfaces import StorageClient

logger = setup_logging()


class ScopedStorageClient(StorageClient):
    """Delegates to a store, refusing keys outside the identity's grants."""

    def __init__(self, storage: StorageClient, identity: ExecutionIdentity):
        self._storage = storage
        self._identity = identity

    @property
    def identity(self) -> ExecutionIdentity:
        return self._identity

    def download(self, bucket_name: str, object_name: str) -> bytes:
        self._check("read", object_name)
        return self._storage.download(bucket_name, object_name)

    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        self._check("write", object_name)
        self._storage.upload(bucket_name, object_name, data, size, content_type)

    def exists(self, bucket_name: str, object_name: str) -> bool:
        self._check("read", object_name)
        return self._storage.exists(bucket_name, object_name)

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        """Stage identities hold object grants only; buckets are provisioned at deploy."""
        logger.error(
            "Storage access denied",
            extra={
                "identity": self._identity.name,
                "action": "create_bucket",
                "bucket_name": bucket_name,
            },
        )
        raise PermissionDeniedError(self._identity.name, "create_bucket", bucket_name)

    def _check(self, action: str, object_name: str) -> None:
        try:
            if action == "read":
                self._identity.require_read(object_name)
            else:
                self._identity.require_write(object_name)
        except PermissionDeniedError:
            logger.error(
                "Storage access denied",
                extra={
                    "identity": self._identity.name,
                    "action": action,
                    "object_name": object_name,
                },
            )
            raise
