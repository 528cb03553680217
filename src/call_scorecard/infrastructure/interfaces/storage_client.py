"""Abstract interface for blob storage operations."""

from abc import ABC, abstractmethod
from typing import BinaryIO

from call_scorecard.exceptions import StorageDownloadError


class StorageClient(ABC):
    """Abstract base class for blob storage backends."""

    @abstractmethod
    def download(self, bucket_name: str, object_name: str) -> bytes:
        """
        Downloads an object from storage.

        Args:
            bucket_name: The storage bucket name.
            object_name: The object key.

        Returns:
            The object contents as bytes.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StorageDownloadError: If the download fails.
        """

    def download_text(self, bucket_name: str, object_name: str) -> str:
        """
        Downloads a UTF-8 text object from storage.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StorageDownloadError: If the download fails or is not UTF-8.
        """
        data = self.download(bucket_name, object_name)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StorageDownloadError(object_name, cause=e) from e

    @abstractmethod
    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        """
        Uploads a whole object to storage.

        A successful upload triggers exactly one object-created notification.

        Args:
            bucket_name: The storage bucket name.
            object_name: The destination key.
            data: File-like object containing the data.
            size: Size of the data in bytes.
            content_type: MIME type of the object.

        Raises:
            StorageUploadError: If the upload fails.
        """

    @abstractmethod
    def exists(self, bucket_name: str, object_name: str) -> bool:
        """
        Checks whether an object exists.

        Raises:
            StorageDownloadError: If the existence check itself fails.
        """

    @abstractmethod
    def ensure_bucket_exists(self, bucket_name: str) -> None:
        """
        Ensures a bucket exists, creating it if necessary.

        Args:
            bucket_name: The bucket name to ensure exists.
        """
