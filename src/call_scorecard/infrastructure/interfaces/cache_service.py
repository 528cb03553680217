"""Abstract interface for the stage memo cache."""

from abc import ABC, abstractmethod


class CacheService(ABC):
    """
    String key/value store shared by every invocation of a stage.

    Stages memoize only what makes a redelivery converge: the transcription
    job id per object version and the validated completion per prompt.
    Losing an entry is never an error.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Returns the value stored under ``key``, or None when absent or expired.

        Raises:
            CacheServiceError: If the backend cannot be reached.
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Stores ``value`` under ``key``, replacing any earlier value.

        Raises:
            CacheServiceError: If the backend cannot be reached.
        """
