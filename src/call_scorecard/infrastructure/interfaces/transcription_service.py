"""Abstract interface for transcription service operations."""

from abc import ABC, abstractmethod

from call_scorecard.domain.models import TranscriptionJob


class TranscriptionService(ABC):
    """Abstract base class for asynchronous transcription backends."""

    @abstractmethod
    def submit(self, audio_data: bytes, source_key: str) -> TranscriptionJob:
        """
        Submits audio for transcription.

        Args:
            audio_data: Raw audio file bytes.
            source_key: Storage key of the audio, used for the file suffix and errors.

        Returns:
            The submitted job. Synchronous backends may return it already terminal.

        Raises:
            TranscriptionError: If the submission is rejected or fails.
        """

    @abstractmethod
    def poll(self, job: TranscriptionJob) -> TranscriptionJob:
        """
        Fetches the current state of a submitted job.

        Args:
            job: A previously submitted job.

        Returns:
            The job with refreshed status and, once completed, its result.

        Raises:
            TranscriptionError: If the status cannot be retrieved.
        """
