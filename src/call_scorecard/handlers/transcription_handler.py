"""Handler for audio objects created under ``voices/``."""

import io
import time
from collections.abc import Callable

from call_scorecard.domain import (
    Deadline,
    JobStatus,
    Route,
    StageResult,
    StorageEvent,
    TranscriptBuilder,
    TranscriptionJob,
)
from call_scorecard.exceptions import StageTimeoutError, TranscriptionError
from call_scorecard.infrastructure.interfaces import (
    CacheService,
    StorageClient,
    TranscriptionService,
)
from call_scorecard.logging import setup_logging

logger = setup_logging()


class TranscriptionHandler:
    """Orchestrates audio-to-transcript operations for one notification."""

    def __init__(
        self,
        storage: StorageClient,
        transcription_service: TranscriptionService,
        cache: CacheService,
        transcript_builder: TranscriptBuilder,
        route: Route,
        timeout_seconds: float,
        poll_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._storage = storage
        self._transcription_service = transcription_service
        self._cache = cache
        self._transcript_builder = transcript_builder
        self._timeout_seconds = timeout_seconds
        self._poll_interval_seconds = poll_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self.route = route

    def process(self, event: StorageEvent) -> StageResult:
        """
        Transcribes the audio object and stores the transcript.

        A job already submitted for the same object version is resumed rather
        than resubmitted, so redeliveries after a timeout converge on the same
        transcript.

        Args:
            event: The object-created notification for an audio key.

        Returns:
            StageResult with the uploaded transcript details.

        Raises:
            InvalidEventError: If the key is outside ``voices/``.
            StorageError: If the audio download or transcript upload fails.
            TranscriptionError: If transcription is rejected, fails or times out.
            StageTimeoutError: If the budget ran out before the upload.
        """
        deadline = Deadline(self.route.stage, self._timeout_seconds, clock=self._clock)
        # reject keys outside the route before any external call
        self.route.derive_output_key(event.key)

        logger.info(
            "Processing audio",
            extra={"key": event.key, "bucket_name": event.bucket_name},
        )

        job = self._submit_or_resume(event)
        job = self._await_completion(job, deadline)

        if job.status is JobStatus.FAILED:
            logger.error(
                "Transcription job failed",
                extra={"key": event.key, "job_id": job.job_id, "error": job.error},
            )
            raise TranscriptionError(
                event.key,
                Exception(job.error or "Transcription job failed"),
                retryable=False,
            )

        transcript_text, output_key = self._transcript_builder.build(job)

        deadline.ensure_time_left()

        transcript_bytes = transcript_text.encode("utf-8")
        self._storage.upload(
            bucket_name=event.bucket_name,
            object_name=output_key,
            data=io.BytesIO(transcript_bytes),
            size=len(transcript_bytes),
            content_type=self.route.content_type,
        )

        logger.info(
            "Audio processed",
            extra={"key": event.key, "transcription_file": output_key},
        )

        return StageResult(
            stage=self.route.stage,
            bucket_name=event.bucket_name,
            source_key=event.key,
            output_key=output_key,
            content_type=self.route.content_type,
        )

    def _submit_or_resume(self, event: StorageEvent) -> TranscriptionJob:
        cache_key = f"transcription-job:{event.bucket_name}/{event.key}:{event.etag or ''}"

        job_id = self._cache.get(cache_key)
        if job_id:
            logger.info(
                "Resuming transcription job",
                extra={"key": event.key, "job_id": job_id},
            )
            return TranscriptionJob(
                source_key=event.key, job_id=job_id, status=JobStatus.SUBMITTED
            )

        audio_data = self._storage.download(event.bucket_name, event.key)
        job = self._transcription_service.submit(audio_data, event.key)
        self._cache.set(cache_key, job.job_id)
        return job

    def _await_completion(
        self, job: TranscriptionJob, deadline: Deadline
    ) -> TranscriptionJob:
        """Polls until the job is terminal or the budget runs out."""
        polls = 0
        while not job.is_terminal:
            remaining = deadline.remaining()
            if remaining <= 0:
                logger.warning(
                    "Transcription did not finish within budget",
                    extra={"key": job.source_key, "job_id": job.job_id, "polls": polls},
                )
                raise TranscriptionError(
                    job.source_key,
                    StageTimeoutError(self.route.stage, deadline.budget_seconds),
                    retryable=True,
                )
            self._sleep(min(self._poll_interval_seconds, remaining))
            job = self._transcription_service.poll(job)
            polls += 1
        return job
