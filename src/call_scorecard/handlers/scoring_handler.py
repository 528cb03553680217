"""Handler for transcript objects created under ``transcription/``."""

import io
import time
from collections.abc import Callable

from call_scorecard.domain import (
    Deadline,
    Route,
    ScoringTemplate,
    StageResult,
    StorageEvent,
)
from call_scorecard.domain.call_scorer import CallScorer
from call_scorecard.exceptions import ConfigurationError, ObjectNotFoundError
from call_scorecard.infrastructure.interfaces import StorageClient
from call_scorecard.logging import setup_logging

logger = setup_logging()


class ScoringHandler:
    """Handles transcript scoring operations for one notification."""

    def __init__(
        self,
        storage: StorageClient,
        scorer: CallScorer,
        route: Route,
        template_key: str,
        timeout_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._storage = storage
        self._scorer = scorer
        self._template_key = template_key
        self._timeout_seconds = timeout_seconds
        self._clock = clock
        self.route = route

    def process(self, event: StorageEvent) -> StageResult:
        """
        Scores a transcript and stores the resulting scorecard.

        Args:
            event: The object-created notification for a transcript key.

        Returns:
            StageResult with the uploaded scorecard details.

        Raises:
            InvalidEventError: If the key is outside ``transcription/``.
            StorageError: If a download or the scorecard upload fails.
            ConfigurationError: If the scoring template is missing or malformed.
            CompletionError: If the completion API call fails.
            ScoringFormatError: If the model response is not a valid scorecard.
            StageTimeoutError: If the budget ran out before the upload.
        """
        deadline = Deadline(self.route.stage, self._timeout_seconds, clock=self._clock)
        output_key = self.route.derive_output_key(event.key)

        logger.info(
            "Processing transcript",
            extra={"key": event.key, "bucket_name": event.bucket_name},
        )

        transcript = self._storage.download_text(event.bucket_name, event.key)
        template = self._load_template(event.bucket_name)

        scorecard = self._scorer.score(transcript, template, event.key, deadline)

        deadline.ensure_time_left()

        scorecard_bytes = scorecard.model_dump_json(indent=2).encode("utf-8")
        self._storage.upload(
            bucket_name=event.bucket_name,
            object_name=output_key,
            data=io.BytesIO(scorecard_bytes),
            size=len(scorecard_bytes),
            content_type=self.route.content_type,
        )

        logger.info(
            "Transcript scored",
            extra={
                "key": event.key,
                "scorecard_file": output_key,
                "criteria": len(scorecard.scores),
            },
        )

        return StageResult(
            stage=self.route.stage,
            bucket_name=event.bucket_name,
            source_key=event.key,
            output_key=output_key,
            content_type=self.route.content_type,
        )

    def _load_template(self, bucket_name: str) -> ScoringTemplate:
        try:
            data = self._storage.download(bucket_name, self._template_key)
        except ObjectNotFoundError as e:
            logger.error(
                "Scoring template missing",
                extra={"bucket_name": bucket_name, "template_key": self._template_key},
            )
            raise ConfigurationError(
                self._template_key, "scoring template not found", cause=e
            ) from e
        return ScoringTemplate.from_bytes(data, self._template_key)
