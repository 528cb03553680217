"""
Shared fixtures and test doubles for the scorecard pipeline.

Every external collaborator is replaced by an in-process fake implementing
the same interface, so stages run end-to-end without network access.
"""

import io
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from call_scorecard.domain import (
    SCORING_ROUTE,
    TRANSCRIPTION_ROUTE,
    Completion,
    Deadline,
    JobStatus,
    PromptBuilder,
    ScorecardParser,
    StorageEvent,
    TranscriptBuilder,
    TranscriptionJob,
    Utterance,
)
from call_scorecard.domain.call_scorer import CallScorer
from call_scorecard.domain.policies import SCORING_IDENTITY, TRANSCRIPTION_IDENTITY
from call_scorecard.exceptions import CompletionError, TranscriptionError
from call_scorecard.handlers import ScoringHandler, TranscriptionHandler
from call_scorecard.infrastructure import InMemoryBlobStore, ScopedStorageClient
from call_scorecard.infrastructure.interfaces import (
    CacheService,
    LLMService,
    MessageBroker,
    TranscriptionService,
)

BUCKET = "call-recordings"
TEMPLATE_KEY = "config/scoring-template.json"
TEMPLATE_PATH = Path(__file__).resolve().parents[1] / "config" / "scoring-template.json"
CRITERIA = ["greeting", "empathy", "problem_resolution", "compliance", "closing"]


# =============================================================================
# Fakes
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock; ``sleep`` advances it."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCache(CacheService):
    def __init__(self):
        self.values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class FakeTranscriptionService(TranscriptionService):
    """
    Simulates an asynchronous transcription backend.

    The job completes after ``polls_to_complete`` polls. ``reject`` makes the
    job fail (a permanent service-side rejection); ``submit_error`` makes the
    submission itself raise.
    """

    def __init__(
        self,
        utterances: list[tuple[str, str]] | None = None,
        text: str | None = None,
        polls_to_complete: int = 1,
        reject: str | None = None,
        submit_error: Exception | None = None,
    ):
        self.utterances = (
            [("A", "Thank you for calling Acme, this is Dana."), ("B", "Hi, my router is down.")]
            if utterances is None
            else utterances
        )
        self.text = text
        self.polls_to_complete = polls_to_complete
        self.reject = reject
        self.submit_error = submit_error
        self.submitted: list[tuple[str, bytes]] = []
        self.polls: dict[str, int] = {}

    def submit(self, audio_data: bytes, source_key: str) -> TranscriptionJob:
        if self.submit_error is not None:
            raise TranscriptionError(source_key, self.submit_error)
        self.submitted.append((source_key, audio_data))
        job_id = f"job-{len(self.submitted)}"
        self.polls[job_id] = 0
        return TranscriptionJob(
            source_key=source_key, job_id=job_id, status=JobStatus.SUBMITTED
        )

    def poll(self, job: TranscriptionJob) -> TranscriptionJob:
        self.polls[job.job_id] = self.polls.get(job.job_id, 0) + 1
        if self.polls[job.job_id] < self.polls_to_complete:
            return job.model_copy(update={"status": JobStatus.RUNNING})
        if self.reject is not None:
            return job.model_copy(
                update={"status": JobStatus.FAILED, "error": self.reject}
            )
        return job.model_copy(
            update={
                "status": JobStatus.COMPLETED,
                "result_text": self.text
                if self.text is not None
                else " ".join(text for _, text in self.utterances),
                "utterances": [
                    Utterance(speaker=speaker, text=text)
                    for speaker, text in self.utterances
                ],
            }
        )


def scorecard_response(criteria: list[str] = CRITERIA, score: Any = 8) -> str:
    return json.dumps(
        {
            "scores": {name: score for name in criteria},
            "summary": "Agent resolved the connectivity issue politely.",
        }
    )


class FakeLLM(LLMService):
    """Returns queued responses; an Exception entry is raised instead."""

    def __init__(
        self,
        responses: list[str | Exception] | None = None,
        on_call: Callable[[str], None] | None = None,
        model_name: str = "gemini-test",
    ):
        self.responses = list(responses) if responses is not None else []
        self.on_call = on_call
        self.prompts: list[str] = []
        self.deadlines: list[Deadline] = []
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    def complete(self, prompt: str, deadline: Deadline) -> Completion:
        self.prompts.append(prompt)
        self.deadlines.append(deadline)
        if self.on_call is not None:
            self.on_call(prompt)
        response = self.responses.pop(0) if self.responses else scorecard_response()
        if isinstance(response, Exception):
            raise response
        return Completion(
            text=response, model_id=self._model_name, input_tokens=120, output_tokens=40
        )


class FakeBroker(MessageBroker):
    def __init__(self):
        self.acked: list[int] = []
        self.rejected: list[int] = []
        self.dead_lettered: list[int] = []
        self.callback = None

    def acknowledge(self, delivery_tag: int) -> None:
        self.acked.append(delivery_tag)

    def reject(self, delivery_tag: int) -> None:
        self.rejected.append(delivery_tag)

    def dead_letter(self, delivery_tag: int) -> None:
        self.dead_lettered.append(delivery_tag)

    def consume(self, callback) -> None:
        self.callback = callback

    def setup(self) -> None:
        pass


# =============================================================================
# Helpers
# =============================================================================


def put_object(
    store: InMemoryBlobStore,
    key: str,
    data: bytes,
    content_type: str = "application/octet-stream",
    bucket: str = BUCKET,
) -> StorageEvent:
    """Writes an object and returns the notification it produced."""
    store.upload(bucket, key, io.BytesIO(data), len(data), content_type)
    blob = store.get_blob(bucket, key)
    return StorageEvent(
        event_name="s3:ObjectCreated:Put",
        bucket_name=bucket,
        key=key,
        etag=blob.etag,
        size=len(data),
    )


def s3_event_body(*keys: str, bucket: str = BUCKET, event_name: str = "s3:ObjectCreated:Put") -> bytes:
    """Builds a MinIO-style notification document."""
    return json.dumps(
        {
            "EventName": event_name,
            "Key": f"{bucket}/{keys[0]}" if keys else bucket,
            "Records": [
                {
                    "eventVersion": "2.0",
                    "eventSource": "minio:s3",
                    "eventName": event_name,
                    "s3": {
                        "bucket": {"name": bucket},
                        "object": {"key": key, "eTag": "abc123", "size": 10},
                    },
                }
                for key in keys
            ],
        }
    ).encode("utf-8")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def template_bytes() -> bytes:
    return TEMPLATE_PATH.read_bytes()


@pytest.fixture
def store(template_bytes) -> InMemoryBlobStore:
    """In-memory store with the bucket and scoring template deployed."""
    blob_store = InMemoryBlobStore()
    blob_store.ensure_bucket_exists(BUCKET)
    blob_store.upload(
        BUCKET,
        TEMPLATE_KEY,
        io.BytesIO(template_bytes),
        len(template_bytes),
        "application/json",
    )
    return blob_store


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def transcription_service() -> FakeTranscriptionService:
    return FakeTranscriptionService()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def transcription_handler(store, transcription_service, cache, clock) -> TranscriptionHandler:
    return TranscriptionHandler(
        storage=ScopedStorageClient(store, TRANSCRIPTION_IDENTITY),
        transcription_service=transcription_service,
        cache=cache,
        transcript_builder=TranscriptBuilder(TRANSCRIPTION_ROUTE),
        route=TRANSCRIPTION_ROUTE,
        timeout_seconds=60,
        poll_interval_seconds=3,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def scoring_handler(store, llm, cache, clock) -> ScoringHandler:
    return ScoringHandler(
        storage=ScopedStorageClient(store, SCORING_IDENTITY),
        scorer=CallScorer(llm, cache, PromptBuilder(), ScorecardParser()),
        route=SCORING_ROUTE,
        template_key=TEMPLATE_KEY,
        timeout_seconds=120,
        clock=clock,
    )


@pytest.fixture
def permanent_completion_error() -> CompletionError:
    return CompletionError("Gemini request failed with status 401", retryable=False)
