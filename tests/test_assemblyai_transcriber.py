"""Tests for the AssemblyAI transcription adapter."""

from pathlib import Path
from unittest.mock import Mock

import assemblyai as aai
import pytest

from call_scorecard.domain import JobStatus, TranscriptionJob
from call_scorecard.exceptions import TranscriptionError
from call_scorecard.infrastructure import AssemblyAITranscriber, assemblyai_transcriber


def _transcript(status, text=None, utterances=None, error=None):
    return Mock(id="tr-1", status=status, text=text, utterances=utterances, error=error)


@pytest.fixture
def transcriber():
    return Mock()


@pytest.fixture
def service(transcriber) -> AssemblyAITranscriber:
    return AssemblyAITranscriber(transcriber, http_client=Mock())


def test_submit_uploads_audio_without_waiting(service, transcriber):
    seen = {}

    def submit(path):
        seen["suffix"] = Path(path).suffix
        seen["data"] = Path(path).read_bytes()
        return _transcript(aai.TranscriptStatus.queued)

    transcriber.submit.side_effect = submit

    job = service.submit(b"audio-bytes", "voices/call-42.mp3")

    assert seen == {"suffix": ".mp3", "data": b"audio-bytes"}
    assert job.job_id == "tr-1"
    assert job.status is JobStatus.SUBMITTED
    assert job.source_key == "voices/call-42.mp3"


def test_submit_failure_is_retryable(service, transcriber):
    transcriber.submit.side_effect = ConnectionError("upload reset")

    with pytest.raises(TranscriptionError) as exc_info:
        service.submit(b"audio-bytes", "voices/call-42.wav")

    assert exc_info.value.retryable is True


def test_poll_maps_completed_transcript(service, monkeypatch):
    utterances = [Mock(speaker="A", text="Hello."), Mock(speaker="B", text="Hi.")]
    monkeypatch.setattr(
        assemblyai_transcriber.aai_api,
        "get_transcript",
        lambda client, transcript_id: _transcript(
            aai.TranscriptStatus.completed, text="Hello. Hi.", utterances=utterances
        ),
    )
    job = TranscriptionJob(source_key="voices/a.wav", job_id="tr-1", status=JobStatus.SUBMITTED)

    polled = service.poll(job)

    assert polled.status is JobStatus.COMPLETED
    assert polled.result_text == "Hello. Hi."
    assert [(u.speaker, u.text) for u in polled.utterances] == [("A", "Hello."), ("B", "Hi.")]


def test_poll_maps_service_rejection(service, monkeypatch):
    monkeypatch.setattr(
        assemblyai_transcriber.aai_api,
        "get_transcript",
        lambda client, transcript_id: _transcript(
            aai.TranscriptStatus.error, error="File does not appear to contain audio."
        ),
    )
    job = TranscriptionJob(source_key="voices/a.wav", job_id="tr-1", status=JobStatus.RUNNING)

    polled = service.poll(job)

    assert polled.status is JobStatus.FAILED
    assert polled.error == "File does not appear to contain audio."


def test_poll_failure_is_retryable(service, monkeypatch):
    def lookup(client, transcript_id):
        raise TimeoutError("read timeout")

    monkeypatch.setattr(assemblyai_transcriber.aai_api, "get_transcript", lookup)
    job = TranscriptionJob(source_key="voices/a.wav", job_id="tr-1", status=JobStatus.RUNNING)

    with pytest.raises(TranscriptionError) as exc_info:
        service.poll(job)

    assert exc_info.value.retryable is True
