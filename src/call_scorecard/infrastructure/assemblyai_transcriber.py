"""AssemblyAI implementation of the TranscriptionService interface."""

import os
import tempfile

import assemblyai as aai
import httpx
from assemblyai import api as aai_api

from call_scorecard.domain.models import JobStatus, TranscriptionJob, Utterance
from call_scorecard.exceptions import TranscriptionError
from call_scorecard.logging import setup_logging

from .interfaces import TranscriptionService

logger = setup_logging()

_STATUS_MAP = {
    aai.TranscriptStatus.queued: JobStatus.SUBMITTED,
    aai.TranscriptStatus.processing: JobStatus.RUNNING,
    aai.TranscriptStatus.completed: JobStatus.COMPLETED,
    aai.TranscriptStatus.error: JobStatus.FAILED,
}


class AssemblyAITranscriber(TranscriptionService):
    """
    Handles audio transcription using AssemblyAI.

    Submission goes through the SDK transcriber, which uploads the audio and
    returns immediately. Status is read with a single non-blocking transcript
    lookup so the caller stays in control of its polling budget.
    """

    def __init__(self, transcriber: aai.Transcriber, http_client: httpx.Client):
        self._transcriber = transcriber
        self._http_client = http_client

    def submit(self, audio_data: bytes, source_key: str) -> TranscriptionJob:
        """
        Writes audio to a temp file (required by the AssemblyAI SDK) and
        submits it without waiting for completion.
        """
        suffix = os.path.splitext(source_key)[1] or ".wav"
        try:
            with tempfile.NamedTemporaryFile(suffix=suffix, delete=True) as temp_file:
                temp_file.write(audio_data)
                temp_file.flush()

                transcript = self._transcriber.submit(temp_file.name)
        except Exception as e:
            logger.exception(
                "AssemblyAI submission failed", extra={"source_key": source_key}
            )
            raise TranscriptionError(source_key, e) from e

        job = self._to_job(source_key, transcript)
        logger.info(
            "Audio submitted for transcription",
            extra={"source_key": source_key, "job_id": job.job_id},
        )
        return job

    def poll(self, job: TranscriptionJob) -> TranscriptionJob:
        try:
            transcript = aai_api.get_transcript(self._http_client, job.job_id)
        except Exception as e:
            logger.exception(
                "AssemblyAI status lookup failed",
                extra={"source_key": job.source_key, "job_id": job.job_id},
            )
            raise TranscriptionError(job.source_key, e) from e
        return self._to_job(job.source_key, transcript)

    def _to_job(self, source_key: str, transcript) -> TranscriptionJob:
        status = _STATUS_MAP.get(transcript.status, JobStatus.RUNNING)
        utterances = []
        if status is JobStatus.COMPLETED and transcript.utterances:
            utterances = [
                Utterance(speaker=u.speaker, text=u.text)
                for u in transcript.utterances
            ]
        return TranscriptionJob(
            source_key=source_key,
            job_id=transcript.id,
            status=status,
            result_text=transcript.text,
            utterances=utterances,
            error=transcript.error,
        )
