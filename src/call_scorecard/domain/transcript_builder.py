"""Core business logic for transcript building."""

from call_scorecard.exceptions import TranscriptionError

from .models import TranscriptionJob, Utterance
from .routing import Route


class TranscriptBuilder:
    """Builds formatted transcripts from completed transcription jobs."""

    def __init__(self, route: Route):
        self._route = route

    def build(self, job: TranscriptionJob) -> tuple[str, str]:
        """
        Builds a formatted transcript and derives the output path.

        Args:
            job: A completed transcription job.

        Returns:
            Tuple of (transcript_text, transcription_object_name).

        Raises:
            TranscriptionError: If the job produced no text.
        """
        transcript_text = self._format(job)
        if not transcript_text:
            raise TranscriptionError(
                job.source_key,
                Exception("Transcription returned no text"),
                retryable=False,
            )
        object_name = self._route.derive_output_key(job.source_key)
        return transcript_text, object_name

    def _format(self, job: TranscriptionJob) -> str:
        """Prefers speaker-labelled lines, falling back to the plain text."""
        if job.utterances:
            return self._format_utterances(job.utterances)
        return (job.result_text or "").strip()

    def _format_utterances(self, utterances: list[Utterance]) -> str:
        return "\n".join(f"Speaker {u.speaker}: {u.text}" for u in utterances)
