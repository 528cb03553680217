"""Stage handlers."""

from .scoring_handler import ScoringHandler
from .transcription_handler import TranscriptionHandler

__all__ = ["ScoringHandler", "TranscriptionHandler"]
