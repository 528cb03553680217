"""Domain layer exports."""

from .deadline import Deadline
from .events import StorageEvent, parse_storage_events
from .models import (
    Completion,
    Criterion,
    JobStatus,
    ModelMetadata,
    Scorecard,
    ScorecardResponse,
    ScoreRange,
    ScoringTemplate,
    StageResult,
    TranscriptionJob,
    Utterance,
)
from .policies import IDENTITIES, ExecutionIdentity
from .routing import ROUTES, SCORING_ROUTE, TRANSCRIPTION_ROUTE, PrefixRouter, Route
from .scorecard_parser import PromptBuilder, ScorecardParser
from .transcript_builder import TranscriptBuilder

__all__ = [
    "Completion",
    "Criterion",
    "Deadline",
    "ExecutionIdentity",
    "IDENTITIES",
    "JobStatus",
    "ModelMetadata",
    "PrefixRouter",
    "PromptBuilder",
    "ROUTES",
    "Route",
    "SCORING_ROUTE",
    "Scorecard",
    "ScorecardResponse",
    "ScorecardParser",
    "ScoreRange",
    "ScoringTemplate",
    "StageResult",
    "StorageEvent",
    "TRANSCRIPTION_ROUTE",
    "TranscriptBuilder",
    "TranscriptionJob",
    "Utterance",
    "parse_storage_events",
]
