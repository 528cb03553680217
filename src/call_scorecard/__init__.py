from call_scorecard.config import AppConfig, load_config
from call_scorecard.exceptions import (
    CompletionError,
    ConfigurationError,
    InvalidEventError,
    ObjectNotFoundError,
    PermissionDeniedError,
    PipelineError,
    ScoringFormatError,
    StageTimeoutError,
    StorageDownloadError,
    StorageError,
    StorageUploadError,
    TranscriptionError,
)
from call_scorecard.logging import setup_logging

__all__ = [
    "setup_logging",
    "load_config",
    "AppConfig",
    "PipelineError",
    "ConfigurationError",
    "InvalidEventError",
    "StorageError",
    "StorageDownloadError",
    "StorageUploadError",
    "ObjectNotFoundError",
    "PermissionDeniedError",
    "TranscriptionError",
    "CompletionError",
    "ScoringFormatError",
    "StageTimeoutError",
]
