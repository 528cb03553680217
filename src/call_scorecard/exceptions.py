"""Error taxonomy for the scorecard pipeline.

Every error carries ``retryable`` so the invocation boundary can decide
between redelivery and dead-lettering without inspecting the cause.
"""


class PipelineError(Exception):
    """Base class for errors raised by pipeline stages."""

    retryable = False

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        retryable: bool | None = None,
    ):
        self.cause = cause
        if retryable is not None:
            self.retryable = retryable
        super().__init__(message)


class ConfigurationError(PipelineError):
    """Raised when a required configuration value or template is missing or invalid."""

    def __init__(self, setting: str, reason: str, cause: Exception | None = None):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid configuration '{setting}': {reason}", cause=cause)


class InvalidEventError(PipelineError):
    """Raised when a storage notification cannot be parsed or routed."""

    def __init__(self, reason: str, cause: Exception | None = None):
        self.reason = reason
        super().__init__(f"Invalid storage event: {reason}", cause=cause)


class StorageError(PipelineError):
    """Raised when a read or write against the blob store fails."""

    retryable = True


class StorageDownloadError(StorageError):
    """Raised when downloading an object from storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        super().__init__(f"Failed to download '{object_name}' from storage", cause=cause)


class StorageUploadError(StorageError):
    """Raised when uploading an object to storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        super().__init__(f"Failed to upload '{object_name}' to storage", cause=cause)


class ObjectNotFoundError(StorageError):
    """Raised when the requested object does not exist."""

    retryable = False

    def __init__(self, object_name: str, cause: Exception | None = None):
        self.object_name = object_name
        super().__init__(f"Object '{object_name}' not found in storage", cause=cause)


class PermissionDeniedError(PipelineError):
    """Raised when a stage touches a key or service outside its execution identity."""

    def __init__(self, identity: str, action: str, resource: str):
        self.identity = identity
        self.action = action
        self.resource = resource
        super().__init__(f"Identity '{identity}' is not allowed to {action} '{resource}'")


class TranscriptionError(PipelineError):
    """Raised when audio transcription is rejected, fails or times out."""

    def __init__(
        self,
        file_name: str,
        cause: Exception | None = None,
        retryable: bool = True,
    ):
        self.file_name = file_name
        super().__init__(
            f"Failed to transcribe audio file '{file_name}'",
            cause=cause,
            retryable=retryable,
        )


class CompletionError(PipelineError):
    """Raised when the completion API call fails."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        retryable: bool = True,
    ):
        super().__init__(message, cause=cause, retryable=retryable)


class ScoringFormatError(PipelineError):
    """Raised when a model response cannot be parsed into a scorecard."""

    def __init__(self, source_key: str, reason: str, cause: Exception | None = None):
        self.source_key = source_key
        self.reason = reason
        super().__init__(
            f"Unusable scorecard response for '{source_key}': {reason}", cause=cause
        )


class StageTimeoutError(PipelineError):
    """Raised when a stage invocation exceeds its wall-clock budget."""

    retryable = True

    def __init__(self, stage: str, budget_seconds: float):
        self.stage = stage
        self.budget_seconds = budget_seconds
        super().__init__(
            f"Stage '{stage}' exceeded its {budget_seconds:g}s invocation budget"
        )


class CacheServiceError(PipelineError):
    """Raised when cache operations fail."""

    retryable = True

    def __init__(self, key: str, operation: str, cause: Exception | None = None):
        self.key = key
        self.operation = operation
        super().__init__(f"Cache {operation} failed for key '{key}'", cause=cause)
