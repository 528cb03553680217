"""Domain models for the scorecard pipeline."""

from enum import Enum
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StringConstraints,
    ValidationError,
    field_validator,
    model_validator,
)

from call_scorecard.exceptions import ConfigurationError

TRANSCRIPT_PLACEHOLDER = "{transcript}"
CRITERIA_PLACEHOLDER = "{criteria}"

NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Score = StrictInt | StrictFloat | NonEmptyText


class JobStatus(str, Enum):
    """Lifecycle of a transcription job."""

    SUBMITTED = "submitted"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class Utterance(BaseModel, frozen=True):
    """A single speaker utterance from transcription."""

    speaker: str
    text: str


class TranscriptionJob(BaseModel, frozen=True):
    """State of one transcription request, held only for one invocation."""

    source_key: str
    job_id: str
    status: JobStatus
    result_text: str | None = None
    utterances: list[Utterance] = Field(default_factory=list)
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class Criterion(BaseModel, frozen=True):
    """A named evaluation dimension of the scorecard."""

    name: str = Field(min_length=1)
    description: str = ""


class ScoreRange(BaseModel, frozen=True):
    """Inclusive bounds for numeric criterion scores."""

    min: float = 1
    max: float = 10

    @model_validator(mode="after")
    def _ordered(self) -> "ScoreRange":
        if self.min >= self.max:
            raise ValueError("score_range.min must be lower than score_range.max")
        return self

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class ScoringTemplate(BaseModel, frozen=True):
    """
    Prompt template and criteria deployed under ``config/``.

    Expected blob shape::

        {
          "template_body": "... {criteria} ... {transcript} ...",
          "criteria": [{"name": "greeting", "description": "..."}],
          "score_range": {"min": 1, "max": 10}
        }
    """

    template_body: str
    criteria: list[Criterion] = Field(min_length=1)
    score_range: ScoreRange = ScoreRange()

    @field_validator("template_body")
    @classmethod
    def _has_transcript_slot(cls, value: str) -> str:
        if TRANSCRIPT_PLACEHOLDER not in value:
            raise ValueError(f"template_body must contain {TRANSCRIPT_PLACEHOLDER}")
        return value

    @field_validator("criteria")
    @classmethod
    def _unique_names(cls, value: list[Criterion]) -> list[Criterion]:
        names = [c.name for c in value]
        if len(names) != len(set(names)):
            raise ValueError("criterion names must be unique")
        return value

    @property
    def criterion_names(self) -> list[str]:
        return [c.name for c in self.criteria]

    @classmethod
    def from_bytes(cls, data: bytes, key: str) -> "ScoringTemplate":
        """
        Parses a template blob.

        Args:
            data: Raw template object bytes.
            key: The template's storage key, used in error reporting.

        Returns:
            The validated ScoringTemplate.

        Raises:
            ConfigurationError: If the blob is not a valid template.
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise ConfigurationError(key, f"malformed scoring template: {e}", cause=e) from e


class ScorecardResponse(BaseModel):
    """
    Answer shape requested from the model.

    Also sent as the completion's response schema. Criteria coverage and the
    numeric range depend on the template and are checked by the parser.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    scores: dict[str, Score]
    summary: NonEmptyText


class Completion(BaseModel, frozen=True):
    """Raw completion returned by the language model."""

    text: str
    model_id: str
    input_tokens: int | None = None
    output_tokens: int | None = None


class ModelMetadata(BaseModel, frozen=True):
    """Identifies the model that produced a scorecard."""

    model_id: str
    input_tokens: int | None = None
    output_tokens: int | None = None


class Scorecard(BaseModel, frozen=True):
    """Terminal artifact scoring one transcript against the configured criteria."""

    source_transcript_key: str
    scores: dict[str, int | float | str]
    summary: str = Field(min_length=1)
    model: ModelMetadata


class StageResult(BaseModel, frozen=True):
    """Outcome of one successful stage invocation."""

    stage: str
    bucket_name: str
    source_key: str
    output_key: str
    content_type: str
