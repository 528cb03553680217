"""Application configuration loaded from environment variables."""

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, ValidationError, model_validator

from call_scorecard.exceptions import ConfigurationError

StageName = Literal["transcription", "scoring"]

CONFIG_PREFIX = "config/"


class MinioConfig(BaseModel, frozen=True):
    """MinIO connection configuration."""

    endpoint: str
    user: str
    password: str
    bucket_name: str
    secure: bool = False


class DeployConfig(BaseModel, frozen=True):
    """Provisioning settings, run under the store's admin credentials."""

    minio: MinioConfig
    config_dir: str = "config"
    policy_dir: str | None = None
    notify_arns: dict[StageName, str] = {}


class QueueConfig(BaseModel, frozen=True):
    """RabbitMQ queue configuration for one stage."""

    name: str
    queue_type: str = "quorum"
    max_delivery_count: int = 3
    routing_key: str
    dlq_name: str
    dlq_exchange_name: str = "dead_letter_exchange"
    dlq_routing_key: str


class RabbitMQConfig(BaseModel, frozen=True):
    """RabbitMQ connection configuration."""

    host: str
    user: str
    password: str
    exchange_name: str = "bucket-events"
    queue_config: QueueConfig


class RedisConfig(BaseModel, frozen=True):
    """Redis connection configuration."""

    host: str
    port: int = 6379
    cache_ttl_seconds: int = 86400  # 24 hours default


class AssemblyAIConfig(BaseModel, frozen=True):
    """AssemblyAI API configuration."""

    api_key: str
    speaker_labels: bool = True


class GeminiConfig(BaseModel, frozen=True):
    """Gemini LLM configuration."""

    api_key: str
    model_name: str = "gemini-2.5-flash-lite"
    max_attempts: int = 3


class BudgetConfig(BaseModel, frozen=True):
    """Per-stage wall-clock budgets, in seconds."""

    transcription_timeout_seconds: float = 60.0
    transcription_poll_interval_seconds: float = 3.0
    scoring_timeout_seconds: float = 120.0

    @model_validator(mode="after")
    def _scoring_outlasts_transcription(self) -> "BudgetConfig":
        if self.scoring_timeout_seconds <= self.transcription_timeout_seconds:
            raise ValueError(
                "scoring_timeout_seconds must exceed transcription_timeout_seconds"
            )
        if self.transcription_poll_interval_seconds <= 0:
            raise ValueError("transcription_poll_interval_seconds must be positive")
        return self


class StageConfig(BaseModel, frozen=True):
    """Identifies which stage this process runs and its stage-only settings."""

    name: StageName
    template_key: str | None = None


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    stage: StageConfig
    minio: MinioConfig
    rabbitmq: RabbitMQConfig
    redis: RedisConfig
    budgets: BudgetConfig
    assemblyai: AssemblyAIConfig | None = None
    gemini: GeminiConfig | None = None

    @property
    def timeout_seconds(self) -> float:
        if self.stage.name == "transcription":
            return self.budgets.transcription_timeout_seconds
        return self.budgets.scoring_timeout_seconds


QUEUE_CONFIGS: dict[str, QueueConfig] = {
    "transcription": QueueConfig(
        name="transcription_queue",
        routing_key="storage.voices.created",
        dlq_name="dlq_transcription",
        dlq_routing_key="transcription.failed",
    ),
    "scoring": QueueConfig(
        name="scoring_queue",
        routing_key="storage.transcription.created",
        dlq_name="dlq_scoring",
        dlq_routing_key="scoring.failed",
    ),
}


def _require(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise ConfigurationError(name, "required environment variable is not set")
    return value


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """
    Loads configuration from environment variables.

    Args:
        environ: Mapping to read from, defaults to ``os.environ``.

    Returns:
        AppConfig for the stage named by ``PIPELINE_STAGE``.

    Raises:
        ConfigurationError: If a required value is missing or any value is invalid.
    """
    env = os.environ if environ is None else environ

    stage_name = _require(env, "PIPELINE_STAGE")
    if stage_name not in QUEUE_CONFIGS:
        raise ConfigurationError(
            "PIPELINE_STAGE", f"unknown stage '{stage_name}'"
        )
    bucket_name = _require(env, "OUTPUT_BUCKET")

    template_key = None
    if stage_name == "scoring":
        template_key = _require(env, "SCORING_TEMPLATE_KEY")
        if not template_key.startswith(CONFIG_PREFIX):
            raise ConfigurationError(
                "SCORING_TEMPLATE_KEY", f"must be a key under '{CONFIG_PREFIX}'"
            )

    try:
        return AppConfig(
            stage=StageConfig(name=stage_name, template_key=template_key),
            minio=MinioConfig(
                endpoint=env.get("MINIO_ENDPOINT", "minio:9000"),
                user=env.get("MINIO_USER", ""),
                password=env.get("MINIO_PASSWORD", ""),
                bucket_name=bucket_name,
                secure=_flag(env, "MINIO_SECURE", False),
            ),
            rabbitmq=RabbitMQConfig(
                host=env.get("RABBITMQ_HOST", "rabbitmq"),
                user=env.get("RABBITMQ_USER", ""),
                password=env.get("RABBITMQ_PASSWORD", ""),
                exchange_name=env.get("RABBITMQ_EXCHANGE", "bucket-events"),
                queue_config=QUEUE_CONFIGS[stage_name],
            ),
            redis=RedisConfig(
                host=env.get("REDIS_HOST", "redis"),
                port=int(env.get("REDIS_PORT", "6379")),
                cache_ttl_seconds=int(env.get("REDIS_CACHE_TTL_SECONDS", "86400")),
            ),
            budgets=BudgetConfig(
                transcription_timeout_seconds=float(
                    env.get("TRANSCRIPTION_TIMEOUT_SECONDS", "60")
                ),
                transcription_poll_interval_seconds=float(
                    env.get("TRANSCRIPTION_POLL_INTERVAL_SECONDS", "3")
                ),
                scoring_timeout_seconds=float(
                    env.get("SCORING_TIMEOUT_SECONDS", "120")
                ),
            ),
            assemblyai=(
                AssemblyAIConfig(api_key=_require(env, "ASSEMBLYAI_API_KEY"))
                if stage_name == "transcription"
                else None
            ),
            gemini=(
                GeminiConfig(
                    api_key=_require(env, "GEMINI_API_KEY"),
                    model_name=env.get("GEMINI_MODEL", "gemini-2.5-flash-lite"),
                    max_attempts=int(env.get("GEMINI_MAX_ATTEMPTS", "3")),
                )
                if stage_name == "scoring"
                else None
            ),
        )
    except (ValidationError, ValueError) as e:
        raise ConfigurationError("environment", str(e), cause=e) from e


def load_deploy_config(environ: Mapping[str, str] | None = None) -> DeployConfig:
    """
    Loads provisioning settings from environment variables.

    Args:
        environ: Mapping to read from, defaults to ``os.environ``.

    Returns:
        DeployConfig with admin store credentials and per-stage notification
        targets (``TRANSCRIPTION_NOTIFY_ARN``, ``SCORING_NOTIFY_ARN``).

    Raises:
        ConfigurationError: If a required value is missing.
    """
    env = os.environ if environ is None else environ

    notify_arns = {}
    for stage_name in QUEUE_CONFIGS:
        arn = env.get(f"{stage_name.upper()}_NOTIFY_ARN", "").strip()
        if arn:
            notify_arns[stage_name] = arn

    return DeployConfig(
        minio=MinioConfig(
            endpoint=env.get("MINIO_ENDPOINT", "minio:9000"),
            user=_require(env, "MINIO_ADMIN_USER"),
            password=_require(env, "MINIO_ADMIN_PASSWORD"),
            bucket_name=_require(env, "OUTPUT_BUCKET"),
            secure=_flag(env, "MINIO_SECURE", False),
        ),
        config_dir=env.get("CONFIG_DIR", "config"),
        policy_dir=env.get("POLICY_DIR") or None,
        notify_arns=notify_arns,
    )
