"""Tests for environment configuration loading."""

import pytest

from call_scorecard.config import BudgetConfig, load_config, load_deploy_config
from call_scorecard.exceptions import ConfigurationError

TRANSCRIPTION_ENV = {
    "PIPELINE_STAGE": "transcription",
    "OUTPUT_BUCKET": "call-recordings",
    "ASSEMBLYAI_API_KEY": "aai-key",
}

SCORING_ENV = {
    "PIPELINE_STAGE": "scoring",
    "OUTPUT_BUCKET": "call-recordings",
    "SCORING_TEMPLATE_KEY": "config/scoring-template.json",
    "GEMINI_API_KEY": "gemini-key",
}


def test_transcription_defaults():
    config = load_config(TRANSCRIPTION_ENV)

    assert config.stage.name == "transcription"
    assert config.timeout_seconds == 60
    assert config.budgets.transcription_poll_interval_seconds == 3
    assert config.rabbitmq.queue_config.routing_key == "storage.voices.created"
    assert config.rabbitmq.queue_config.max_delivery_count == 3
    assert config.assemblyai.api_key == "aai-key"
    assert config.gemini is None
    assert config.minio.bucket_name == "call-recordings"


def test_scoring_defaults():
    config = load_config(SCORING_ENV)

    assert config.stage.template_key == "config/scoring-template.json"
    assert config.timeout_seconds == 120
    assert config.rabbitmq.queue_config.routing_key == "storage.transcription.created"
    assert config.gemini.model_name == "gemini-2.5-flash-lite"
    assert config.assemblyai is None


def test_overrides_are_read():
    config = load_config(
        {
            **SCORING_ENV,
            "MINIO_SECURE": "true",
            "REDIS_PORT": "6380",
            "GEMINI_MAX_ATTEMPTS": "5",
        }
    )

    assert config.minio.secure is True
    assert config.redis.port == 6380
    assert config.gemini.max_attempts == 5


@pytest.mark.parametrize(
    ("env", "setting"),
    [
        ({**TRANSCRIPTION_ENV, "PIPELINE_STAGE": ""}, "PIPELINE_STAGE"),
        ({**TRANSCRIPTION_ENV, "PIPELINE_STAGE": "summary"}, "PIPELINE_STAGE"),
        ({**TRANSCRIPTION_ENV, "OUTPUT_BUCKET": " "}, "OUTPUT_BUCKET"),
        ({**TRANSCRIPTION_ENV, "ASSEMBLYAI_API_KEY": ""}, "ASSEMBLYAI_API_KEY"),
        ({**SCORING_ENV, "GEMINI_API_KEY": ""}, "GEMINI_API_KEY"),
        ({**SCORING_ENV, "SCORING_TEMPLATE_KEY": ""}, "SCORING_TEMPLATE_KEY"),
        (
            {**SCORING_ENV, "SCORING_TEMPLATE_KEY": "transcription/template.json"},
            "SCORING_TEMPLATE_KEY",
        ),
        ({**SCORING_ENV, "SCORING_TIMEOUT_SECONDS": "45"}, "environment"),
        ({**SCORING_ENV, "REDIS_PORT": "not-a-port"}, "environment"),
    ],
)
def test_invalid_environment_fails_fast(env, setting):
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(env)

    assert exc_info.value.setting == setting
    assert exc_info.value.retryable is False


def test_scoring_budget_must_exceed_transcription_budget():
    with pytest.raises(ValueError):
        BudgetConfig(transcription_timeout_seconds=60, scoring_timeout_seconds=60)


DEPLOY_ENV = {
    "OUTPUT_BUCKET": "call-recordings",
    "MINIO_ADMIN_USER": "admin",
    "MINIO_ADMIN_PASSWORD": "admin-secret",
}


def test_deploy_config_reads_admin_credentials_and_targets():
    config = load_deploy_config(
        {**DEPLOY_ENV, "SCORING_NOTIFY_ARN": "arn:minio:sqs::scoring:amqp"}
    )

    assert config.minio.user == "admin"
    assert config.minio.bucket_name == "call-recordings"
    assert config.config_dir == "config"
    assert config.policy_dir is None
    assert config.notify_arns == {"scoring": "arn:minio:sqs::scoring:amqp"}


def test_deploy_config_requires_admin_credentials():
    with pytest.raises(ConfigurationError) as exc_info:
        load_deploy_config({**DEPLOY_ENV, "MINIO_ADMIN_PASSWORD": ""})

    assert exc_info.value.setting == "MINIO_ADMIN_PASSWORD"
