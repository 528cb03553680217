"""Dependency composition for a single pipeline stage process."""

import assemblyai as aai
import pika
import redis
from assemblyai.client import Client as AssemblyAIClient
from google import genai
from minio import Minio

from call_scorecard.config import AppConfig
from call_scorecard.domain import (
    IDENTITIES,
    ROUTES,
    ExecutionIdentity,
    PromptBuilder,
    ScorecardParser,
    ScorecardResponse,
    TranscriptBuilder,
)
from call_scorecard.domain.call_scorer import CallScorer
from call_scorecard.domain.policies import ASSEMBLYAI, GEMINI
from call_scorecard.handlers import ScoringHandler, TranscriptionHandler
from call_scorecard.infrastructure import (
    AssemblyAITranscriber,
    GeminiLLMService,
    MinioStorageClient,
    RabbitMQBroker,
    RedisCacheService,
    ScopedStorageClient,
)
from call_scorecard.infrastructure.interfaces import CacheService, StorageClient
from call_scorecard.logging import setup_logging
from call_scorecard.worker import Worker

logger = setup_logging()


def get_storage(config: AppConfig) -> MinioStorageClient:
    """
    Returns a MinIO client authenticated as this stage's identity.

    The bucket, its notifications and the scoring template are provisioned by
    ``call-scorecard-deploy``; the stage identity holds object grants only.
    """
    minio_client = Minio(
        endpoint=config.minio.endpoint,
        access_key=config.minio.user,
        secret_key=config.minio.password,
        secure=config.minio.secure,
    )
    return MinioStorageClient(minio_client)


def get_cache(config: AppConfig) -> CacheService:
    """Returns the Redis-backed cache, failing fast if Redis is unreachable."""
    redis_client = redis.Redis(
        host=config.redis.host,
        port=config.redis.port,
        decode_responses=True,
    )
    if not redis_client.ping():
        logger.error("Redis connection failed", extra={"host": config.redis.host})
        raise ConnectionError("Redis connection failed")
    return RedisCacheService(redis_client, config.redis.cache_ttl_seconds)


def get_broker(config: AppConfig) -> RabbitMQBroker:
    """Returns the stage's broker with its queue infrastructure declared."""
    credentials = pika.PlainCredentials(config.rabbitmq.user, config.rabbitmq.password)
    parameters = pika.ConnectionParameters(
        host=config.rabbitmq.host,
        credentials=credentials,
        heartbeat=0,
    )
    connection = pika.BlockingConnection(parameters)
    broker = RabbitMQBroker(connection.channel(), config.rabbitmq)
    broker.setup()
    return broker


def build_transcription_handler(
    config: AppConfig,
    storage: StorageClient,
    cache: CacheService,
    identity: ExecutionIdentity,
) -> TranscriptionHandler:
    """Composes the transcription stage; its identity must grant AssemblyAI."""
    identity.require_service(ASSEMBLYAI)

    aai.settings.api_key = config.assemblyai.api_key
    aai_config = aai.TranscriptionConfig(speaker_labels=config.assemblyai.speaker_labels)
    transcriber = AssemblyAITranscriber(
        aai.Transcriber(config=aai_config),
        AssemblyAIClient.get_default().http_client,
    )

    route = ROUTES["transcription"]
    return TranscriptionHandler(
        storage=storage,
        transcription_service=transcriber,
        cache=cache,
        transcript_builder=TranscriptBuilder(route),
        route=route,
        timeout_seconds=config.budgets.transcription_timeout_seconds,
        poll_interval_seconds=config.budgets.transcription_poll_interval_seconds,
    )


def build_scoring_handler(
    config: AppConfig,
    storage: StorageClient,
    cache: CacheService,
    identity: ExecutionIdentity,
) -> ScoringHandler:
    """Composes the scoring stage; its identity must grant Gemini."""
    identity.require_service(GEMINI)

    llm = GeminiLLMService(
        genai.Client(api_key=config.gemini.api_key),
        config.gemini.model_name,
        max_attempts=config.gemini.max_attempts,
        response_schema=ScorecardResponse,
    )
    scorer = CallScorer(llm, cache, PromptBuilder(), ScorecardParser())

    return ScoringHandler(
        storage=storage,
        scorer=scorer,
        route=ROUTES["scoring"],
        template_key=config.stage.template_key,
        timeout_seconds=config.budgets.scoring_timeout_seconds,
    )


def get_worker(config: AppConfig) -> Worker:
    """Returns the configured worker for ``config.stage``."""
    identity = IDENTITIES[config.stage.name]
    storage = ScopedStorageClient(get_storage(config), identity)
    cache = get_cache(config)

    if config.stage.name == "transcription":
        handler = build_transcription_handler(config, storage, cache, identity)
    else:
        handler = build_scoring_handler(config, storage, cache, identity)

    logger.info(
        "Stage composed",
        extra={"stage": config.stage.name, "identity": identity.name},
    )
    return Worker(get_broker(config), handler, config.rabbitmq)
