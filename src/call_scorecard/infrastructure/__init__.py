"""Infrastructure layer exports."""

from .assemblyai_transcriber import AssemblyAITranscriber
from .gemini_llm import GeminiLLMService
from .memory_storage import Blob, InMemoryBlobStore
from .minio_storage import MinioStorageClient
from .rabbitmq_broker import RabbitMQBroker
from .redis_cache import RedisCacheService
from .scoped_storage import ScopedStorageClient

__all__ = [
    "AssemblyAITranscriber",
    "Blob",
    "GeminiLLMService",
    "InMemoryBlobStore",
    "MinioStorageClient",
    "RabbitMQBroker",
    "RedisCacheService",
    "ScopedStorageClient",
]
