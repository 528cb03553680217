"""Infrastructure interface exports."""

from .cache_service import CacheService
from .llm_service import LLMService
from .message_broker import MessageBroker
from .storage_client import StorageClient
from .transcription_service import TranscriptionService

__all__ = [
    "CacheService",
    "LLMService",
    "MessageBroker",
    "StorageClient",
    "TranscriptionService",
]
