"""Abstract interface for the completion API."""

from abc import ABC, abstractmethod

from call_scorecard.domain.deadline import Deadline
from call_scorecard.domain.models import Completion


class LLMService(ABC):
    """Abstract base class for completion backends."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """The configured model; part of every completion cache key."""

    @abstractmethod
    def complete(self, prompt: str, deadline: Deadline) -> Completion:
        """
        Runs a single completion for the prompt.

        Args:
            prompt: The fully composed prompt.
            deadline: The invocation budget. No request or retry wait may
                outlast it.

        Returns:
            Completion with the raw response text and model metadata.

        Raises:
            CompletionError: If the call fails. ``retryable`` is False for
                permanent failures such as rejected credentials.
            StageTimeoutError: If the budget ran out before an answer.
        """
