"""Gemini implementation of the LLMService interface."""

import time
from collections.abc import Callable

from google import genai
from google.genai import errors
from pydantic import BaseModel
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.stop import stop_base
from tenacity.wait import wait_base

from call_scorecard.domain.deadline import Deadline
from call_scorecard.domain.models import Completion
from call_scorecard.exceptions import CompletionError
from call_scorecard.logging import setup_logging

from .interfaces import LLMService

logger = setup_logging()

_TRANSIENT_CLIENT_CODES = {408, 429}
_MIN_REQUEST_TIMEOUT_MS = 1


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, CompletionError) and error.retryable


class _stop_at_deadline(stop_base):
    """Stops retrying once the invocation budget is spent."""

    def __init__(self, deadline: Deadline):
        self._deadline = deadline

    def __call__(self, retry_state: RetryCallState) -> bool:
        return self._deadline.expired


class _wait_within_deadline(wait_base):
    """Caps the backoff at the time left in the budget."""

    def __init__(self, wait: wait_base, deadline: Deadline):
        self._wait = wait
        self._deadline = deadline

    def __call__(self, retry_state: RetryCallState) -> float:
        return min(self._wait(retry_state), self._deadline.remaining())


class GeminiLLMService(LLMService):
    """
    LLM service implementation using Google Gemini.

    Network errors, timeouts, rate limiting and 5xx responses are retried with
    exponential backoff, bounded by an attempt count and by the caller's
    deadline: every request carries a timeout equal to the time left, and no
    backoff sleeps past it. Other 4xx responses (bad credentials, permission,
    invalid request) fail immediately as permanent errors.
    """

    def __init__(
        self,
        client: genai.Client,
        model_name: str,
        max_attempts: int = 3,
        response_schema: type[BaseModel] | None = None,
        wait: wait_base | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._client = client
        self._model_name = model_name
        self._max_attempts = max_attempts
        self._response_schema = response_schema
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, max=10)
        self._sleep = sleep

    @property
    def model_name(self) -> str:
        return self._model_name

    def complete(self, prompt: str, deadline: Deadline) -> Completion:
        """
        Runs the scoring prompt through Gemini.

        Args:
            prompt: The composed scoring prompt.
            deadline: The scoring invocation's budget.

        Returns:
            Completion with the JSON response text and token usage.

        Raises:
            CompletionError: If the call keeps failing or fails permanently.
            StageTimeoutError: If the budget is spent before a request can start.
        """
        retrying = Retrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._max_attempts) | _stop_at_deadline(deadline),
            wait=_wait_within_deadline(self._wait, deadline),
            sleep=self._sleep,
            reraise=True,
        )
        return retrying(self._generate, prompt, deadline)

    def _generate(self, prompt: str, deadline: Deadline) -> Completion:
        deadline.ensure_time_left()
        timeout_ms = max(_MIN_REQUEST_TIMEOUT_MS, round(deadline.remaining() * 1000))

        config = {
            "response_mime_type": "application/json",
            "http_options": {"timeout": timeout_ms},
        }
        if self._response_schema is not None:
            config["response_schema"] = self._response_schema

        try:
            response = self._client.models.generate_content(
                model=self._model_name,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            retryable = e.code in _TRANSIENT_CLIENT_CODES or e.code >= 500
            logger.exception(
                "Gemini API call failed",
                extra={"status_code": e.code, "retryable": retryable},
            )
            raise CompletionError(
                f"Gemini request failed with status {e.code}",
                cause=e,
                retryable=retryable,
            ) from e
        except Exception as e:
            logger.exception("Gemini API call failed")
            raise CompletionError(f"Gemini request failed: {e}", cause=e) from e

        if not response.text:
            logger.warning("Gemini returned empty response")
            raise CompletionError("Gemini returned empty response")

        usage = response.usage_metadata
        logger.info(
            "LLM completion received",
            extra={"model": self._model_name, "remaining_seconds": round(deadline.remaining(), 1)},
        )
        return Completion(
            text=response.text,
            model_id=response.model_version or self._model_name,
            input_tokens=usage.prompt_token_count if usage else None,
            output_tokens=usage.candidates_token_count if usage else None,
        )
