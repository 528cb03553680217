"""Core business logic for scoring a call transcript."""

import hashlib

from pydantic import ValidationError

from call_scorecard.infrastructure.interfaces import CacheService, LLMService
from call_scorecard.logging import setup_logging

from .deadline import Deadline
from .models import Completion, Scorecard, ScoringTemplate
from .scorecard_parser import PromptBuilder, ScorecardParser

logger = setup_logging()


class CallScorer:
    """Scores transcripts using the LLM, reusing earlier completions when available."""

    def __init__(
        self,
        llm_service: LLMService,
        cache_service: CacheService,
        prompt_builder: PromptBuilder,
        parser: ScorecardParser,
    ):
        self._llm = llm_service
        self._cache = cache_service
        self._prompt_builder = prompt_builder
        self._parser = parser

    def score(
        self,
        transcript: str,
        template: ScoringTemplate,
        source_key: str,
        deadline: Deadline,
    ) -> Scorecard:
        """
        Scores a transcript against the template's criteria.

        Completions are cached by a digest of model name and prompt, and only
        once they parse, so a redelivered notification rewrites a
        byte-identical scorecard while a malformed answer is never reused.

        Args:
            transcript: The transcript text.
            template: The scoring template.
            source_key: The transcript key, recorded on the scorecard.
            deadline: The scoring invocation's budget, handed to the LLM call.

        Returns:
            The parsed Scorecard.

        Raises:
            CompletionError: If the completion API call fails.
            ScoringFormatError: If the completion cannot be parsed.
            StageTimeoutError: If the budget ran out before a completion.
        """
        prompt = self._prompt_builder.build(template, transcript)
        cache_key = self._cache_key(prompt)

        cached = self._cached_completion(cache_key)
        if cached is not None:
            logger.info("Completion retrieved from cache", extra={"key": source_key})
            return self._parser.parse(cached, template, source_key)

        completion = self._llm.complete(prompt, deadline)
        scorecard = self._parser.parse(completion, template, source_key)

        self._cache.set(cache_key, completion.model_dump_json())
        logger.info("Completion cached", extra={"key": source_key})

        return scorecard

    def _cache_key(self, prompt: str) -> str:
        digest = hashlib.sha256(f"{self._llm.model_name}\n{prompt}".encode("utf-8"))
        return "completion:" + digest.hexdigest()

    def _cached_completion(self, cache_key: str) -> Completion | None:
        cached = self._cache.get(cache_key)
        if not cached:
            return None
        try:
            return Completion.model_validate_json(cached)
        except ValidationError:
            logger.warning("Ignoring unreadable cached completion", extra={"cache_key": cache_key})
            return None
