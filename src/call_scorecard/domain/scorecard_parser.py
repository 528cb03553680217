"""Turns raw model output into a validated Scorecard."""

import re

from call_scorecard.exceptions import ScoringFormatError

from .models import (
    CRITERIA_PLACEHOLDER,
    TRANSCRIPT_PLACEHOLDER,
    Completion,
    ModelMetadata,
    Scorecard,
    ScorecardResponse,
    ScoringTemplate,
)

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)


class PromptBuilder:
    """Composes the completion prompt from a template and a transcript."""

    def build(self, template: ScoringTemplate, transcript: str) -> str:
        # criteria first, so placeholder-like text inside the transcript survives
        criteria = "\n".join(
            f"- {c.name}: {c.description}" if c.description else f"- {c.name}"
            for c in template.criteria
        )
        body = template.template_body.replace(CRITERIA_PLACEHOLDER, criteria)
        return body.replace(TRANSCRIPT_PLACEHOLDER, transcript)


class ScorecardParser:
    """
    Validates a completion against the template's criteria.

    The answer must match ``ScorecardResponse``. Anything else is rejected so
    that no partial scorecard is ever written.
    """

    def parse(
        self, completion: Completion, template: ScoringTemplate, source_key: str
    ) -> Scorecard:
        """
        Parses a completion into a Scorecard.

        Args:
            completion: The raw model completion.
            template: The template the prompt was built from.
            source_key: The transcript key being scored.

        Returns:
            Scorecard with one score per configured criterion, in template order.

        Raises:
            ScoringFormatError: If the completion does not have the scorecard shape.
        """
        response = self._load_response(completion.text, source_key)

        missing = [n for n in template.criterion_names if n not in response.scores]
        if missing:
            raise ScoringFormatError(
                source_key, f"missing scores for criteria: {', '.join(missing)}"
            )

        scores = {name: response.scores[name] for name in template.criterion_names}
        for name, score in scores.items():
            if isinstance(score, str):
                continue
            if not template.score_range.contains(score):
                raise ScoringFormatError(
                    source_key,
                    f"score for '{name}' outside "
                    f"{template.score_range.min:g}..{template.score_range.max:g}",
                )

        return Scorecard(
            source_transcript_key=source_key,
            scores=scores,
            summary=response.summary,
            model=ModelMetadata(
                model_id=completion.model_id,
                input_tokens=completion.input_tokens,
                output_tokens=completion.output_tokens,
            ),
        )

    def _load_response(self, text: str, source_key: str) -> ScorecardResponse:
        stripped = text.strip()
        fenced = _CODE_FENCE.match(stripped)
        if fenced:
            stripped = fenced.group(1)
        # ValidationError is a ValueError, as is an integer literal past the conversion limit
        try:
            return ScorecardResponse.model_validate_json(stripped)
        except ValueError as e:
            raise ScoringFormatError(source_key, f"unexpected response shape: {e}", cause=e) from e
