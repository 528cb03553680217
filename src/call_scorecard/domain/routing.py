"""Prefix routing and deterministic output-key derivation."""

import posixpath

from pydantic import BaseModel, field_validator

from call_scorecard.exceptions import InvalidEventError


class Route(BaseModel, frozen=True):
    """Binds a stage to the key prefix it consumes and the prefix it produces."""

    stage: str
    input_prefix: str
    output_prefix: str
    output_extension: str
    content_type: str

    @field_validator("input_prefix", "output_prefix")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        if not value.endswith("/"):
            raise ValueError("prefixes must end with '/'")
        return value

    def matches(self, key: str) -> bool:
        return key.startswith(self.input_prefix) and len(key) > len(self.input_prefix)

    def derive_output_key(self, key: str) -> str:
        """
        Maps an input key onto this route's output prefix.

        The sub-path below the prefix is preserved and only the final
        extension is swapped, so ``voices/2025/call.42.wav`` becomes
        ``transcription/2025/call.42.txt``.

        Raises:
            InvalidEventError: If the key does not belong to this route.
        """
        if not self.matches(key):
            raise InvalidEventError(
                f"key '{key}' is not under '{self.input_prefix}' for stage '{self.stage}'"
            )
        relative = key[len(self.input_prefix) :]
        directory, name = posixpath.split(relative)
        stem, _ = posixpath.splitext(name)
        if not stem:
            raise InvalidEventError(f"key '{key}' has no object name")
        return self.output_prefix + posixpath.join(directory, stem + self.output_extension)


TRANSCRIPTION_ROUTE = Route(
    stage="transcription",
    input_prefix="voices/",
    output_prefix="transcription/",
    output_extension=".txt",
    content_type="text/plain",
)

SCORING_ROUTE = Route(
    stage="scoring",
    input_prefix="transcription/",
    output_prefix="scoring/",
    output_extension=".json",
    content_type="application/json",
)

ROUTES: dict[str, Route] = {
    TRANSCRIPTION_ROUTE.stage: TRANSCRIPTION_ROUTE,
    SCORING_ROUTE.stage: SCORING_ROUTE,
}


class PrefixRouter:
    """Maps an object key to the stages that treat its creation as a trigger."""

    def __init__(self, routes: list[Route]):
        self._routes = list(routes)

    def match(self, key: str) -> list[Route]:
        return [route for route in self._routes if route.matches(key)]
