"""Static per-stage execution identities."""

from pydantic import BaseModel

from call_scorecard.exceptions import PermissionDeniedError

ASSEMBLYAI = "assemblyai"
GEMINI = "gemini"


class ExecutionIdentity(BaseModel, frozen=True):
    """
    Least-privilege grants for one stage.

    An identity holds store read access on the prefixes the stage consumes,
    store write access on the prefix it produces into, and call access to
    the one external service it uses. Adding a new external call to a stage
    means adding the service here explicitly.
    """

    name: str
    read_prefixes: tuple[str, ...]
    write_prefixes: tuple[str, ...]
    services: frozenset[str]

    def can_read(self, key: str) -> bool:
        return any(key.startswith(prefix) for prefix in self.read_prefixes)

    def can_write(self, key: str) -> bool:
        return any(key.startswith(prefix) for prefix in self.write_prefixes)

    def require_read(self, key: str) -> None:
        if not self.can_read(key):
            raise PermissionDeniedError(self.name, "read", key)

    def require_write(self, key: str) -> None:
        if not self.can_write(key):
            raise PermissionDeniedError(self.name, "write", key)

    def require_service(self, service: str) -> None:
        if service not in self.services:
            raise PermissionDeniedError(self.name, "call", service)

    def to_policy_document(self, bucket_name: str) -> dict:
        """
        Renders the store grants as an S3 / MinIO IAM policy document.

        External service grants are not expressible in a bucket policy and
        are enforced at stage composition instead.
        """
        statements = []
        if self.read_prefixes:
            statements.append(
                {
                    "Sid": f"{self.name}-read",
                    "Effect": "Allow",
                    "Action": ["s3:GetObject"],
                    "Resource": [
                        f"arn:aws:s3:::{bucket_name}/{prefix}*"
                        for prefix in self.read_prefixes
                    ],
                }
            )
        if self.write_prefixes:
            statements.append(
                {
                    "Sid": f"{self.name}-write",
                    "Effect": "Allow",
                    "Action": ["s3:PutObject"],
                    "Resource": [
                        f"arn:aws:s3:::{bucket_name}/{prefix}*"
                        for prefix in self.write_prefixes
                    ],
                }
            )
        return {"Version": "2012-10-17", "Statement": statements}


TRANSCRIPTION_IDENTITY = ExecutionIdentity(
    name="transcription-stage",
    read_prefixes=("voices/",),
    write_prefixes=("transcription/",),
    services=frozenset({ASSEMBLYAI}),
)

SCORING_IDENTITY = ExecutionIdentity(
    name="scoring-stage",
    read_prefixes=("transcription/", "config/"),
    write_prefixes=("scoring/",),
    services=frozenset({GEMINI}),
)

IDENTITIES: dict[str, ExecutionIdentity] = {
    "transcription": TRANSCRIPTION_IDENTITY,
    "scoring": SCORING_IDENTITY,
}
