"""
Call Scorecard Deploy.

Provisions the shared bucket under the store's admin credentials: creates
the bucket, uploads the local ``config`` directory under the ``config/``
prefix, registers one prefix-filtered notification per stage and renders
each stage's object policy. Stage workers never perform these steps.
"""

import io
import json
import mimetypes
from pathlib import Path

from minio import Minio

from call_scorecard.config import CONFIG_PREFIX, DeployConfig, load_deploy_config
from call_scorecard.domain import IDENTITIES, ROUTES
from call_scorecard.infrastructure import MinioStorageClient
from call_scorecard.infrastructure.interfaces import StorageClient
from call_scorecard.logging import setup_logging

logger = setup_logging()


def upload_config_dir(storage: StorageClient, bucket_name: str, config_dir: Path) -> list[str]:
    """
    Uploads every file under ``config_dir`` to the ``config/`` prefix.

    Relative paths are kept, so ``config/scoring-template.json`` on disk
    becomes the ``config/scoring-template.json`` object.

    Returns:
        The uploaded object keys, in path order.

    Raises:
        FileNotFoundError: If ``config_dir`` is not a directory.
        StorageUploadError: If an upload fails.
    """
    if not config_dir.is_dir():
        raise FileNotFoundError(f"config directory not found: {config_dir}")

    uploaded = []
    for path in sorted(p for p in config_dir.rglob("*") if p.is_file()):
        object_name = CONFIG_PREFIX + path.relative_to(config_dir).as_posix()
        data = path.read_bytes()
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        storage.upload(bucket_name, object_name, io.BytesIO(data), len(data), content_type)
        uploaded.append(object_name)

    logger.info(
        "Config deployed",
        extra={"bucket_name": bucket_name, "objects": uploaded},
    )
    return uploaded


def register_stage_notifications(
    storage: MinioStorageClient, bucket_name: str, notify_arns: dict[str, str]
) -> None:
    """Points each stage's input prefix at the AMQP target feeding its queue."""
    for stage_name, queue_arn in notify_arns.items():
        route = ROUTES[stage_name]
        storage.register_notification(
            bucket_name=bucket_name,
            config_id=f"{route.stage}-object-created",
            queue_arn=queue_arn,
            prefix=route.input_prefix,
        )
        logger.info(
            "Stage notification registered",
            extra={"stage": route.stage, "prefix": route.input_prefix},
        )


def write_stage_policies(bucket_name: str, policy_dir: Path | None) -> dict[str, dict]:
    """
    Renders each stage identity's object policy.

    Documents are written as ``<identity>.json`` when ``policy_dir`` is set,
    ready for ``mc admin policy create``.
    """
    policies = {
        identity.name: identity.to_policy_document(bucket_name)
        for identity in IDENTITIES.values()
    }
    if policy_dir is not None:
        policy_dir.mkdir(parents=True, exist_ok=True)
        for name, document in policies.items():
            (policy_dir / f"{name}.json").write_text(json.dumps(document, indent=2))
    for name, document in policies.items():
        logger.info("Stage policy rendered", extra={"identity": name, "policy": document})
    return policies


def provision(storage: MinioStorageClient, config: DeployConfig) -> None:
    bucket_name = config.minio.bucket_name
    storage.ensure_bucket_exists(bucket_name)
    upload_config_dir(storage, bucket_name, Path(config.config_dir))
    register_stage_notifications(storage, bucket_name, config.notify_arns)
    write_stage_policies(
        bucket_name, Path(config.policy_dir) if config.policy_dir else None
    )


def main():
    """Loads deploy settings and provisions the bucket."""
    config = load_deploy_config()
    minio_client = Minio(
        endpoint=config.minio.endpoint,
        access_key=config.minio.user,
        secret_key=config.minio.password,
        secure=config.minio.secure,
    )
    logger.info("Provisioning bucket", extra={"bucket_name": config.minio.bucket_name})
    provision(MinioStorageClient(minio_client), config)


if __name__ == "__main__":
    main()
