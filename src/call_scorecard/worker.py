"""Worker that consumes storage notifications and invokes one stage."""

from typing import Any

from call_scorecard.config import RabbitMQConfig
from call_scorecard.domain import ROUTES, PrefixRouter, parse_storage_events
from call_scorecard.exceptions import InvalidEventError, PipelineError
from call_scorecard.handlers import ScoringHandler, TranscriptionHandler
from call_scorecard.infrastructure.interfaces import MessageBroker
from call_scorecard.logging import setup_logging

logger = setup_logging()


class Worker:
    """
    Consumes notifications from the stage queue and invokes the stage handler.

    Retryable failures are requeued and bounded by the queue's delivery
    limit; permanent failures are dead-lettered on the first attempt.
    """

    def __init__(
        self,
        broker: MessageBroker,
        handler: TranscriptionHandler | ScoringHandler,
        config: RabbitMQConfig,
        router: PrefixRouter | None = None,
    ):
        self._broker = broker
        self._handler = handler
        self._config = config
        self._router = router if router is not None else PrefixRouter(list(ROUTES.values()))

    def start(self) -> None:
        """Starts consuming messages from the queue."""
        logger.info(
            "Worker initialized, starting message consumption",
            extra={"stage": self._handler.route.stage},
        )
        self._broker.consume(self._on_message)

    def _on_message(
        self, body: bytes, delivery_tag: int, headers: dict[str, Any] | None
    ) -> None:
        """Callback for each received message."""
        delivery_count = headers.get("x-delivery-count", 0) + 1 if headers else 1
        stage = self._handler.route.stage

        logger.info(
            "Message received",
            extra={
                "stage": stage,
                "attempt": delivery_count,
                "max_attempts": self._config.queue_config.max_delivery_count,
            },
        )

        try:
            events = parse_storage_events(body)
        except InvalidEventError:
            logger.exception("Invalid notification format", extra={"stage": stage})
            self._broker.dead_letter(delivery_tag)
            return

        key = None
        try:
            for event in events:
                key = event.key
                routed_to = [route.stage for route in self._router.match(event.key)]
                if stage not in routed_to:
                    logger.info(
                        "Ignoring key outside stage prefix",
                        extra={"stage": stage, "key": event.key, "routed_to": routed_to},
                    )
                    continue

                result = self._handler.process(event)
                logger.info(
                    "Message processed successfully",
                    extra={
                        "stage": stage,
                        "key": result.source_key,
                        "output_key": result.output_key,
                    },
                )

            self._broker.acknowledge(delivery_tag)

        except PipelineError as e:
            logger.exception(
                "Message processing failed",
                extra={
                    "stage": stage,
                    "key": key,
                    "attempt": delivery_count,
                    "error_type": type(e).__name__,
                    "retryable": e.retryable,
                },
            )
            if e.retryable:
                self._broker.reject(delivery_tag)
            else:
                self._broker.dead_letter(delivery_tag)

        except Exception:
            logger.exception(
                "Message processing failed",
                extra={"stage": stage, "key": key, "attempt": delivery_count},
            )
            self._broker.reject(delivery_tag)
