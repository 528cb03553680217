"""RabbitMQ delivery of MinIO bucket notifications."""

from pika.channel import Channel

from call_scorecard.config import RabbitMQConfig
from call_scorecard.logging import setup_logging

from .interfaces import MessageBroker
from .interfaces.message_broker import NotificationCallback

logger = setup_logging()


class RabbitMQBroker(MessageBroker):
    """
    Message broker implementation using RabbitMQ.

    MinIO publishes each bucket notification to the events exchange with the
    routing key of its AMQP target; the stage queue is bound to the one key
    carrying its prefix's events. One message is in flight per worker, so a
    slow transcription never holds back a second notification.
    """

    def __init__(self, channel: Channel, config: RabbitMQConfig):
        self._channel = channel
        self._exchange_name = config.exchange_name
        self._queue = config.queue_config

    def acknowledge(self, delivery_tag: int) -> None:
        self._channel.basic_ack(delivery_tag=delivery_tag)

    def reject(self, delivery_tag: int) -> None:
        """Returns the message to the queue; the quorum queue counts the redelivery."""
        self._channel.basic_nack(delivery_tag=delivery_tag, requeue=True)

    def dead_letter(self, delivery_tag: int) -> None:
        """Drops the message without requeue, routing it to the stage DLQ."""
        self._channel.basic_nack(delivery_tag=delivery_tag, requeue=False)

    def consume(self, callback: NotificationCallback) -> None:
        """
        Blocks consuming the stage queue.

        Args:
            callback: Called per message with (body, delivery_tag, headers).
                Headers carry ``x-delivery-count`` on redeliveries.
        """

        def on_message(ch, method, properties, body):
            callback(body, method.delivery_tag, properties.headers if properties else None)

        self._channel.basic_qos(prefetch_count=1)
        self._channel.basic_consume(queue=self._queue.name, on_message_callback=on_message)
        logger.info(
            "Consuming stage queue",
            extra={"queue": self._queue.name, "routing_key": self._queue.routing_key},
        )
        self._channel.start_consuming()

    def setup(self) -> None:
        """Declares the stage queue, its binding and its dead-letter route."""
        self._declare_dead_letter_route()

        self._channel.exchange_declare(
            exchange=self._exchange_name, exchange_type="topic", durable=True
        )
        # delivery limit bounds redelivery of retryable failures
        self._channel.queue_declare(
            queue=self._queue.name,
            durable=True,
            arguments={
                "x-queue-type": self._queue.queue_type,
                "x-delivery-limit": self._queue.max_delivery_count,
                "x-dead-letter-exchange": self._queue.dlq_exchange_name,
                "x-dead-letter-routing-key": self._queue.dlq_routing_key,
            },
        )
        self._channel.queue_bind(
            queue=self._queue.name,
            exchange=self._exchange_name,
            routing_key=self._queue.routing_key,
        )

        logger.info(
            "Stage queue ready",
            extra={
                "queue": self._queue.name,
                "exchange": self._exchange_name,
                "dlq": self._queue.dlq_name,
            },
        )

    def _declare_dead_letter_route(self) -> None:
        self._channel.exchange_declare(
            exchange=self._queue.dlq_exchange_name, exchange_type="direct", durable=True
        )
        self._channel.queue_declare(queue=self._queue.dlq_name, durable=True)
        self._channel.queue_bind(
            queue=self._queue.dlq_name,
            exchange=self._queue.dlq_exchange_name,
            routing_key=self._queue.dlq_routing_key,
        )
