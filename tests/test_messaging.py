"""Tests for the RabbitMQ broker and Redis cache adapters."""

from unittest.mock import Mock

import pytest
import redis

from call_scorecard.config import QUEUE_CONFIGS, RabbitMQConfig
from call_scorecard.exceptions import CacheServiceError
from call_scorecard.infrastructure import RabbitMQBroker, RedisCacheService


@pytest.fixture
def channel():
    return Mock()


@pytest.fixture
def broker(channel) -> RabbitMQBroker:
    config = RabbitMQConfig(
        host="localhost",
        user="guest",
        password="guest",
        queue_config=QUEUE_CONFIGS["scoring"],
    )
    return RabbitMQBroker(channel, config)


def test_setup_declares_bounded_quorum_queue(broker, channel):
    broker.setup()

    channel.queue_declare.assert_any_call(
        queue="scoring_queue",
        durable=True,
        arguments={
            "x-queue-type": "quorum",
            "x-delivery-limit": 3,
            "x-dead-letter-exchange": "dead_letter_exchange",
            "x-dead-letter-routing-key": "scoring.failed",
        },
    )
    channel.queue_bind.assert_any_call(
        queue="scoring_queue",
        exchange="bucket-events",
        routing_key="storage.transcription.created",
    )
    channel.queue_bind.assert_any_call(
        queue="dlq_scoring",
        exchange="dead_letter_exchange",
        routing_key="scoring.failed",
    )


def test_settlement(broker, channel):
    broker.acknowledge(1)
    broker.reject(2)
    broker.dead_letter(3)

    channel.basic_ack.assert_called_once_with(delivery_tag=1)
    channel.basic_nack.assert_any_call(delivery_tag=2, requeue=True)
    channel.basic_nack.assert_any_call(delivery_tag=3, requeue=False)


def test_consume_passes_delivery_headers(broker, channel):
    received = []
    broker.consume(lambda body, tag, headers: received.append((body, tag, headers)))

    on_message = channel.basic_consume.call_args.kwargs["on_message_callback"]
    on_message(channel, Mock(delivery_tag=5), Mock(headers={"x-delivery-count": 2}), b"{}")

    assert received == [(b"{}", 5, {"x-delivery-count": 2})]
    channel.basic_qos.assert_called_once_with(prefetch_count=1)
    channel.start_consuming.assert_called_once()


def test_cache_sets_with_ttl():
    client = Mock()
    cache = RedisCacheService(client, ttl_seconds=600)

    cache.set("completion:abc", "{}")

    client.set.assert_called_once_with("completion:abc", "{}", ex=600)


def test_cache_failures_are_retryable():
    client = Mock()
    client.get.side_effect = redis.ConnectionError("refused")
    cache = RedisCacheService(client, ttl_seconds=600)

    with pytest.raises(CacheServiceError) as exc_info:
        cache.get("completion:abc")

    assert exc_info.value.retryable is True
    assert exc_info.value.operation == "get"
