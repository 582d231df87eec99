# activity_sessions/core/kafka_producer.py

import json
import logging
from typing import Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from activity_sessions.core.config import settings

logger = logging.getLogger(__name__)


def create_kafka_producer() -> Optional[KafkaProducer]:
    """
    Build a producer for the notifications topic.

    Returns None when no bootstrap servers are configured or the broker is
    unreachable; outbox events then stay in the database inbox only.
    """
    if not settings.KAFKA_BOOTSTRAP_SERVERS:
        return None
    try:
        return KafkaProducer(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
            request_timeout_ms=5000,
        )
    except KafkaError as e:
        logger.warning(f"Kafka unavailable, notifications will not be published: {e}")
        return None


def get_kafka_producer():
    """
    FastAPI dependency to create and yield a Kafka producer.
    Ensures the producer is properly closed after the request.
    """
    producer = create_kafka_producer()
    try:
        yield producer
    finally:
        if producer is not None:
            producer.flush()  # Ensure all buffered messages are sent
            producer.close()
