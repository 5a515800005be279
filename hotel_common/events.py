"""Best-effort publishing of booking and payment events to RabbitMQ."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict

import pika
from pika.exceptions import AMQPError

from .config import get_settings

logger = logging.getLogger(__name__)


def publish_event(event: str, payload: Dict[str, Any]) -> bool:
    """Send ``event`` to the durable queue; returns False when skipped or on broker errors."""
    settings = get_settings()
    if not settings.event_publishing_enabled:
        return False

    message = {"event": event, **payload}
    try:
        connection = pika.BlockingConnection(pika.ConnectionParameters(host=settings.rabbitmq_host))
        try:
            channel = connection.channel()
            channel.queue_declare(queue=settings.rabbitmq_queue, durable=True)
            channel.basic_publish(
                exchange="",
                routing_key=settings.rabbitmq_queue,
                body=json.dumps(message, default=str),
                properties=pika.BasicProperties(delivery_mode=2),
            )
        finally:
            connection.close()
    except AMQPError as exc:
        logger.error("[RabbitMQ] Could not publish %s: %s", event, exc)
        return False
    logger.info("[RabbitMQ] Published %s", event)
    return True
