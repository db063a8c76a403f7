"""Messaging: Redis pub/sub fan-in for notification delivery."""

from workhub.infrastructure.messaging.redis_pubsub import (
    RedisNotificationPublisher,
    run_notification_broadcast,
)

__all__ = ["RedisNotificationPublisher", "run_notification_broadcast"]
