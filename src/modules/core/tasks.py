"""Async tasks for the core module."""

from __future__ import annotations

import json
from typing import Any, Dict

import redis
import structlog
from celery import shared_task
from django.conf import settings

logger = structlog.get_logger(__name__)

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.Redis.from_url(settings.REDIS_URL)
    return _redis_client


@shared_task(name="core.relay_realtime_event", ignore_result=True)
def relay_realtime_event(event_name: str, payload: Dict[str, Any]) -> int:
    """Publish a realtime message on the Redis channel read by the socket gateway.

    No retries: realtime delivery is at-most-once.
    """
    message = json.dumps({"event": event_name, "payload": payload}, ensure_ascii=False)
    receivers = get_redis_client().publish(settings.REALTIME_CHANNEL, message)
    logger.info(
        "realtime.relayed",
        event_name=event_name,
        channel=settings.REALTIME_CHANNEL,
        receivers=receivers,
    )
    return receivers
