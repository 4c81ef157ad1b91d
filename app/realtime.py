import json
import uuid

import structlog

from app.config import settings
from app.redis_client import redis_client

log = structlog.get_logger(__name__)

def channel(topic: str) -> str:
    return f"{settings.realtime_channel_prefix}:{topic}"

def project_topic(project_id: uuid.UUID) -> str:
    return f"project:{project_id}"

# fire-and-forget fan-out to connected clients; fail-open if redis is down
def publish(topic: str, payload: dict) -> None:
    if not settings.realtime_enabled:
        return
    try:
        redis_client.publish(channel(topic), json.dumps(payload, default=str))
    except Exception as e:
        log.warning("realtime_publish_failed", topic=topic, error=f"{e.__class__.__name__}: {e}")
