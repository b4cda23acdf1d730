import logging
from typing import Optional

from django.conf import settings
from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

KEY = "tg:update:v1:{update_id}"


class UpdateDeduplicator:
    """Short-lived seen-set of Telegram update ids, so redelivered webhooks are acknowledged once."""

    def __init__(self, r: Optional[Redis] = None, ttl: Optional[int] = None):
        self.r = r or Redis.from_url(settings.REDIS_URL)
        self.ttl = ttl or settings.TELEGRAM_DEDUP_TTL

    def seen(self, update_id: Optional[int]) -> bool:
        """Mark `update_id` as processed; True if it had already been marked."""
        if update_id is None:
            return False
        try:
            first = self.r.set(KEY.format(update_id=update_id), 1, nx=True, ex=self.ttl)
        except RedisError as exc:
            # Fail open: processing twice is safer than dropping an update
            logger.warning(f"[dedup] Redis unavailable, processing update {update_id}: {exc}")
            return False
        return not first

    def forget(self, update_id: Optional[int]) -> None:
        """Drop the mark so a redelivery of a failed update is processed again."""
        if update_id is None:
            return
        try:
            self.r.delete(KEY.format(update_id=update_id))
        except RedisError as exc:
            logger.error(f"[dedup] Could not release update {update_id}: {exc}")
