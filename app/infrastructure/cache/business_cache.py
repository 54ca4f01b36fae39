# app/infrastructure/cache/business_cache.py
"""
Redis cache of per-tenant business context.

The cache is a display hint only: nothing that computes tax, books or
reminders reads it.  Entries expire after BUSINESS_CONTEXT_TTL_SECONDS and
are dropped whenever the business settings change.
"""

import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from app.core.config import settings

logger = logging.getLogger("business_cache")

CACHE_VERSION = 1


class BusinessContextCache:
    def __init__(self, client: redis.Redis, ttl_seconds: int | None = None):
        self._r = client
        self.ttl_seconds = ttl_seconds or settings.BUSINESS_CONTEXT_TTL_SECONDS

    def _key(self, user_id: str) -> str:
        return f"billing:business_context:{user_id}"

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        raw = await self._r.get(self._key(user_id))
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable business context for %s", user_id)
            await self.delete(user_id)
            return None
        if data.get("version") != CACHE_VERSION:
            return None
        return data.get("context")

    async def set(self, user_id: str, context: Dict[str, Any]) -> None:
        await self._r.set(
            self._key(user_id),
            json.dumps({"version": CACHE_VERSION, "context": context}),
            ex=self.ttl_seconds,
        )

    async def delete(self, user_id: str) -> None:
        await self._r.delete(self._key(user_id))
