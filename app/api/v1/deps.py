# app/api/v1/deps.py
"""
FastAPI dependencies for the v1 API layer.

Authentication happens upstream; the gateway in front of this service
forwards the authenticated tenant as ``X-User-Id``.  Every read and write
below is scoped to that id.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Header, HTTPException, status

from app.core.db import AsyncSessionLocal
from app.infrastructure.cache.business_cache import BusinessContextCache
from app.infrastructure.cache.redis_client import get_redis_client
from app.infrastructure.db.gateway import PersistenceGateway, SqlAlchemyGateway
from app.infrastructure.external.email_client import EmailClient

logger = logging.getLogger("api.v1.deps")


async def get_current_user_id(x_user_id: str | None = Header(None)) -> str:
    """The tenant id from ``X-User-Id``; 401 when it is missing."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


@lru_cache
def _gateway() -> SqlAlchemyGateway:
    return SqlAlchemyGateway(AsyncSessionLocal)


def get_gateway() -> PersistenceGateway:
    return _gateway()


def get_email_client() -> EmailClient:
    return EmailClient()


def get_business_cache() -> BusinessContextCache:
    return BusinessContextCache(get_redis_client())
