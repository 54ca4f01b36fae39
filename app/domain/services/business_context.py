# app/domain/services/business_context.py
"""
Per-tenant business context (industry, name, GST switch).

``load_business_context`` always reads ``business_settings`` through the
gateway and then refreshes the cache, so callers never act on a stale
industry.  ``peek`` returns whatever the cache holds and is for display
only.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Optional

from app.core.config import settings
from app.domain.errors import InvalidInputError
from app.domain.services.industry_config import Industry, get_industry_features
from app.domain.services.ledger_service import fetch_rows
from app.infrastructure.cache.business_cache import BusinessContextCache
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("business_context")


@dataclass(frozen=True)
class BusinessContext:
    user_id: str
    industry: Industry = Industry.GENERAL
    business_name: str = ""
    gst_enabled: bool = True

    @classmethod
    def from_settings_row(cls, user_id: str, row: dict[str, Any] | None) -> "BusinessContext":
        row = row or {}
        try:
            industry = Industry(row.get("industry") or Industry.GENERAL)
        except ValueError:
            industry = Industry.GENERAL
        gst_enabled = row.get("gst_enabled")
        return cls(
            user_id=str(user_id),
            industry=industry,
            business_name=row.get("business_name") or settings.DEFAULT_BUSINESS_NAME,
            gst_enabled=True if gst_enabled is None else bool(gst_enabled),
        )

    @property
    def features(self):
        return get_industry_features(self.industry)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["industry"] = self.industry.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BusinessContext":
        return cls.from_settings_row(data["user_id"], data)


async def load_business_context(
    gateway: PersistenceGateway,
    cache: Optional[BusinessContextCache],
    user_id: str,
) -> BusinessContext:
    rows = await fetch_rows(gateway, "business_settings", {"user_id": user_id})
    context = BusinessContext.from_settings_row(user_id, rows[0] if rows else None)
    if cache is not None:
        try:
            await cache.set(user_id, context.to_dict())
        except Exception as exc:
            # settings were read from the database; a cache outage only loses the hint
            logger.warning("Business context cache write failed for %s: %s", user_id, exc)
    return context


async def peek_business_context(cache: BusinessContextCache, user_id: str) -> Optional[BusinessContext]:
    data = await cache.get(user_id)
    return BusinessContext.from_dict(data) if data else None


async def invalidate_business_context(cache: BusinessContextCache, user_id: str) -> None:
    await cache.delete(user_id)
    logger.info("Business context invalidated for %s", user_id)


SETTINGS_FIELDS = ("business_name", "gstin", "phone", "state_code", "industry", "gst_enabled", "invoice_prefix")


async def update_business_settings(
    gateway: PersistenceGateway,
    cache: Optional[BusinessContextCache],
    user_id: str,
    changes: dict[str, Any],
) -> BusinessContext:
    """Upsert the tenant's settings row, then drop the cached context."""
    values = {k: v for k, v in changes.items() if k in SETTINGS_FIELDS}
    if "industry" in values:
        try:
            values["industry"] = Industry(values["industry"]).value
        except ValueError as exc:
            raise InvalidInputError(f"Unknown industry: {values['industry']}") from exc

    rows = await fetch_rows(gateway, "business_settings", {"user_id": user_id})
    if rows:
        stored = await gateway.update("business_settings", {"id": rows[0]["id"], **values})
    else:
        stored = await gateway.insert("business_settings", {"user_id": user_id, **values})

    if cache is not None:
        await invalidate_business_context(cache, user_id)
    return BusinessContext.from_settings_row(user_id, stored)
