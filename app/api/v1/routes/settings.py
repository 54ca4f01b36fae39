# app/api/v1/routes/settings.py
"""Business settings and industry feature flags."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.api.v1.deps import get_business_cache, get_current_user_id, get_gateway
from app.api.v1.envelope import ok
from app.api.v1.schemas.settings import BusinessSettingsUpdate
from app.domain.services.business_context import load_business_context, update_business_settings
from app.domain.services.industry_config import (
    available_industries,
    get_industry_features,
    industry_display_name,
)
from app.infrastructure.cache.business_cache import BusinessContextCache
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("api.v1.settings")

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/industries", response_model=dict)
async def list_industries():
    return ok(data=available_industries())


@router.get("/industry/{industry}", response_model=dict)
async def industry_features(industry: str):
    """Feature flags for an industry; unknown industries get ``general``."""
    return ok(data={
        "industry": industry,
        "display_name": industry_display_name(industry),
        "features": get_industry_features(industry).to_dict(),
    })


@router.get("/context", response_model=dict)
async def business_context(
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    cache: BusinessContextCache = Depends(get_business_cache),
):
    context = await load_business_context(gateway, cache, user_id)
    return ok(data={**context.to_dict(), "features": context.features.to_dict()})


@router.put("", response_model=dict)
async def update_settings(
    body: BusinessSettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    cache: BusinessContextCache = Depends(get_business_cache),
):
    context = await update_business_settings(gateway, cache, user_id, body.model_dump(exclude_none=True))
    return ok(data=context.to_dict(), message="Settings updated")
