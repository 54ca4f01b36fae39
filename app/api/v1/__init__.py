# app/api/v1/__init__.py
"""
Versioned API v1: aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from app.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from app.api.v1.routes.ewaybill import router as ewaybill_router
from app.api.v1.routes.gst import router as gst_router
from app.api.v1.routes.itr import router as itr_router
from app.api.v1.routes.ledger import router as ledger_router
from app.api.v1.routes.payments import router as payments_router
from app.api.v1.routes.rentals import router as rentals_router
from app.api.v1.routes.settings import router as settings_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(gst_router)
v1_router.include_router(ewaybill_router)
v1_router.include_router(itr_router)
v1_router.include_router(ledger_router)
v1_router.include_router(payments_router)
v1_router.include_router(rentals_router)
v1_router.include_router(settings_router)

__all__ = ["v1_router"]
