# app/api/v1/routes/ledger.py
"""
Books endpoints: party ledger, day book, outstanding balances, P&L and
bill-wise profit.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date

from fastapi import APIRouter, Depends, Query

from app.api.v1.deps import get_current_user_id, get_gateway
from app.api.v1.envelope import ok
from app.domain.models.ledger import DateRange, PartyType
from app.domain.services import ledger_service, reports
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("api.v1.ledger")

router = APIRouter(tags=["Books"])


def date_range(
    start: date = Query(..., description="YYYY-MM-DD, inclusive"),
    end: date = Query(..., description="YYYY-MM-DD, inclusive"),
) -> DateRange:
    return DateRange(start, end)


@router.get("/ledger/party/{party_type}/{party_id}", response_model=dict)
async def party_ledger(
    party_type: PartyType,
    party_id: str,
    window: DateRange = Depends(date_range),
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    entries = await ledger_service.build_ledger(gateway, user_id, party_id, party_type, window)
    closing = entries[-1].running_balance if entries else 0
    return ok(data={
        "party_id": party_id,
        "party_type": party_type.value,
        "entries": [e.to_dict() for e in entries],
        "closing_balance": closing,
    })


@router.get("/ledger/day-book", response_model=dict)
async def day_book(
    window: DateRange = Depends(date_range),
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    entries = await ledger_service.build_day_book(gateway, user_id, window)
    return ok(data={
        "entries": [e.to_dict() for e in entries],
        "totals": ledger_service.day_book_totals(entries),
    })


@router.get("/ledger/outstanding/{party_type}", response_model=dict)
async def outstanding(
    party_type: PartyType,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    rows = await ledger_service.party_outstanding(gateway, user_id, party_type)
    return ok(data=rows)


@router.get("/reports/profit-loss", response_model=dict)
async def profit_loss(
    window: DateRange = Depends(date_range),
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    result = await reports.profit_and_loss(gateway, user_id, window)
    return ok(data=asdict(result))


@router.get("/reports/bill-wise-profit", response_model=dict)
async def bill_wise_profit(
    window: DateRange = Depends(date_range),
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    rows = await reports.bill_wise_profit(gateway, user_id, window)
    return ok(data=rows)
