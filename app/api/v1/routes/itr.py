# app/api/v1/routes/itr.py
"""
ITR endpoints: slab tax, regime comparison, presumptive eligibility,
advance tax, and the stored per-FY computation.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from app.api.v1.deps import get_current_user_id, get_gateway
from app.api.v1.envelope import ok
from app.api.v1.schemas.itr import (
    AdvanceTaxRequest,
    CompareRequest,
    ComputeRequest,
    PresumptiveRequest,
    TaxRequest,
)
from app.domain.services import itr_service, itr_workflow
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("api.v1.itr")

router = APIRouter(prefix="/itr", tags=["ITR"])


@router.post("/tax", response_model=dict)
async def slab_tax(body: TaxRequest):
    """Slab tax and cess on a taxable income, before any rebate."""
    result = itr_service.compute_tax(body.taxable_income, body.regime)
    return ok(data=asdict(result))


@router.post("/compare", response_model=dict)
async def compare(body: CompareRequest):
    """
    Old vs new regime on the same gross income.

    Both regimes take the standard deduction; only the old one takes
    Chapter VI-A deductions.
    """
    result = itr_service.compare_regimes(body.gross_income, body.deductions.to_deductions())
    return ok(data=asdict(result))


@router.post("/presumptive", response_model=dict)
async def presumptive(body: PresumptiveRequest):
    eligibility = itr_service.check_presumptive_eligibility(body.gross_receipts, body.profession)
    data = asdict(eligibility)
    if eligibility.eligible:
        data["presumptive_income"] = itr_service.presumptive_income(body.gross_receipts)
    return ok(data=data)


@router.post("/advance-tax", response_model=dict)
async def advance_tax(body: AdvanceTaxRequest):
    schedule = itr_service.advance_tax_schedule(
        body.total_liability, body.financial_year, paid=body.paid, today=body.as_of,
    )
    return ok(data=schedule)


@router.post("/{financial_year}/compute", response_model=dict)
async def compute_for_year(
    financial_year: str,
    body: ComputeRequest,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    """Compute the year's tax from recorded income and expenses and store it."""
    computation, stored = await itr_workflow.compute_and_save(
        gateway,
        user_id,
        financial_year,
        regime=body.regime,
        use_presumptive=body.use_presumptive,
        deductions=body.deductions.to_deductions(),
        advance_tax_paid=body.advance_tax_paid,
        self_assessment_tax=body.self_assessment_tax,
    )

    data = asdict(computation)
    data["id"] = stored.get("id")
    data["summary"] = itr_service.format_itr_summary(computation)
    return ok(data=data)


@router.get("/{financial_year}/summary", response_model=dict)
async def year_summary(
    financial_year: str,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    summary = await itr_workflow.get_itr_summary(gateway, user_id, financial_year)
    return ok(data=summary)
