# app/api/v1/schemas/itr.py
"""Request schemas for ITR endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from app.domain.services.itr_service import Deductions


class DeductionsSchema(BaseModel):
    section_80c: Decimal = Field(default=Decimal("0"), ge=0, description="PPF, ELSS, LIC, etc. (max 1.5L)")
    section_80d: Decimal = Field(default=Decimal("0"), ge=0, description="Medical insurance")
    section_80g: Decimal = Field(default=Decimal("0"), ge=0, description="Donations")
    other_deductions: Decimal = Field(default=Decimal("0"), ge=0)

    def to_deductions(self) -> Deductions:
        return Deductions.from_dict(self.model_dump())


class TaxRequest(BaseModel):
    taxable_income: Decimal
    regime: str = Field(default="new", pattern="^(old|new)$")


class CompareRequest(BaseModel):
    gross_income: Decimal
    deductions: DeductionsSchema = Field(default_factory=DeductionsSchema)


class PresumptiveRequest(BaseModel):
    gross_receipts: Decimal
    profession: str


class AdvanceTaxRequest(BaseModel):
    total_liability: Decimal
    financial_year: str = Field(description="e.g. 2024-2025")
    paid: Decimal = Decimal("0")
    as_of: date | None = None


class ComputeRequest(BaseModel):
    regime: str = Field(default="new", pattern="^(old|new)$")
    use_presumptive: bool = False
    deductions: DeductionsSchema = Field(default_factory=DeductionsSchema)
    advance_tax_paid: Decimal = Field(default=Decimal("0"), ge=0)
    self_assessment_tax: Decimal = Field(default=Decimal("0"), ge=0)
