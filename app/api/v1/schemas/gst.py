# app/api/v1/schemas/gst.py
"""Request schemas for GST computation endpoints."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from app.domain.models.billing import LineItem


class LineItemSchema(BaseModel):
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal = Decimal("0")
    tax_rate: Decimal = Field(default=Decimal("0"), description="GST rate percent, e.g. 18")
    hsn_sac_code: str | None = Field(default=None, max_length=8)
    description: str = ""

    def to_line_item(self) -> LineItem:
        return LineItem.create(
            quantity=self.quantity,
            unit_price=self.unit_price,
            discount_percent=self.discount_percent,
            tax_rate_percent=self.tax_rate,
            hsn_sac_code=self.hsn_sac_code,
            description=self.description,
        )


class LineTaxRequest(BaseModel):
    item: LineItemSchema
    is_interstate: bool = False


class DocumentTaxRequest(BaseModel):
    """
    Either pass ``is_interstate`` directly or both GSTINs and let the
    state codes decide.
    """

    items: list[LineItemSchema] = Field(min_length=1)
    is_interstate: bool | None = None
    business_gstin: str | None = None
    customer_gstin: str | None = None
    shipping_charges: Decimal = Decimal("0")
    invoice_discount: Decimal = Decimal("0")
