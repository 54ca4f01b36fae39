import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID

from app.infrastructure.db.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _id_column():
    return Column(UUID(as_uuid=False), primary_key=True, default=_uuid)


def _user_column():
    return Column(UUID(as_uuid=False), nullable=False, index=True)


def _money(default: str = "0"):
    return Column(Numeric(14, 2), nullable=False, default=default, server_default=default)


class BusinessSettings(Base):
    __tablename__ = "business_settings"
    id = _id_column()
    user_id = Column(UUID(as_uuid=False), nullable=False, unique=True, index=True)
    business_name = Column(String(200))
    phone = Column(String(20))
    gstin = Column(String(15))
    state_code = Column(String(2))
    industry = Column(String(30), default="general")
    gst_enabled = Column(Boolean, default=True)
    invoice_prefix = Column(String(20), default="INV")
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Customer(Base):
    __tablename__ = "customers"
    id = _id_column()
    user_id = _user_column()
    name = Column(String(200), nullable=False)
    gstin = Column(String(15))
    state = Column(String(60))
    email = Column(String(200))
    phone = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Supplier(Base):
    __tablename__ = "suppliers"
    id = _id_column()
    user_id = _user_column()
    name = Column(String(200), nullable=False)
    gstin = Column(String(15))
    state = Column(String(60))
    email = Column(String(200))
    phone = Column(String(20))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Invoice(Base):
    __tablename__ = "invoices"
    id = _id_column()
    user_id = _user_column()
    customer_id = Column(UUID(as_uuid=False), ForeignKey("customers.id"), index=True)
    invoice_number = Column(String(40), nullable=False)
    invoice_date = Column(Date, nullable=False, index=True)
    due_date = Column(Date)
    document_type = Column(String(20), nullable=False, default="invoice")
    status = Column(String(20), nullable=False, default="draft")
    place_of_supply = Column(String(60))
    is_interstate = Column(Boolean, default=False)
    subtotal = _money()
    discount_amount = _money()
    shipping_charges = _money()
    tax_amount = _money()
    cgst_amount = _money()
    sgst_amount = _money()
    igst_amount = _money()
    total_amount = _money()
    paid_amount = _money()
    balance_due = _money()

    # e-way bill, stored on the invoice it covers
    eway_bill_number = Column(String(20), unique=True)
    eway_bill_status = Column(String(20))
    eway_bill_date = Column(Date)
    eway_valid_till = Column(Date)
    transport_mode = Column(String(10))
    vehicle_number = Column(String(20))
    transporter_name = Column(String(200))
    transporter_id = Column(String(20))
    distance_km = Column(Numeric(10, 2))
    consignment_value = Column(Numeric(14, 2))

    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    __table_args__ = (UniqueConstraint("user_id", "invoice_number", name="uq_invoices_user_number"),)


class InvoiceItem(Base):
    __tablename__ = "invoice_items"
    id = _id_column()
    invoice_id = Column(UUID(as_uuid=False), ForeignKey("invoices.id", ondelete="CASCADE"), index=True)
    description = Column(String(300))
    hsn_sac_code = Column(String(8))
    quantity = Column(Numeric(12, 3), nullable=False, default=1)
    unit_price = _money()
    purchase_price = Column(Numeric(14, 2))
    discount_percent = Column(Numeric(5, 2), default=0)
    tax_rate = Column(Numeric(5, 2), default=0)
    amount = _money()


class Payment(Base):
    __tablename__ = "payments"
    id = _id_column()
    user_id = _user_column()
    invoice_id = Column(UUID(as_uuid=False), ForeignKey("invoices.id"), index=True)
    customer_id = Column(UUID(as_uuid=False), ForeignKey("customers.id"), index=True)
    invoice_number = Column(String(40))
    amount = _money()
    payment_date = Column(Date, nullable=False, index=True)
    payment_method = Column(String(30), default="cash")
    reference_number = Column(String(60))
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    id = _id_column()
    user_id = _user_column()
    supplier_id = Column(UUID(as_uuid=False), ForeignKey("suppliers.id"), index=True)
    order_number = Column(String(40), nullable=False)
    order_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="draft")
    subtotal = _money()
    tax_amount = _money()
    total_amount = _money()
    paid_amount = _money()
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Purchase(Base):
    """Inward supplier bill, source of input tax credit."""
    __tablename__ = "purchases"
    id = _id_column()
    user_id = _user_column()
    supplier_id = Column(UUID(as_uuid=False), ForeignKey("suppliers.id"), index=True)
    bill_number = Column(String(40))
    purchase_date = Column(Date, nullable=False, index=True)
    taxable_value = _money()
    cgst_amount = _money()
    sgst_amount = _money()
    igst_amount = _money()
    total_amount = _money()
    itc_eligible = Column(Boolean, default=True)
    itc_reversed = _money()


class RentalCustomer(Base):
    __tablename__ = "rental_customers"
    id = _id_column()
    user_id = _user_column()
    name = Column(String(200), nullable=False)
    email = Column(String(200))
    phone = Column(String(20))


class RentalInvoice(Base):
    __tablename__ = "rental_invoices"
    id = _id_column()
    user_id = _user_column()
    rental_customer_id = Column(UUID(as_uuid=False), ForeignKey("rental_customers.id"), index=True)
    rental_number = Column(String(40), nullable=False)
    start_date = Column(Date, nullable=False)
    expected_return_date = Column(Date, nullable=False, index=True)
    actual_return_date = Column(Date)
    status = Column(String(20), nullable=False, default="active")
    late_fee_per_day = _money()
    security_deposit = _money()
    total_amount = _money()


class IncomeEntry(Base):
    __tablename__ = "income_entries"
    id = _id_column()
    user_id = _user_column()
    financial_year = Column(String(9), nullable=False, index=True)
    entry_date = Column(Date, nullable=False)
    description = Column(String(300))
    category = Column(String(30), default="professional_fees")
    amount = _money()
    tds_deducted = _money()
    client_name = Column(String(200))


class ExpenseEntry(Base):
    __tablename__ = "expense_entries"
    id = _id_column()
    user_id = _user_column()
    financial_year = Column(String(9), nullable=False, index=True)
    entry_date = Column(Date, nullable=False)
    description = Column(String(300))
    category = Column(String(30), default="other")
    amount = _money()
    is_deductible = Column(Boolean, default=True)
    gst_amount = _money()


class ITRComputationRecord(Base):
    __tablename__ = "itr_computations"
    id = _id_column()
    user_id = _user_column()
    financial_year = Column(String(9), nullable=False)
    tax_regime = Column(String(3), nullable=False, default="new")
    gross_receipts = _money()
    other_income = _money()
    total_income = _money()
    total_expenses = _money()
    presumptive_income = _money()
    section_80c = _money()
    section_80d = _money()
    section_80g = _money()
    other_deductions = _money()
    total_deductions = _money()
    taxable_income = _money()
    tax_computed = _money()
    rebate_87a = _money()
    cess = _money()
    total_tax_liability = _money()
    tds_paid = _money()
    advance_tax_paid = _money()
    self_assessment_tax = _money()
    tax_payable = _money()
    refund_due = _money()
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    __table_args__ = (UniqueConstraint("user_id", "financial_year", name="uq_itr_user_fy"),)
