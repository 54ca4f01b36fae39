# app/domain/services/itr_service.py
"""
Income-tax computation for freelancers and small-business owners.

Supports:
- Slab tax under the Old and New regimes, with 4% health & education cess
- Presumptive income u/s 44ADA (50% of gross receipts, receipts <= 50L)
- Chapter VI-A deductions (old regime), rebate u/s 87A
- Regime comparison and recommendation
- Advance tax installments (15/45/75/100% cumulative) and their schedule
- TDS u/s 194J

Every published amount is rounded half-up to paise.  Advance tax quarters
are derived from rounded cumulative amounts, so they always add back to the
rounded liability.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from app.domain.errors import InvalidInputError, ThresholdExceededError
from app.domain.models.tax_rate_config import DEFAULT_SLAB_CONFIG, ITRSlabConfig, TaxSlab
from app.domain.money import HUNDRED, ZERO, money, non_negative
from app.domain.services.financial_year import parse_financial_year

logger = logging.getLogger("itr_service")

REGIMES = ("old", "new")

OLD_REGIME_SLABS = DEFAULT_SLAB_CONFIG.old_regime_slabs
NEW_REGIME_SLABS = DEFAULT_SLAB_CONFIG.new_regime_slabs

STANDARD_DEDUCTION = DEFAULT_SLAB_CONFIG.standard_deduction
SECTION_80C_MAX = DEFAULT_SLAB_CONFIG.section_80c_max
REBATE_87A_MAX = DEFAULT_SLAB_CONFIG.rebate_87a_max
PRESUMPTIVE_RECEIPTS_CAP = DEFAULT_SLAB_CONFIG.presumptive_receipts_cap

# Section 194J
TDS_RATE_WITH_PAN = Decimal("10")
TDS_RATE_WITHOUT_PAN = Decimal("20")

# Advance tax is due only above this liability
ADVANCE_TAX_THRESHOLD = Decimal("10000")
ADVANCE_TAX_CUMULATIVE_PERCENT = {
    "Q1": Decimal("15"),
    "Q2": Decimal("45"),
    "Q3": Decimal("75"),
    "Q4": Decimal("100"),
}

ELIGIBLE_PROFESSIONS = frozenset({
    "legal",
    "medical",
    "engineering",
    "architecture",
    "accountancy",
    "technical_consultancy",
    "interior_decoration",
    "advertising",
    "freelancer",
    "consultant",
})


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class SlabTax:
    tax: Decimal = ZERO
    cess: Decimal = ZERO
    total: Decimal = ZERO
    slab_details: list[dict] = field(default_factory=list)


@dataclass
class Deductions:
    """Chapter VI-A deductions (old regime only)."""
    section_80c: Decimal = ZERO   # PPF, ELSS, LIC etc. (max 1.5L)
    section_80d: Decimal = ZERO   # Medical insurance
    section_80g: Decimal = ZERO   # Donations
    other_deductions: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Deductions":
        data = data or {}
        return cls(
            section_80c=non_negative(data.get("section_80c"), "section_80c"),
            section_80d=non_negative(data.get("section_80d"), "section_80d"),
            section_80g=non_negative(data.get("section_80g"), "section_80g"),
            other_deductions=non_negative(data.get("other_deductions"), "other_deductions"),
        )


@dataclass
class RegimeResult:
    regime: str
    taxable_income: Decimal = ZERO
    tax: Decimal = ZERO
    cess: Decimal = ZERO
    total: Decimal = ZERO
    slab_details: list[dict] = field(default_factory=list)


@dataclass
class RegimeComparison:
    old_regime: RegimeResult
    new_regime: RegimeResult
    recommendation: str = "new"
    savings: Decimal = ZERO


@dataclass
class PresumptiveEligibility:
    eligible: bool
    reason: str | None = None


@dataclass
class ITRInput:
    financial_year: str
    regime: str = "new"
    gross_receipts: Decimal = ZERO
    other_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    use_presumptive: bool = False
    deductions: Deductions = field(default_factory=Deductions)
    tds_paid: Decimal = ZERO
    advance_tax_paid: Decimal = ZERO
    self_assessment_tax: Decimal = ZERO


@dataclass
class ITRComputation:
    """One row of ``itr_computations``: a (user, financial year) computation."""
    financial_year: str
    tax_regime: str
    gross_receipts: Decimal = ZERO
    other_income: Decimal = ZERO
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    presumptive_income: Decimal = ZERO
    section_80c: Decimal = ZERO
    section_80d: Decimal = ZERO
    section_80g: Decimal = ZERO
    other_deductions: Decimal = ZERO
    total_deductions: Decimal = ZERO
    taxable_income: Decimal = ZERO
    tax_computed: Decimal = ZERO
    rebate_87a: Decimal = ZERO
    cess: Decimal = ZERO
    total_tax_liability: Decimal = ZERO
    tds_paid: Decimal = ZERO
    advance_tax_paid: Decimal = ZERO
    self_assessment_tax: Decimal = ZERO
    tax_payable: Decimal = ZERO
    refund_due: Decimal = ZERO
    slab_details: list[dict] = field(default_factory=list)

    def to_record(self) -> dict[str, Any]:
        record = dict(self.__dict__)
        record.pop("slab_details")
        return record


# ---------------------------------------------------------------------------
# Core computation functions
# ---------------------------------------------------------------------------

def _check_regime(regime: str) -> str:
    if regime not in REGIMES:
        raise InvalidInputError(f"Tax regime must be 'old' or 'new', got {regime!r}")
    return regime


def _compute_slab_tax(taxable_income: Decimal, slabs: list[TaxSlab]) -> tuple[Decimal, list[dict]]:
    """
    Walk the slabs in ascending order. Returns (tax_amount, slab_details).
    """
    tax = ZERO
    details = []

    for slab in slabs:
        if taxable_income <= slab.min:
            break
        upper = taxable_income if slab.max is None else min(taxable_income, slab.max)
        slab_income = upper - slab.min
        slab_tax = slab_income * slab.rate / HUNDRED
        tax += slab_tax
        details.append({
            "range": slab.label,
            "rate": f"{slab.rate}%",
            "income": str(money(slab_income)),
            "tax": str(money(slab_tax)),
        })

    return money(tax), details


def compute_tax(
    taxable_income: Any,
    regime: str,
    slab_config: ITRSlabConfig | None = None,
) -> SlabTax:
    """Slab tax + 4% cess on *taxable_income* (no rebate applied)."""
    cfg = slab_config or DEFAULT_SLAB_CONFIG
    income = non_negative(taxable_income, "taxable_income")
    tax, details = _compute_slab_tax(income, cfg.slabs_for(_check_regime(regime)))
    cess = money(tax * cfg.cess_rate / HUNDRED)
    return SlabTax(tax=tax, cess=cess, total=tax + cess, slab_details=details)


def presumptive_income(gross_receipts: Any, slab_config: ITRSlabConfig | None = None) -> Decimal:
    """Deemed profit u/s 44ADA: 50% of gross receipts."""
    cfg = slab_config or DEFAULT_SLAB_CONFIG
    receipts = non_negative(gross_receipts, "gross_receipts")
    if receipts > cfg.presumptive_receipts_cap:
        raise ThresholdExceededError(
            f"Gross receipts exceed ₹{cfg.presumptive_receipts_cap:,.0f}; presumptive taxation not available"
        )
    return money(receipts * cfg.presumptive_rate / HUNDRED)


def check_presumptive_eligibility(gross_receipts: Any, profession: str) -> PresumptiveEligibility:
    receipts = non_negative(gross_receipts, "gross_receipts")
    if receipts > PRESUMPTIVE_RECEIPTS_CAP:
        return PresumptiveEligibility(False, "Gross receipts exceed ₹50 lakhs")
    if (profession or "").strip().lower() not in ELIGIBLE_PROFESSIONS:
        return PresumptiveEligibility(False, "Profession not eligible for presumptive taxation")
    return PresumptiveEligibility(True)


def calculate_deductions(deductions: Deductions, slab_config: ITRSlabConfig | None = None) -> Decimal:
    """Total old-regime deductions with 80C capped at 1.5L."""
    cfg = slab_config or DEFAULT_SLAB_CONFIG
    capped_80c = min(deductions.section_80c, cfg.section_80c_max)
    return money(
        capped_80c
        + deductions.section_80d
        + deductions.section_80g
        + deductions.other_deductions
    )


def rebate_87a(
    taxable_income: Any,
    tax_before_rebate: Any,
    regime: str,
    slab_config: ITRSlabConfig | None = None,
) -> Decimal:
    cfg = slab_config or DEFAULT_SLAB_CONFIG
    income = non_negative(taxable_income, "taxable_income")
    tax = non_negative(tax_before_rebate, "tax_before_rebate")
    if income <= cfg.rebate_limit_for(_check_regime(regime)):
        return money(min(tax, cfg.rebate_87a_max))
    return ZERO


def _regime_result(taxable_income: Decimal, regime: str, cfg: ITRSlabConfig) -> RegimeResult:
    slab_tax = compute_tax(taxable_income, regime, cfg)
    return RegimeResult(
        regime=regime,
        taxable_income=money(taxable_income),
        tax=slab_tax.tax,
        cess=slab_tax.cess,
        total=slab_tax.total,
        slab_details=slab_tax.slab_details,
    )


def compare_regimes(
    gross_income: Any,
    deductions: Deductions | None = None,
    slab_config: ITRSlabConfig | None = None,
) -> RegimeComparison:
    """
    Old regime: gross - standard deduction - Chapter VI-A deductions.
    New regime: gross - standard deduction only.
    The strictly cheaper regime wins; a tie goes to the new regime.
    """
    cfg = slab_config or DEFAULT_SLAB_CONFIG
    gross = non_negative(gross_income, "gross_income")
    deductions = deductions or Deductions()

    old_taxable = max(gross - cfg.standard_deduction - calculate_deductions(deductions, cfg), ZERO)
    new_taxable = max(gross - cfg.standard_deduction, ZERO)

    old = _regime_result(old_taxable, "old", cfg)
    new = _regime_result(new_taxable, "new", cfg)

    recommendation = "old" if old.total < new.total else "new"
    savings = abs(old.total - new.total)
    logger.debug(
        "Regime comparison: old=%s new=%s -> %s (saves %s)",
        old.total, new.total, recommendation, savings,
    )
    return RegimeComparison(old_regime=old, new_regime=new, recommendation=recommendation, savings=savings)


# ---------------------------------------------------------------------------
# Advance tax
# ---------------------------------------------------------------------------

def advance_tax_installments(total_liability: Any) -> dict[str, Decimal]:
    """Marginal amount due each quarter; the four always sum to the liability."""
    total = money(non_negative(total_liability, "total_liability"))
    installments: dict[str, Decimal] = {}
    prior = ZERO
    for quarter, pct in ADVANCE_TAX_CUMULATIVE_PERCENT.items():
        cumulative = money(total * pct / HUNDRED)
        installments[quarter] = cumulative - prior
        prior = cumulative
    return installments


def advance_tax_due_dates(financial_year: str) -> dict[str, date]:
    start = parse_financial_year(financial_year)
    return {
        "Q1": date(start, 6, 15),
        "Q2": date(start, 9, 15),
        "Q3": date(start, 12, 15),
        "Q4": date(start + 1, 3, 15),
    }


def advance_tax_schedule(
    total_liability: Any,
    financial_year: str,
    paid: Any = 0,
    today: date | None = None,
) -> dict[str, Any]:
    """
    Per-quarter status of advance tax.  *paid* is the total paid so far and
    is applied to the quarters in order.
    """
    today = today or date.today()
    installments = advance_tax_installments(total_liability)
    due_dates = advance_tax_due_dates(financial_year)
    remaining_paid = money(non_negative(paid, "paid"))

    rows = []
    cumulative_due = ZERO
    for quarter, amount in installments.items():
        cumulative_due += amount
        applied = min(amount, remaining_paid)
        remaining_paid -= applied

        if applied >= amount:
            status = "paid"
        elif today > due_dates[quarter]:
            status = "overdue"
        elif applied > ZERO:
            status = "partial"
        else:
            status = "pending"

        rows.append({
            "quarter": quarter,
            "due_date": due_dates[quarter],
            "cumulative_percent": ADVANCE_TAX_CUMULATIVE_PERCENT[quarter],
            "amount": amount,
            "cumulative_due": cumulative_due,
            "paid": applied,
            "remaining": amount - applied,
            "status": status,
        })

    total = sum(installments.values(), ZERO)
    return {
        "financial_year": financial_year,
        "total_liability": total,
        "applicable": total > ADVANCE_TAX_THRESHOLD,
        "installments": rows,
    }


def calculate_tds(amount: Any, has_pan: bool = True) -> Decimal:
    """TDS on professional fees u/s 194J."""
    rate = TDS_RATE_WITH_PAN if has_pan else TDS_RATE_WITHOUT_PAN
    return money(non_negative(amount, "amount") * rate / HUNDRED)


# ---------------------------------------------------------------------------
# Full computation
# ---------------------------------------------------------------------------

def compute_itr(inp: ITRInput, slab_config: ITRSlabConfig | None = None) -> ITRComputation:
    """
    Compute one financial year's liability for the chosen regime.

    Business income is either 50% of gross receipts (44ADA) or receipts
    less expenses.  Deductions reduce taxable income only under the old
    regime.
    """
    cfg = slab_config or DEFAULT_SLAB_CONFIG
    parse_financial_year(inp.financial_year)
    regime = _check_regime(inp.regime)

    receipts = non_negative(inp.gross_receipts, "gross_receipts")
    other = non_negative(inp.other_income, "other_income")
    expenses = non_negative(inp.total_expenses, "total_expenses")

    if inp.use_presumptive:
        business_income = presumptive_income(receipts, cfg)
        presumptive = business_income
    else:
        business_income = max(receipts - expenses, ZERO)
        presumptive = ZERO

    total_income = money(business_income + other)
    deductions = calculate_deductions(inp.deductions, cfg) if regime == "old" else ZERO
    taxable = max(total_income - deductions, ZERO)

    slab_tax = compute_tax(taxable, regime, cfg)
    rebate = rebate_87a(taxable, slab_tax.tax, regime, cfg)
    tax_after_rebate = slab_tax.tax - rebate
    cess = money(tax_after_rebate * cfg.cess_rate / HUNDRED)
    liability = tax_after_rebate + cess

    taxes_paid = money(
        non_negative(inp.tds_paid, "tds_paid")
        + non_negative(inp.advance_tax_paid, "advance_tax_paid")
        + non_negative(inp.self_assessment_tax, "self_assessment_tax")
    )

    return ITRComputation(
        financial_year=inp.financial_year,
        tax_regime=regime,
        gross_receipts=money(receipts),
        other_income=money(other),
        total_income=total_income,
        total_expenses=money(expenses),
        presumptive_income=presumptive,
        section_80c=money(min(inp.deductions.section_80c, cfg.section_80c_max)),
        section_80d=money(inp.deductions.section_80d),
        section_80g=money(inp.deductions.section_80g),
        other_deductions=money(inp.deductions.other_deductions),
        total_deductions=deductions,
        taxable_income=money(taxable),
        tax_computed=slab_tax.tax,
        rebate_87a=rebate,
        cess=cess,
        total_tax_liability=liability,
        tds_paid=money(inp.tds_paid),
        advance_tax_paid=money(inp.advance_tax_paid),
        self_assessment_tax=money(inp.self_assessment_tax),
        tax_payable=max(liability - taxes_paid, ZERO),
        refund_due=max(taxes_paid - liability, ZERO),
        slab_details=slab_tax.slab_details,
    )


# ---------------------------------------------------------------------------
# Text formatter
# ---------------------------------------------------------------------------

def format_itr_summary(result: ITRComputation) -> str:
    """Plain-text summary of a computation, for e-mail or chat."""
    lines = [
        f"--- Tax Computation FY {result.financial_year} ({result.tax_regime.title()} Regime) ---",
        "",
        f"Total Income: Rs {result.total_income:,.2f}",
    ]
    if result.presumptive_income > 0:
        lines.append(f"  (presumptive u/s 44ADA on receipts of Rs {result.gross_receipts:,.2f})")
    if result.total_deductions > 0:
        lines.append(f"Deductions: Rs {result.total_deductions:,.2f}")
    lines.extend([f"Taxable Income: Rs {result.taxable_income:,.2f}", ""])

    lines.append("Tax Slabs:")
    for s in result.slab_details:
        lines.append(f"  {s['range']} @ {s['rate']}: Rs {Decimal(s['tax']):,.2f}")

    lines.extend(["", f"Tax on Income: Rs {result.tax_computed:,.2f}"])
    if result.rebate_87a > 0:
        lines.append(f"Less: Rebate u/s 87A: Rs {result.rebate_87a:,.2f}")
    lines.extend([
        f"Health & Edu Cess (4%): Rs {result.cess:,.2f}",
        f"Total Tax Liability: Rs {result.total_tax_liability:,.2f}",
        f"Taxes Already Paid: Rs {result.tds_paid + result.advance_tax_paid + result.self_assessment_tax:,.2f}",
        "",
    ])

    if result.refund_due > 0:
        lines.append(f"REFUND DUE: Rs {result.refund_due:,.2f}")
    else:
        lines.append(f"TAX PAYABLE: Rs {result.tax_payable:,.2f}")

    return "\n".join(lines)
