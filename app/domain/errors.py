# app/domain/errors.py
"""
Error taxonomy for the tax and ledger computation core.

Every error carries a stable ``code`` so callers (the API layer, the
reminder worker) can branch on the kind without parsing messages, and a
short message that names the precondition that failed.  None of these are
retried internally.
"""

from __future__ import annotations


class BillingCoreError(Exception):
    """Base class for all computation-layer errors."""

    code = "billing_core_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidInputError(BillingCoreError):
    """Malformed or negative numeric input."""

    code = "invalid_input"


class IneligibleConsignmentError(BillingCoreError):
    """Consignment value is below the e-way bill threshold."""

    code = "ineligible_consignment"


class ServicesOnlyError(BillingCoreError):
    """Document carries no goods (HSN) line, only services."""

    code = "services_only"


class ThresholdExceededError(BillingCoreError):
    """Gross receipts exceed the presumptive taxation cap."""

    code = "threshold_exceeded"


class AlreadyCancelledError(BillingCoreError):
    """Invalid transition out of the terminal ``cancelled`` state."""

    code = "already_cancelled"


class AggregationError(BillingCoreError):
    """An underlying fetch failed while building a ledger or report."""

    code = "aggregation_failed"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
