"""Payroll failure taxonomy.

Every error here is a deterministic, per-request failure detected before
the write it guards; none is retried. The app-level APIError handler turns
them into the standard failure envelope with the status/code below.
"""
from tcms_api.common.errors import APIError


class PayrollError(APIError):
    code = "PAYROLL_ERROR"


class DuplicateRecord(PayrollError):
    """A salary record already exists for (employee, month, year)."""
    code = "DUPLICATE_RECORD"
    status_code = 409


class InvalidTransition(PayrollError):
    """Status change or deletion attempted on a record that is not pending."""
    code = "INVALID_TRANSITION"
    status_code = 409


class RecordLocked(PayrollError):
    """Ledger mutation attempted on a record that left 'pending'."""
    code = "RECORD_LOCKED"
    status_code = 409


class AmountInvalid(PayrollError):
    code = "AMOUNT_INVALID"
    status_code = 422


class PeriodInvalid(PayrollError):
    code = "PERIOD_INVALID"
    status_code = 422


class ValidationFailed(PayrollError):
    code = "VALIDATION_ERROR"
    status_code = 422


class RecordNotFound(PayrollError):
    code = "NOT_FOUND"
    status_code = 404
