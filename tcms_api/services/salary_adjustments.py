# tcms_api/services/salary_adjustments.py
"""Adjustment ledger: deduction/bonus entries owned by one salary record.

Entries are immutable once written (no update path; delete and re-create).
Each add/remove and the re-sum of the parent's totals commit together.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import List, Optional
import logging

from tcms_api.extensions import db
from tcms_api.models.payroll.adjustments import SalaryAdjustment, ADJUSTMENT_TYPES
from .payroll_common import MAX_AMOUNT, STATUS_PENDING, to_money
from .payroll_errors import AmountInvalid, RecordLocked, RecordNotFound, ValidationFailed
from .salary_records import get_salary, apply_totals

log = logging.getLogger(__name__)


def _amount(x) -> Decimal:
    try:
        amt = to_money(x)
    except InvalidOperation:
        raise AmountInvalid(f"amount must be a number (got {x!r})")
    if amt <= 0:
        raise AmountInvalid("amount must be greater than zero")
    if amt > MAX_AMOUNT:
        raise AmountInvalid(f"amount cannot exceed {MAX_AMOUNT}")
    return amt


def get_adjustment(adjustment_id: int) -> SalaryAdjustment:
    a = db.session.get(SalaryAdjustment, adjustment_id)
    if a is None:
        raise RecordNotFound(f"adjustment {adjustment_id} not found")
    return a


def list_for_salary(salary_id: int) -> List[SalaryAdjustment]:
    get_salary(salary_id)
    return (SalaryAdjustment.query
            .filter(SalaryAdjustment.salary_id == salary_id)
            .order_by(SalaryAdjustment.id.asc())
            .all())


def add_adjustment(salary_id: int, employee_id: Optional[int], type: str, amount, reason: str,
                   description: Optional[str] = None) -> SalaryAdjustment:
    kind = (type or "").strip().lower()
    if kind not in ADJUSTMENT_TYPES:
        raise ValidationFailed(f"type must be one of {', '.join(ADJUSTMENT_TYPES)}")
    amt = _amount(amount)
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("reason is required")
    description = (description or "").strip() or None
    if employee_id is not None:
        try:
            employee_id = int(employee_id)
        except (TypeError, ValueError):
            raise ValidationFailed(f"employee_id must be integer (got {employee_id!r})")

    try:
        salary = get_salary(salary_id, for_update=True)
        if salary.status != STATUS_PENDING:
            raise RecordLocked(f"salary record {salary_id} is '{salary.status}'; adjustments are locked")
        if employee_id is None:
            employee_id = salary.employee_id
        elif employee_id != salary.employee_id:
            raise ValidationFailed(
                f"employee_id {employee_id} does not own salary record {salary_id}"
            )

        adj = SalaryAdjustment(
            salary_id=salary.id,
            employee_id=salary.employee_id,
            type=kind,
            amount=amt,
            reason=reason,
            description=description,
        )
        db.session.add(adj)
        apply_totals(salary)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    log.info("salary %s: %s %s (%s) -> net %s", salary_id, kind, amt, reason, salary.net_salary)
    return adj


def remove_adjustment(adjustment_id: int) -> None:
    try:
        adj = get_adjustment(adjustment_id)
        salary = get_salary(adj.salary_id, for_update=True)
        if salary.status != STATUS_PENDING:
            raise RecordLocked(f"salary record {salary.id} is '{salary.status}'; adjustments are locked")
        db.session.delete(adj)
        apply_totals(salary)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    log.info("salary %s: adjustment %s removed -> net %s", salary.id, adjustment_id, salary.net_salary)
