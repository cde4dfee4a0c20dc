# tcms_api/services/salary_records.py
"""
Salary record store: one MonthlySalary per (employee, month, year).

Totals are never maintained incrementally. Every ledger mutation re-sums the
adjustments of the record inside the same unit of work (see apply_totals),
so net_salary == base_salary - total_deductions + total_bonuses holds for
every committed row.

Status guards are re-checked at write time: transitions use a conditional
UPDATE ... WHERE status = 'pending' and inspect the rowcount; edits lock the
row first (SELECT ... FOR UPDATE; sqlite ignores the clause).
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
import logging

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError

from tcms_api.extensions import db
from tcms_api.models.employee import Employee
from tcms_api.models.payroll.salary import MonthlySalary
from tcms_api.models.payroll.adjustments import SalaryAdjustment
from .payroll_common import (
    ZERO, MAX_AMOUNT, STATUS_PENDING, STATUS_PAID, STATUS_CANCELLED,
    TYPE_DEDUCTION, TYPE_BONUS, to_money, validate_period,
)
from .payroll_errors import (
    DuplicateRecord, InvalidTransition, RecordLocked, RecordNotFound, ValidationFailed,
)

log = logging.getLogger(__name__)


# ---------- helpers ----------
def _base_amount(x) -> Decimal:
    try:
        base = to_money(x)
    except InvalidOperation:
        raise ValidationFailed(f"base_salary must be a number (got {x!r})")
    if base < 0:
        raise ValidationFailed("base_salary cannot be negative")
    if base > MAX_AMOUNT:
        raise ValidationFailed(f"base_salary cannot exceed {MAX_AMOUNT}")
    return base


def _clean_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    return str(notes).strip() or None


def new_salary(employee_id: int, month: int, year: int, base_salary: Decimal,
               notes: Optional[str] = None) -> MonthlySalary:
    """Fresh pending record: no adjustments yet, so net == base."""
    return MonthlySalary(
        employee_id=employee_id,
        month=month,
        year=year,
        base_salary=base_salary,
        total_deductions=ZERO,
        total_bonuses=ZERO,
        net_salary=base_salary,
        status=STATUS_PENDING,
        notes=notes,
    )


def find_for_period(employee_id: int, month: int, year: int) -> Optional[MonthlySalary]:
    return (MonthlySalary.query
            .filter(MonthlySalary.employee_id == employee_id,
                    MonthlySalary.month == month,
                    MonthlySalary.year == year)
            .first())


def get_salary(salary_id: int, *, for_update: bool = False) -> MonthlySalary:
    q = MonthlySalary.query.filter(MonthlySalary.id == salary_id)
    if for_update:
        q = q.with_for_update()
    s = q.first()
    if s is None:
        raise RecordNotFound(f"salary record {salary_id} not found")
    return s


def apply_totals(salary: MonthlySalary) -> MonthlySalary:
    """Re-sum the ledger for `salary` and rewrite the derived columns (no commit)."""
    db.session.flush()
    sums = dict(
        db.session.query(SalaryAdjustment.type, func.coalesce(func.sum(SalaryAdjustment.amount), 0))
        .filter(SalaryAdjustment.salary_id == salary.id)
        .group_by(SalaryAdjustment.type)
        .all()
    )
    deductions = to_money(sums.get(TYPE_DEDUCTION, 0))
    bonuses = to_money(sums.get(TYPE_BONUS, 0))
    base = to_money(salary.base_salary)

    salary.total_deductions = deductions
    salary.total_bonuses = bonuses
    salary.net_salary = base - deductions + bonuses
    salary.updated_at = datetime.utcnow()
    return salary


def _transition(salary_id: int, target: str, **values) -> MonthlySalary:
    """pending -> target, guarded by the status column at write time."""
    salary = get_salary(salary_id)
    current = salary.status
    res = db.session.execute(
        update(MonthlySalary)
        .where(MonthlySalary.id == salary_id, MonthlySalary.status == STATUS_PENDING)
        .values(status=target, updated_at=datetime.utcnow(), **values)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        db.session.rollback()
        raise InvalidTransition(
            f"salary record {salary_id} is '{current}'; only 'pending' records can become '{target}'"
        )
    db.session.commit()
    db.session.refresh(salary)
    log.info("salary %s: %s -> %s", salary_id, current, target)
    return salary


# ---------- operations ----------
def create_salary(employee_id: int, month: int, year: int, base_salary,
                  notes: Optional[str] = None) -> MonthlySalary:
    month, year = validate_period(month, year)
    base = _base_amount(base_salary)

    if db.session.get(Employee, employee_id) is None:
        raise RecordNotFound(f"employee {employee_id} not found")
    if find_for_period(employee_id, month, year) is not None:
        raise DuplicateRecord(f"salary for employee {employee_id} in {year:04d}-{month:02d} already exists")

    salary = new_salary(employee_id, month, year, base, _clean_notes(notes))
    db.session.add(salary)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race against another create/generate for the same period
        db.session.rollback()
        raise DuplicateRecord(f"salary for employee {employee_id} in {year:04d}-{month:02d} already exists")
    log.info("salary %s created for employee %s %04d-%02d base=%s", salary.id, employee_id, year, month, base)
    return salary


def update_salary(salary_id: int, *, base_salary=None, notes: Optional[str] = None,
                  clear_notes: bool = False) -> MonthlySalary:
    """Edit the base snapshot and/or notes of a pending record; totals are re-derived."""
    base = _base_amount(base_salary) if base_salary is not None else None
    try:
        salary = get_salary(salary_id, for_update=True)
        if salary.status != STATUS_PENDING:
            raise InvalidTransition(f"salary record {salary_id} is '{salary.status}' and can no longer be edited")
        if base is not None:
            salary.base_salary = base
        if clear_notes:
            salary.notes = None
        elif notes is not None:
            salary.notes = _clean_notes(notes)
        apply_totals(salary)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return salary


def recompute_totals(salary_id: int) -> MonthlySalary:
    try:
        salary = get_salary(salary_id, for_update=True)
        if salary.status != STATUS_PENDING:
            raise RecordLocked(f"salary record {salary_id} is '{salary.status}'; totals are frozen")
        apply_totals(salary)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return salary


def mark_paid(salary_id: int) -> MonthlySalary:
    return _transition(salary_id, STATUS_PAID, paid_at=datetime.utcnow())


def cancel_salary(salary_id: int) -> MonthlySalary:
    return _transition(salary_id, STATUS_CANCELLED)


def delete_salary(salary_id: int) -> None:
    try:
        salary = get_salary(salary_id, for_update=True)
        if salary.status != STATUS_PENDING:
            raise InvalidTransition(f"salary record {salary_id} is '{salary.status}'; only pending records can be deleted")
        # adjustments go with it (relationship cascade)
        db.session.delete(salary)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    log.info("salary %s deleted", salary_id)
