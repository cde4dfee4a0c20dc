# tcms_api/services/payroll_engine.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func, distinct
from sqlalchemy.exc import IntegrityError

from tcms_api.extensions import db
from tcms_api.models.employee import Employee
from tcms_api.models.payroll.salary import MonthlySalary
from .payroll_common import ZERO, STATUS_PAID, STATUS_PENDING, to_money, validate_period
from .payroll_errors import PeriodInvalid
from .salary_records import new_salary

log = logging.getLogger(__name__)


def _year(year) -> int:
    try:
        y = int(year)
    except (TypeError, ValueError):
        raise PeriodInvalid("year must be an integer")
    # reuse the range check with a dummy month
    validate_period(1, y)
    return y


# ---------- generation ----------
def generate_for_period(month: int, year: int) -> Dict[str, Any]:
    """
    Create a pending salary record for every active employee that has none
    for (month, year). Base salary is copied from the employee row as it is now.

    Safe to re-run: employees already covered are skipped. Each insert is its
    own unit of work guarded by uq_salary_employee_period, so an overlapping
    call that wins the race turns our insert into a skip instead of a duplicate.
    """
    month, year = validate_period(month, year)

    active = (db.session.query(Employee.id, Employee.salary)
              .filter(Employee.status == "active")
              .order_by(Employee.id.asc())
              .all())
    existing = {
        emp_id for (emp_id,) in
        db.session.query(MonthlySalary.employee_id)
        .filter(MonthlySalary.month == month, MonthlySalary.year == year)
        .all()
    }

    ids: List[int] = []
    skipped = 0
    for emp_id, emp_salary in active:
        if emp_id in existing:
            skipped += 1
            continue
        row = new_salary(emp_id, month, year, to_money(emp_salary if emp_salary is not None else 0))
        db.session.add(row)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            skipped += 1
            log.warning("salary for employee %s %04d-%02d was created concurrently; skipped", emp_id, year, month)
            continue
        ids.append(row.id)

    log.info("generated %d salary records for %04d-%02d (%d already present)", len(ids), year, month, skipped)
    return {"generated_count": len(ids), "ids": ids}


# ---------- queries ----------
def list_for_period(month: Optional[int] = None, year: Optional[int] = None,
                    employee_id: Optional[int] = None) -> List[MonthlySalary]:
    """Filtered listing; newest period first, then by employee."""
    q = MonthlySalary.query
    if year is not None:
        q = q.filter(MonthlySalary.year == int(year))
    if month is not None:
        q = q.filter(MonthlySalary.month == int(month))
    if employee_id is not None:
        q = q.filter(MonthlySalary.employee_id == int(employee_id))
    return (q.order_by(MonthlySalary.year.desc(), MonthlySalary.month.desc(),
                       MonthlySalary.employee_id.asc(), MonthlySalary.id.asc())
            .all())


def employee_history(employee_id: int, year: Optional[int] = None) -> List[MonthlySalary]:
    y = _year(year) if year is not None else date.today().year
    return (MonthlySalary.query
            .filter(MonthlySalary.employee_id == employee_id, MonthlySalary.year == y)
            .order_by(MonthlySalary.month.desc())
            .all())


# ---------- statistics ----------
def _net_by_status(*filters) -> Dict[str, Decimal]:
    rows = (db.session.query(MonthlySalary.status, func.coalesce(func.sum(MonthlySalary.net_salary), 0))
            .filter(*filters)
            .group_by(MonthlySalary.status)
            .all())
    return {status: to_money(total) for status, total in rows}


def period_statistics(year: int) -> Dict[str, Any]:
    """
    total_paid / total_pending: sum of net_salary by status within the year.
    employee_count: distinct employees with any record in the year (cancelled included).
    """
    y = _year(year)
    totals = _net_by_status(MonthlySalary.year == y)
    employee_count = (db.session.query(func.count(distinct(MonthlySalary.employee_id)))
                      .filter(MonthlySalary.year == y)
                      .scalar()) or 0
    return {
        "total_paid": totals.get(STATUS_PAID, ZERO),
        "total_pending": totals.get(STATUS_PENDING, ZERO),
        "employee_count": int(employee_count),
    }


def monthly_paid_total(year: int, month: int) -> Decimal:
    month, year = validate_period(month, year)
    totals = _net_by_status(MonthlySalary.year == year, MonthlySalary.month == month,
                            MonthlySalary.status == STATUS_PAID)
    return totals.get(STATUS_PAID, ZERO)


def monthly_totals_by_status(year: int, month: int) -> Dict[str, Decimal]:
    month, year = validate_period(month, year)
    totals = _net_by_status(MonthlySalary.year == year, MonthlySalary.month == month)
    paid = totals.get(STATUS_PAID, ZERO)
    pending = totals.get(STATUS_PENDING, ZERO)
    return {"paid": paid, "pending": pending, "total": paid + pending}
