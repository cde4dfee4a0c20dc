from __future__ import annotations
from typing import Any, Dict

from flask import Blueprint, request
from tcms_api.common.auth import requires_perms
from tcms_api.common.http import ok, fail, as_int, int_arg
from tcms_api.models.payroll.salary import MonthlySalary
from tcms_api.models.payroll.adjustments import SalaryAdjustment
from tcms_api.services import salary_records, payroll_engine
from tcms_api.services.payroll_common import money_float

bp = Blueprint("salaries", __name__, url_prefix="/api/v1/salaries")

# ---------- helpers ----------
def _iso(dt):
    return dt.isoformat() if dt else None

def _row_adjustment(a: SalaryAdjustment) -> Dict[str, Any]:
    return {
        "id": a.id,
        "salary_id": a.salary_id,
        "employee_id": a.employee_id,
        "type": a.type,
        "amount": money_float(a.amount),
        "reason": a.reason,
        "description": a.description,
        "created_at": _iso(a.created_at),
    }

def _row(s: MonthlySalary, with_adjustments: bool = False) -> Dict[str, Any]:
    out = {
        "id": s.id,
        "employee_id": s.employee_id,
        "month": s.month,
        "year": s.year,
        "base_salary": money_float(s.base_salary),
        "total_deductions": money_float(s.total_deductions),
        "total_bonuses": money_float(s.total_bonuses),
        "net_salary": money_float(s.net_salary),
        "status": s.status,
        "paid_at": _iso(s.paid_at),
        "notes": s.notes,
        "created_at": _iso(s.created_at),
        "updated_at": _iso(s.updated_at),
    }
    if with_adjustments:
        out["adjustments"] = [_row_adjustment(a) for a in s.adjustments]
    return out

# ---------- CRUD ----------
@bp.get("")
@requires_perms("payroll.salaries.read")
def list_salaries():
    try:
        year = int_arg("year")
        month = int_arg("month")
        emp_id = int_arg("employee_id")
    except ValueError as e:
        return fail(str(e), 422)
    rows = payroll_engine.list_for_period(month=month, year=year, employee_id=emp_id)
    return ok([_row(x) for x in rows], total=len(rows))

@bp.get("/<int:salary_id>")
@requires_perms("payroll.salaries.read")
def get_salary(salary_id: int):
    return ok(_row(salary_records.get_salary(salary_id), with_adjustments=True))

@bp.post("")
@requires_perms("payroll.salaries.write")
def create_salary():
    j = request.get_json(silent=True) or {}
    try:
        emp_id = as_int(j.get("employee_id"), "employee_id")
        month = as_int(j.get("month"), "month")
        year = as_int(j.get("year"), "year")
    except ValueError as e:
        return fail(str(e), 422)
    base = j.get("base_salary")
    if emp_id is None or month is None or year is None or base in (None, ""):
        return fail("employee_id, month, year, base_salary required", 422)

    s = salary_records.create_salary(emp_id, month, year, base, notes=j.get("notes"))
    return ok(_row(s), 201)

@bp.patch("/<int:salary_id>")
@requires_perms("payroll.salaries.write")
def patch_salary(salary_id: int):
    j = request.get_json(silent=True) or {}
    if "status" in j:
        return fail("status changes only through mark-paid / cancel", 422)
    base = j.get("base_salary") if "base_salary" in j else None
    if "base_salary" in j and base in (None, ""):
        return fail("base_salary cannot be empty", 422)
    notes = j.get("notes") if "notes" in j else None
    clear_notes = "notes" in j and not (j.get("notes") or "").strip()

    s = salary_records.update_salary(salary_id, base_salary=base, notes=notes, clear_notes=clear_notes)
    return ok(_row(s))

@bp.delete("/<int:salary_id>")
@requires_perms("payroll.salaries.write")
def delete_salary(salary_id: int):
    salary_records.delete_salary(salary_id)
    return ok({"deleted": salary_id})

# ---------- lifecycle ----------
@bp.post("/<int:salary_id>/mark-paid")
@requires_perms("payroll.salaries.write")
def mark_paid(salary_id: int):
    return ok(_row(salary_records.mark_paid(salary_id)))

@bp.post("/<int:salary_id>/cancel")
@requires_perms("payroll.salaries.write")
def cancel_salary(salary_id: int):
    return ok(_row(salary_records.cancel_salary(salary_id)))

@bp.post("/generate")
@requires_perms("payroll.salaries.write")
def generate():
    """
    Body: {"month": 1-12, "year": 2025}
    Creates pending records for active employees missing one; re-running is a no-op.
    """
    j = request.get_json(silent=True) or {}
    try:
        month = as_int(j.get("month"), "month")
        year = as_int(j.get("year"), "year")
    except ValueError as e:
        return fail(str(e), 422)
    if month is None or year is None:
        return fail("month and year required", 422)
    return ok(payroll_engine.generate_for_period(month, year))

# ---------- reporting ----------
@bp.get("/stats")
@requires_perms("payroll.salaries.read")
def stats():
    try:
        year = int_arg("year")
    except ValueError as e:
        return fail(str(e), 422)
    if year is None:
        return fail("year required", 422)
    st = payroll_engine.period_statistics(year)
    return ok({
        "total_paid": money_float(st["total_paid"]),
        "total_pending": money_float(st["total_pending"]),
        "employee_count": st["employee_count"],
    })

@bp.get("/monthly-total")
@requires_perms("payroll.salaries.read")
def monthly_total():
    try:
        year, month = int_arg("year"), int_arg("month")
    except ValueError as e:
        return fail(str(e), 422)
    if year is None or month is None:
        return fail("year and month required", 422)
    return ok({"year": year, "month": month,
                "total_paid": money_float(payroll_engine.monthly_paid_total(year, month))})

@bp.get("/monthly-totals")
@requires_perms("payroll.salaries.read")
def monthly_totals():
    try:
        year, month = int_arg("year"), int_arg("month")
    except ValueError as e:
        return fail(str(e), 422)
    if year is None or month is None:
        return fail("year and month required", 422)
    t = payroll_engine.monthly_totals_by_status(year, month)
    return ok({k: money_float(v) for k, v in t.items()})

@bp.get("/employees/<int:employee_id>")
@requires_perms("payroll.salaries.read")
def employee_history(employee_id: int):
    try:
        year = int_arg("year")
    except ValueError as e:
        return fail(str(e), 422)
    rows = payroll_engine.employee_history(employee_id, year)
    return ok([_row(x) for x in rows])
