from __future__ import annotations

from flask import Blueprint, request
from tcms_api.common.auth import requires_perms
from tcms_api.services import salary_adjustments as ledger
from tcms_api.common.http import ok, fail, as_int
from tcms_api.blueprints.salaries import _row_adjustment

bp = Blueprint("salary_adjustments", __name__, url_prefix="/api/v1/salary-adjustments")

@bp.get("")
@requires_perms("payroll.adjustments.read")
def list_adjustments():
    try:
        salary_id = as_int(request.args.get("salary_id"), "salary_id")
    except ValueError as e:
        return fail(str(e), 422)
    if salary_id is None:
        return fail("salary_id required", 422)
    return ok([_row_adjustment(a) for a in ledger.list_for_salary(salary_id)])

@bp.post("")
@requires_perms("payroll.adjustments.write")
def create_adjustment():
    """
    Body:
    {
      "salary_id": 12,
      "employee_id": 3,            // must own the salary record
      "type": "deduction|bonus",
      "amount": "200.00",          // > 0
      "reason": "late",
      "description": "optional"
    }
    """
    j = request.get_json(silent=True) or {}
    try:
        salary_id = as_int(j.get("salary_id"), "salary_id")
        emp_id = as_int(j.get("employee_id"), "employee_id")
    except ValueError as e:
        return fail(str(e), 422)
    if salary_id is None or emp_id is None:
        return fail("salary_id, employee_id, type, amount, reason required", 422)

    a = ledger.add_adjustment(
        salary_id,
        emp_id,
        j.get("type"),
        j.get("amount"),
        j.get("reason"),
        description=j.get("description"),
    )
    return ok(_row_adjustment(a), 201)

@bp.delete("/<int:adj_id>")
@requires_perms("payroll.adjustments.write")
def delete_adjustment(adj_id: int):
    ledger.remove_adjustment(adj_id)
    return ok({"deleted": adj_id})
