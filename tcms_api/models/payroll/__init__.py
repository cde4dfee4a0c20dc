# tcms_api/models/payroll/__init__.py
# salary first; adjustments reference monthly_salaries.id
from .salary import MonthlySalary, SALARY_STATUSES
from .adjustments import SalaryAdjustment, ADJUSTMENT_TYPES

__all__ = [
    "MonthlySalary", "SALARY_STATUSES",
    "SalaryAdjustment", "ADJUSTMENT_TYPES",
]
