from datetime import datetime
from tcms_api.extensions import db

EMPLOYEE_STATUSES = ("active", "inactive", "on_leave")

class Employee(db.Model):
    """Employee directory row. The payroll core only reads id, salary and status."""
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True)

    name  = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(320), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    employee_code  = db.Column(db.String(50), unique=True, nullable=True)
    specialization = db.Column(db.String(40), nullable=True)   # customer_service/marketing/developer/...

    hire_date = db.Column(db.Date, nullable=True)
    salary    = db.Column(db.Numeric(10, 2), nullable=True)    # monthly base salary
    work_type = db.Column(db.String(16), default="remote", nullable=False)  # remote/onsite/hybrid
    status    = db.Column(db.Enum(*EMPLOYEE_STATUSES, name="employee_status_enum"), default="active", nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_emp_status", "status"),
    )
