from datetime import datetime
from decimal import Decimal
from tcms_api.extensions import db

SALARY_STATUSES = ("pending", "paid", "cancelled")

class MonthlySalary(db.Model):
    __tablename__ = "monthly_salaries"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)
    month = db.Column(db.Integer, nullable=False)  # 1-12
    year  = db.Column(db.Integer, nullable=False)

    # snapshot taken at creation; never re-read from the employee row
    base_salary      = db.Column(db.Numeric(10, 2), nullable=False)
    total_deductions = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total_bonuses    = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    net_salary       = db.Column(db.Numeric(10, 2), nullable=False)

    status  = db.Column(db.Enum(*SALARY_STATUSES, name="salary_status_enum"), nullable=False, default="pending")
    paid_at = db.Column(db.DateTime)
    notes   = db.Column(db.Text)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("employee_id", "month", "year", name="uq_salary_employee_period"),
        db.CheckConstraint("month >= 1 AND month <= 12", name="ck_salary_month_range"),
        db.Index("ix_salary_period", "year", "month"),
    )

    employee = db.relationship("Employee")
    adjustments = db.relationship(
        "SalaryAdjustment",
        back_populates="salary",
        order_by="SalaryAdjustment.id",
        cascade="all, delete-orphan",
    )

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    def __repr__(self) -> str:
        return f"<MonthlySalary id={self.id} employee_id={self.employee_id} {self.year:04d}-{self.month:02d} {self.status}>"
