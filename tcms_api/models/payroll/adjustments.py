from datetime import datetime
from tcms_api.extensions import db

ADJUSTMENT_TYPES = ("deduction", "bonus")

class SalaryAdjustment(db.Model):
    __tablename__ = "salary_adjustments"

    id = db.Column(db.Integer, primary_key=True)
    salary_id = db.Column(db.Integer, db.ForeignKey("monthly_salaries.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)  # denormalized for audit

    type = db.Column(db.Enum(*ADJUSTMENT_TYPES, name="adjustment_type_enum"), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)  # always positive; type carries the sign
    reason = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_adjustment_amount_positive"),
    )

    salary = db.relationship("MonthlySalary", back_populates="adjustments")
