from datetime import datetime
from tcms_api.extensions import db
from werkzeug.security import generate_password_hash, check_password_hash

class User(db.Model):
    """Login account. Payroll endpoints only see it through JWT claims."""
    __tablename__ = "users"

    id            = db.Column(db.Integer, primary_key=True)
    email         = db.Column(db.String(320), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name     = db.Column(db.String(255), nullable=False)
    status        = db.Column(db.String(20), default="active")  # active / inactive
    created_at    = db.Column(db.DateTime, default=datetime.utcnow)

    memberships = db.relationship("UserRole", back_populates="user",
                                  cascade="all, delete-orphan", passive_deletes=True)
    roles = db.relationship("Role", secondary="user_roles", lazy="selectin",
                            viewonly=True, order_by="Role.code")

    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    @property
    def is_active(self) -> bool:
        return (self.status or "active") == "active"

    def role_codes(self):
        return [r.code for r in self.roles]
