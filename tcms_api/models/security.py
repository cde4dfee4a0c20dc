# tcms_api/models/security.py
"""Role based access: users hold roles, roles are granted permission codes."""
from tcms_api.extensions import db


class Role(db.Model):
    __tablename__ = "roles"
    id   = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False)  # admin / accountant / manager / employee
    name = db.Column(db.String(100), nullable=True)

    members = db.relationship("UserRole", back_populates="role",
                              cascade="all, delete-orphan", passive_deletes=True)
    grants = db.relationship("RolePermission", back_populates="role",
                             cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Role {self.code}>"


class UserRole(db.Model):
    __tablename__ = "user_roles"
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)

    role = db.relationship("Role", back_populates="members")
    user = db.relationship("User", back_populates="memberships")


class Permission(db.Model):
    __tablename__ = "permissions"
    id   = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(120), unique=True, nullable=False)  # e.g. "payroll.salaries.write"
    name = db.Column(db.String(150), nullable=True)

    def __repr__(self) -> str:
        return f"<Permission {self.code}>"


class RolePermission(db.Model):
    __tablename__ = "role_permissions"
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    permission_id = db.Column(db.Integer, db.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True)

    role = db.relationship("Role", back_populates="grants")
    permission = db.relationship("Permission")


def role_codes_for(user_id: int) -> set[str]:
    rows = (db.session.query(Role.code)
            .join(UserRole, UserRole.role_id == Role.id)
            .filter(UserRole.user_id == user_id)
            .all())
    return {code for (code,) in rows}


def permission_codes_for(user_id: int) -> set[str]:
    """Codes granted through any of the user's roles; issued as the 'perms' claim at login."""
    rows = (db.session.query(Permission.code)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(UserRole, UserRole.role_id == RolePermission.role_id)
            .filter(UserRole.user_id == user_id)
            .distinct()
            .all())
    return {code for (code,) in rows}
