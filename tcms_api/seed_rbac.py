# tcms_api/seed_rbac.py
"""Idempotent RBAC seed for the payroll API (flask seed-rbac)."""
from tcms_api.extensions import db
from tcms_api.models.security import Role, Permission, RolePermission, UserRole
from tcms_api.models.user import User

DEFAULT_ROLES = [
    ("admin", "Administrator"),
    ("accountant", "Accountant"),
    ("manager", "Manager"),
    ("employee", "Employee"),
]

DEFAULT_PERMS = [
    # salary records
    "payroll.salaries.read", "payroll.salaries.write",
    # deduction / bonus ledger
    "payroll.adjustments.read", "payroll.adjustments.write",
]

ROLE_PERM_MAP = {
    "admin": DEFAULT_PERMS,
    "accountant": DEFAULT_PERMS,
    "manager": ["payroll.salaries.read", "payroll.adjustments.read"],
    "employee": [],
}

ADMIN_EMAILS = ("admin@tcms.local",)


def _get_or_create(model, code, **defaults):
    row = model.query.filter_by(code=code).first()
    if row is None:
        row = model(code=code, **defaults)
        db.session.add(row)
        db.session.flush()
    return row


def run():
    roles = {code: _get_or_create(Role, code, name=name) for code, name in DEFAULT_ROLES}
    perms = {code: _get_or_create(Permission, code, name=code.replace(".", " ").title())
             for code in DEFAULT_PERMS}

    added = 0
    for role_code, codes in ROLE_PERM_MAP.items():
        role = roles[role_code]
        have = {g.permission_id for g in role.grants}
        for code in codes:
            if perms[code].id not in have:
                role.grants.append(RolePermission(permission_id=perms[code].id))
                added += 1

    admin = roles["admin"]
    for user in User.query.filter(User.email.in_(ADMIN_EMAILS)).all():
        if all(m.role_id != admin.id for m in user.memberships):
            db.session.add(UserRole(user_id=user.id, role_id=admin.id))

    db.session.commit()
    return {"ok": True, "roles": len(roles), "perms": len(perms), "grants_added": added}
