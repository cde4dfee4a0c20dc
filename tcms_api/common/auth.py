# tcms_api/common/auth.py
from __future__ import annotations

from functools import wraps
from typing import Iterable

from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity

from tcms_api.common.http import fail
from tcms_api.extensions import db
from tcms_api.models.user import User
from tcms_api.models.security import role_codes_for, permission_codes_for

ADMIN_ROLE = "admin"


def perm_matches(granted: str, required: str) -> bool:
    """'payroll.*' and 'payroll.salaries.*' cover 'payroll.salaries.read'; otherwise exact."""
    if granted == required:
        return True
    return granted.endswith(".*") and required.startswith(granted[:-1])


def _allows(granted: Iterable[str], required: Iterable[str]) -> bool:
    granted = list(granted)
    return any(perm_matches(g, r) for r in required for g in granted)


def _user_id(identity) -> int | None:
    try:
        return int(identity)
    except (TypeError, ValueError):
        return None


def requires_perms(*perm_codes: str):
    """
    Let the request through when the caller holds ANY of `perm_codes`.

    The 'roles' / 'perms' claims minted at login are checked first. When they
    do not grant access the role mappings are re-read from the database, so a
    grant made after login works without a new token. 'admin' always passes.
    """
    def outer(fn):
        @wraps(fn)
        @jwt_required()
        def inner(*args, **kwargs):
            claims = get_jwt() or {}
            if not perm_codes or ADMIN_ROLE in (claims.get("roles") or ()):
                return fn(*args, **kwargs)
            if _allows(claims.get("perms") or (), perm_codes):
                return fn(*args, **kwargs)

            uid = _user_id(get_jwt_identity())
            if uid is None or db.session.get(User, uid) is None:
                return fail("Unauthorized", status=401)
            if ADMIN_ROLE in role_codes_for(uid) or _allows(permission_codes_for(uid), perm_codes):
                return fn(*args, **kwargs)
            return fail("Forbidden", status=403, code="FORBIDDEN")
        return inner
    return outer
