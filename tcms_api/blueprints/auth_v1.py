from datetime import timedelta

from flask import Blueprint, request
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    jwt_required, get_jwt_identity
)
from tcms_api.common.http import ok, fail
from tcms_api.extensions import db
from tcms_api.models.user import User
from tcms_api.models.security import permission_codes_for

bp = Blueprint("auth_v1", __name__, url_prefix="/api/v1/auth")

def _user_payload(u: User):
    return {"id": u.id, "email": u.email, "full_name": u.full_name, "roles": u.role_codes()}

def _claims(u: User):
    # requires_perms reads roles/perms from here before touching the DB
    return {
        "roles": u.role_codes(),
        "perms": sorted(permission_codes_for(u.id)),
        "email": u.email,
        "name": u.full_name,
    }

def _token_user():
    uid = get_jwt_identity()
    try:
        return db.session.get(User, int(uid))
    except (TypeError, ValueError):
        return None

@bp.post("/login")
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not email or not password:
        return fail("email and password required", 422)

    u = User.query.filter_by(email=email).first()
    if not u or not u.check_password(password):
        return fail("Invalid credentials", 401)
    if not u.is_active:
        return fail("Account disabled", 403)

    access = create_access_token(identity=str(u.id), additional_claims=_claims(u), expires_delta=timedelta(days=1))
    refresh = create_refresh_token(identity=str(u.id))
    return ok({"access": access, "refresh": refresh, "user": _user_payload(u)})

@bp.post("/refresh")
@jwt_required(refresh=True)
def refresh():
    u = _token_user()
    if not u or not u.is_active:
        return fail("User not found", 401)
    return ok({"access": create_access_token(identity=str(u.id), additional_claims=_claims(u))})

@bp.get("/me")
@jwt_required()
def me():
    u = _token_user()
    if not u:
        return fail("User not found", 404)
    return ok(_user_payload(u))
