import os

from tcms_api import create_app
from tcms_api.extensions import db
from tcms_api.models.user import User
from tcms_api.seed_rbac import run as seed_rbac, ADMIN_EMAILS


def _mk_app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app()
    return app


def _user(email, password="pw", status="active"):
    u = User(email=email, full_name=email.split("@")[0], status=status)
    u.set_password(password)
    db.session.add(u); db.session.commit()
    return u


def test_seed_rbac_is_idempotent():
    app = _mk_app()
    with app.app_context():
        db.create_all()
        _user(ADMIN_EMAILS[0])
        first = seed_rbac()
        assert first["ok"] is True
        assert first["grants_added"] > 0
        again = seed_rbac()
        assert again["grants_added"] == 0
        admin = User.query.filter_by(email=ADMIN_EMAILS[0]).first()
        assert admin.role_codes() == ["admin"]


def test_login_issues_claims_and_token_works():
    app = _mk_app()
    with app.app_context():
        db.create_all()
        _user(ADMIN_EMAILS[0], password="secret")
        seed_rbac()
        client = app.test_client()

        r = client.post("/api/v1/auth/login", json={"email": ADMIN_EMAILS[0].upper(), "password": "secret"})
        assert r.status_code == 200
        body = r.get_json()
        assert body["data"]["user"]["roles"] == ["admin"]
        token = body["data"]["access"]

        r = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert r.get_json()["data"]["email"] == ADMIN_EMAILS[0]

        r = client.get("/api/v1/salaries", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200


def test_login_rejects_bad_password_and_disabled_accounts():
    app = _mk_app()
    with app.app_context():
        db.create_all()
        _user("a@tcms.local", password="right")
        _user("b@tcms.local", password="right", status="inactive")
        client = app.test_client()

        r = client.post("/api/v1/auth/login", json={"email": "a@tcms.local", "password": "wrong"})
        assert r.status_code == 401
        r = client.post("/api/v1/auth/login", json={"email": "b@tcms.local", "password": "right"})
        assert r.status_code == 403
