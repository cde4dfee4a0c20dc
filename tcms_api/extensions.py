# tcms_api/extensions.py
import os
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

# applied to server databases only; sqlite (tests / local runs) keeps SQLAlchemy's defaults
SERVER_ENGINE_OPTIONS = {
    "pool_pre_ping": True,
    "pool_recycle": 270,
    "pool_size": 5,
    "max_overflow": 2,
    "pool_timeout": 30,
}


def normalize_db_url(url: str) -> str:
    """postgres:// and postgresql:// URLs -> the psycopg (v3) driver."""
    if not url:
        return url
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def is_sqlite(url: str) -> bool:
    return (url or "").startswith("sqlite")


def init_db(app):
    url = normalize_db_url(os.getenv("DATABASE_URL") or app.config.get("SQLALCHEMY_DATABASE_URI") or "")
    app.config["SQLALCHEMY_DATABASE_URI"] = url
    if not is_sqlite(url):
        app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", dict(SERVER_ENGINE_OPTIONS))
    db.init_app(app)
