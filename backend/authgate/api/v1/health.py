"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authgate.api.deps import json_response, timing
from authgate.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report application, database and denylist backend status."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    denylist = "redis" if current_app.extensions.get("redis_client") is not None else "memory"
    payload = {
        "status": "ok",
        "db": db_status,
        "denylist": denylist,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload)
