from __future__ import annotations

import os

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sound_app.database.db_manager import db

health_bp = Blueprint("health_bp", __name__)


def _storage_writable(path: str) -> bool:
    return os.path.isdir(path) and os.access(path, os.W_OK)


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as exc:
        status = 503
        checks["database"] = f"error: {exc}"

    storage_root = current_app.config.get("SONG_STORAGE_DIR")
    if storage_root and _storage_writable(storage_root):
        checks["storage"] = "ok"
    else:
        status = 503
        checks["storage"] = "unwritable"

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status
