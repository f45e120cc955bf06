from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

SONGS_CREATED = Counter(
    "soundapp_songs_created_total",
    "Total number of uploads stored and persisted as songs.",
)
SONG_UPLOAD_FAILURES = Counter(
    "soundapp_song_upload_failures_total",
    "Total number of uploads that failed to become songs.",
    ["reason"],
)
SONGS_UPDATED = Counter(
    "soundapp_songs_updated_total",
    "Total number of song record updates.",
)
SONGS_DELETED = Counter(
    "soundapp_songs_deleted_total",
    "Total number of songs removed together with their files.",
)


def record_song_created() -> None:
    SONGS_CREATED.inc()


def record_upload_failure(reason: str) -> None:
    SONG_UPLOAD_FAILURES.labels(reason=reason).inc()


def record_song_updated() -> None:
    SONGS_UPDATED.inc()


def record_song_deleted() -> None:
    SONGS_DELETED.inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
