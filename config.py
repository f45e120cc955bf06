#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))

COLLISION_POLICIES = ("overwrite", "reject", "rename")


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


def _get_choice(name: str, choices, default: str) -> str:
    value = (os.getenv(name) or "").strip().lower()
    return value if value in choices else default


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-in-production'

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'sound_app', 'database', 'instance', 'sound_app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Song storage root; Song.file values are relative to it
    SONG_STORAGE_DIR = os.getenv('SONG_STORAGE_DIR', os.path.join(basedir, 'songs'))
    # What to do when an upload's filename already exists in storage
    SONG_COLLISION_POLICY = _get_choice('SONG_COLLISION_POLICY', COLLISION_POLICIES, 'overwrite')

    # Uploads
    MAX_UPLOAD_MB = max(1, _get_int('MAX_UPLOAD_MB', 100))
    MAX_CONTENT_LENGTH = MAX_UPLOAD_MB * 1024 * 1024

    # Comma separated list of origins allowed to call /api/*
    CORS_ALLOWED_ORIGINS = _get_csv_list('CORS_ALLOWED_ORIGINS', 'http://localhost:3000')

    # Runtime behavior
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    LOG_DIR = os.getenv('LOG_DIR', os.path.join(basedir, 'sound_app', 'log'))
