import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'app', 'config' and 'sound_app' import correctly
_TESTS_DIR = os.path.dirname(__file__)
_ROOT_DIR = os.path.abspath(os.path.join(_TESTS_DIR, os.pardir))
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.support import factories as test_factories


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path_factory):
    """Ensure a clean env for tests with per-test sqlite files and storage roots."""
    db_dir = tmp_path_factory.mktemp("db")
    db_path = Path(db_dir) / "test.sqlite"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("SONG_STORAGE_DIR", str(tmp_path_factory.mktemp("songs-env")))
    monkeypatch.delenv("SONG_COLLISION_POLICY", raising=False)
    yield


@pytest.fixture
def storage_root(tmp_path):
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture
def make_app(tmp_path, storage_root):
    """Build an app bound to this test's sqlite file and storage root."""
    import app as app_module

    def _make(**overrides):
        config = {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{(tmp_path / 'test.sqlite').as_posix()}",
            "SONG_STORAGE_DIR": str(storage_root),
        }
        config.update(overrides)
        return app_module.create_app(config)

    return _make


@pytest.fixture
def app(make_app):
    application = make_app()
    yield application


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def db_session(app_context):
    from sound_app.database.db_manager import db

    test_factories.set_session(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.remove()
        test_factories.reset_session()


@pytest.fixture
def factories(db_session):
    yield test_factories


@pytest.fixture
def client(app):
    return app.test_client()
