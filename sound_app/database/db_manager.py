# sound_app/database/db_manager.py
from flask_sqlalchemy import SQLAlchemy
import os
import logging
from datetime import datetime
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)


class Song(db.Model):
    __tablename__ = 'songs'

    id = db.Column(db.Integer, primary_key=True)

    # Tag metadata, absent when the upload carried no readable tag
    title = db.Column(db.String(255), nullable=True)
    artist = db.Column(db.String(255), nullable=True)
    album = db.Column(db.String(255), nullable=True)
    genre = db.Column(db.String(255), nullable=True)
    # Holds the full unsigned 32-bit track range
    track = db.Column(db.BigInteger, nullable=True)

    # Path relative to the configured storage root
    file = db.Column(db.String(500), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<Song {self.id}: {self.title} by {self.artist}>'

    def to_dict(self):
        """Converts the Song row to a dictionary for API responses."""
        return {
            'id': self.id,
            'title': self.title,
            'artist': self.artist,
            'album': self.album,
            'genre': self.genre,
            'track': self.track,
            'file': self.file,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


def _sqlite_directory(uri):
    """Directory holding a file-backed SQLite database, else ``None``."""
    url = make_url(uri)
    if url.get_backend_name() != 'sqlite' or url.database in (None, '', ':memory:'):
        return None
    return os.path.dirname(url.database) or None


def initialize_database(app):
    """Bind ``db`` to ``app`` and make sure the songs table exists.

    A file-backed SQLite URI gets its parent directory created first, so the
    default ``sound_app/database/instance`` location works on a fresh checkout.
    """
    db.init_app(app)
    os.makedirs(app.instance_path, exist_ok=True)

    uri = app.config.get('SQLALCHEMY_DATABASE_URI')
    if uri:
        try:
            sqlite_dir = _sqlite_directory(uri)
        except ArgumentError as e:
            logger.warning("Unparseable database URI, skipping directory setup: %s", e)
            sqlite_dir = None
        if sqlite_dir and not os.path.isdir(sqlite_dir):
            os.makedirs(sqlite_dir, exist_ok=True)
            logger.info("Created SQLite directory %s", sqlite_dir)

    with app.app_context():
        db.create_all()
        logger.info("Songs table ready on %s", db.engine.url.render_as_string(hide_password=True))
