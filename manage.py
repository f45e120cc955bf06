# manage.py
import json
import os
import sys

from app import create_app
from sound_app.database import db
from sound_app.domain.songs import SongError
from sound_app.models.dto import Upload

USAGE = "Usage: python manage.py create_db | ingest <file.mp3> [<file.mp3> ...]"


def create_db():
    """Creates the database tables."""
    app = create_app()
    with app.app_context():
        db.create_all()
        print(f"Database tables created at {app.config['SQLALCHEMY_DATABASE_URI']}")
    return 0


def ingest(paths):
    """Stores local audio files as songs, exactly as an upload would."""
    app = create_app()
    service = app.extensions['song_service']
    storage_root = app.config['SONG_STORAGE_DIR']
    failures = 0
    with app.app_context():
        for path in paths:
            upload = Upload(tempfile=path, filename=os.path.basename(path))
            try:
                song = service.create(storage_root, upload)
            except (SongError, OSError) as e:
                failures += 1
                print(f"Skipped {path}: {e}", file=sys.stderr)
                continue
            print(json.dumps(song.model_dump(), ensure_ascii=False))
    return 1 if failures else 0


def main(argv):
    if not argv:
        print(f"No command provided. {USAGE}")
        return 1
    command, args = argv[0], argv[1:]
    if command == 'create_db':
        return create_db()
    if command == 'ingest':
        if not args:
            print(USAGE)
            return 1
        return ingest(args)
    print(f"Unknown command: {command}")
    print(USAGE)
    return 1


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
