from .db_manager import db, Song, initialize_database  # noqa: F401
