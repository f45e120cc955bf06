"""Song ingestion: tag extraction, file storage and record lifecycle."""

from .errors import (
    SongError,
    InvalidTrackNumberError,
    InvalidFilenameError,
    StorageCollisionError,
    SongNotFoundError,
)
from .file_store import FileStore
from .repository import SongRepository, SqlAlchemySongRepository
from .service import SongService
from .tag_extractor import TagExtractor, TagSource, Id3TagSource

__all__ = [
    "SongError",
    "InvalidTrackNumberError",
    "InvalidFilenameError",
    "StorageCollisionError",
    "SongNotFoundError",
    "FileStore",
    "SongRepository",
    "SqlAlchemySongRepository",
    "SongService",
    "TagExtractor",
    "TagSource",
    "Id3TagSource",
]
