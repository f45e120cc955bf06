"""
Exception classes for song ingestion and bookkeeping.

Exception Hierarchy:
    SongError (base)
        InvalidTrackNumberError - tag track number is missing or not numeric
        InvalidFilenameError - declared upload filename cannot be stored
        StorageCollisionError - filename already taken under the "reject" policy
        SongNotFoundError - no record with the requested id

Unreadable tags are not errors: the extractor returns ``None`` for them.
"""

from __future__ import annotations

from typing import Optional


class SongError(Exception):
    """Base exception for song errors.

    Attributes:
        message: Human-readable error description.
        details: Optional extra context (path, id, raw tag text).
    """

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class InvalidTrackNumberError(SongError, ValueError):
    """Raised when a tag's track number text is not an unsigned integer.

    A tag without a usable track number is invalid data, so ingestion stops
    before anything is written to storage.
    """


class InvalidFilenameError(SongError, ValueError):
    """Raised when an upload's filename is empty or would escape the storage root."""


class StorageCollisionError(SongError, FileExistsError):
    """Raised when the target filename exists and the collision policy is ``reject``."""


class SongNotFoundError(SongError):
    """Raised by the repository when updating or deleting a missing record."""

    def __init__(self, song_id, message: Optional[str] = None) -> None:
        super().__init__(message or f"Song {song_id} not found", {"id": song_id})
        self.song_id = song_id


__all__ = [
    "SongError",
    "InvalidTrackNumberError",
    "InvalidFilenameError",
    "StorageCollisionError",
    "SongNotFoundError",
]
