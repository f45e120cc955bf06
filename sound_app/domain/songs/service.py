from __future__ import annotations

import logging
from typing import List, Optional

from sound_app.models.dto import Song, SongChanges, Upload
from sound_app.observability.metrics import (
    record_song_created,
    record_song_deleted,
    record_song_updated,
    record_upload_failure,
)
from .errors import InvalidTrackNumberError
from .file_store import FileStore
from .repository import SongRepository
from .tag_extractor import TagExtractor


logger = logging.getLogger(__name__)


class SongService:
    """Keeps stored audio files and song records in step.

    Every operation runs to completion in the caller's thread. Nothing here
    serializes concurrent requests for the same filename or record.
    """

    def __init__(
        self,
        repository: SongRepository,
        tag_extractor: Optional[TagExtractor] = None,
        file_store: Optional[FileStore] = None,
    ):
        self.repository = repository
        self.tag_extractor = tag_extractor or TagExtractor()
        self.file_store = file_store or FileStore()

    def list_all(self) -> List[Song]:
        return self.repository.all_songs()

    def get_by_id(self, song_id: int) -> Optional[Song]:
        return self.repository.song_by_id(song_id)

    def create(self, destination_root: str, upload: Upload) -> Song:
        """Ingest an upload: read its tag, store the file, persist the record.

        A file without a readable tag is still stored, as a song with no
        metadata. An invalid track number aborts before anything is stored.
        """
        try:
            tag = self.tag_extractor.extract(upload.tempfile)
        except InvalidTrackNumberError:
            record_upload_failure("invalid_track_number")
            raise
        if tag is None:
            logger.info("No readable tag in upload %r; storing without metadata", upload.filename)
        song = Song.from_tag(tag)

        try:
            stored = self.file_store.store(destination_root, upload)
        except Exception:
            record_upload_failure("storage")
            raise
        song.file = self.file_store.relative_path(destination_root, stored.path)

        try:
            created = self.repository.create_song(song)
        except Exception:
            record_upload_failure("database")
            # Never remove a file we overwrote: another record may point at it
            if not stored.replaced:
                try:
                    self.file_store.remove(destination_root, song.file)
                except OSError as cleanup_error:
                    logger.error(
                        "Could not remove orphaned file %s after failed insert: %s",
                        stored.path, cleanup_error,
                    )
            raise

        record_song_created()
        return song.model_copy(update={"id": created.id})

    def update(self, existing: Song, changes: SongChanges) -> Song:
        """Apply ``changes`` over ``existing`` and persist. The stored file is not renamed."""
        merged = changes.apply_to(existing)
        updated = self.repository.update_song(merged)
        record_song_updated()
        return updated

    def delete(self, destination_root: str, song: Song) -> None:
        """Remove the song's file, then its record.

        If the file cannot be removed the record is left in place, so the
        database never loses its reference to a file that is still on disk.
        """
        self.file_store.remove(destination_root, song.file)
        self.repository.delete_song(song)
        record_song_deleted()


__all__ = ["SongService"]
