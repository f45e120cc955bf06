from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from sound_app.database.db_manager import db, Song as SongRow
from sound_app.models.dto import Song
from .errors import SongNotFoundError


logger = logging.getLogger(__name__)


class SongRepository:
    """Interface for persisting song records."""

    def create_song(self, record: Song) -> Song:  # pragma: no cover - interface
        raise NotImplementedError

    def song_by_id(self, song_id: int) -> Optional[Song]:  # pragma: no cover - interface
        raise NotImplementedError

    def all_songs(self) -> List[Song]:  # pragma: no cover - interface
        raise NotImplementedError

    def update_song(self, record: Song) -> Song:  # pragma: no cover - interface
        raise NotImplementedError

    def delete_song(self, record: Song) -> None:  # pragma: no cover - interface
        raise NotImplementedError


def _to_record(row: SongRow) -> Song:
    return Song(
        id=row.id,
        title=row.title,
        artist=row.artist,
        album=row.album,
        genre=row.genre,
        track=row.track,
        file=row.file,
    )


class SqlAlchemySongRepository(SongRepository):
    def _commit(self, action: str) -> None:
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Failed to %s song: %s", action, e, exc_info=True)
            raise

    def _row(self, song_id) -> SongRow:
        row = db.session.get(SongRow, song_id) if song_id is not None else None
        if row is None:
            raise SongNotFoundError(song_id)
        return row

    def create_song(self, record: Song) -> Song:
        row = SongRow(
            title=record.title,
            artist=record.artist,
            album=record.album,
            genre=record.genre,
            track=record.track,
            file=record.file,
        )
        db.session.add(row)
        self._commit("create")
        logger.info("Created song %s (%s)", row.id, row.file)
        return _to_record(row)

    def song_by_id(self, song_id: int) -> Optional[Song]:
        row = db.session.get(SongRow, song_id)
        return _to_record(row) if row is not None else None

    def all_songs(self) -> List[Song]:
        rows = SongRow.query.order_by(SongRow.id).all()
        return [_to_record(row) for row in rows]

    def update_song(self, record: Song) -> Song:
        row = self._row(record.id)
        row.title = record.title
        row.artist = record.artist
        row.album = record.album
        row.genre = record.genre
        row.track = record.track
        row.file = record.file
        self._commit("update")
        return _to_record(row)

    def delete_song(self, record: Song) -> None:
        row = self._row(record.id)
        db.session.delete(row)
        self._commit("delete")
        logger.info("Deleted song %s", record.id)


__all__ = ["SongRepository", "SqlAlchemySongRepository"]
