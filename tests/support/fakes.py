"""In-memory stand-ins for the song collaborators."""

from typing import Dict, List, Optional

from sound_app.domain.songs import SongNotFoundError, SongRepository, TagSource
from sound_app.models.dto import Song


class FakeTagSource(TagSource):
    def __init__(self, **fields):
        self.fields = fields

    def title(self):
        return self.fields.get("title")

    def artist(self):
        return self.fields.get("artist")

    def album(self):
        return self.fields.get("album")

    def genre(self):
        return self.fields.get("genre")

    def track_text(self):
        return self.fields.get("track")


class InMemorySongRepository(SongRepository):
    """Dictionary-backed repository; ``fail_with`` makes create_song raise."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.rows: Dict[int, Song] = {}
        self.next_id = 1
        self.fail_with = fail_with
        self.created: List[Song] = []

    def create_song(self, record: Song) -> Song:
        if self.fail_with is not None:
            raise self.fail_with
        self.created.append(record.model_copy())
        stored = record.model_copy(update={"id": self.next_id})
        self.rows[stored.id] = stored
        self.next_id += 1
        return stored.model_copy()

    def song_by_id(self, song_id: int) -> Optional[Song]:
        row = self.rows.get(song_id)
        return row.model_copy() if row is not None else None

    def all_songs(self) -> List[Song]:
        return [row.model_copy() for _, row in sorted(self.rows.items())]

    def update_song(self, record: Song) -> Song:
        if record.id not in self.rows:
            raise SongNotFoundError(record.id)
        self.rows[record.id] = record.model_copy()
        return record.model_copy()

    def delete_song(self, record: Song) -> None:
        if self.rows.pop(record.id, None) is None:
            raise SongNotFoundError(record.id)
