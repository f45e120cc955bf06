#!/usr/bin/env python
"""
Pydantic DTOs for song records.

``Song`` is the record shape exchanged with the persistence layer and the
HTTP API. ``TagData`` is what the tag extractor produces from an ID3 tag,
and ``SongChanges`` carries the user-editable fields of an update.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TagData(BaseModel):
    """Metadata read from an embedded tag. The track number is mandatory."""

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    track: int = Field(ge=0)


class Song(BaseModel):
    """A song record. ``id`` and ``file`` are set once the song is durable."""

    id: Optional[int] = None
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    track: Optional[int] = Field(default=None, ge=0)
    file: Optional[str] = None

    @classmethod
    def from_tag(cls, tag: Optional[TagData]) -> "Song":
        if tag is None:
            return cls()
        return cls(
            title=tag.title,
            artist=tag.artist,
            album=tag.album,
            genre=tag.genre,
            track=tag.track,
        )


class SongChanges(BaseModel):
    """Fields a caller may change on an existing song.

    Only fields present in the payload are applied, so a field can be
    cleared by passing ``null`` explicitly.
    """

    model_config = ConfigDict(extra='forbid')

    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    genre: Optional[str] = None
    track: Optional[int] = Field(default=None, ge=0)

    def apply_to(self, song: Song) -> Song:
        provided = self.model_fields_set
        return Song(
            id=song.id,
            title=self.title if 'title' in provided else song.title,
            artist=self.artist if 'artist' in provided else song.artist,
            album=self.album if 'album' in provided else song.album,
            genre=self.genre if 'genre' in provided else song.genre,
            track=self.track if 'track' in provided else song.track,
            file=song.file,
        )


@dataclass(frozen=True)
class Upload:
    """An in-flight upload: where the bytes are now and what the client called the file."""

    tempfile: str
    filename: str


@dataclass(frozen=True)
class StoredFile:
    path: str
    replaced: bool = False


__all__ = ["TagData", "Song", "SongChanges", "Upload", "StoredFile"]
