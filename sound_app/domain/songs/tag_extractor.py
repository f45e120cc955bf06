from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from mutagen import MutagenError
from mutagen.id3 import ID3

from sound_app.models.dto import TagData
from .errors import InvalidTrackNumberError


logger = logging.getLogger(__name__)

# Track numbers are stored as unsigned 32-bit values
MAX_TRACK_NUMBER = 2 ** 32 - 1
_TRACK_RE = re.compile(r"\+?[0-9]+")


class TagSource:
    """Read-only view over an embedded tag."""

    def title(self) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def artist(self) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def album(self) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def genre(self) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError

    def track_text(self) -> Optional[str]:  # pragma: no cover - interface
        raise NotImplementedError


class Id3TagSource(TagSource):
    """TagSource backed by a mutagen ID3v2 tag."""

    def __init__(self, tag: ID3):
        self._tag = tag

    def _text(self, frame_id: str) -> Optional[str]:
        frame = self._tag.get(frame_id)
        if frame is None:
            return None
        texts = [str(t) for t in (getattr(frame, "text", None) or []) if str(t)]
        return "/".join(texts) if texts else None

    def title(self) -> Optional[str]:
        return self._text("TIT2")

    def artist(self) -> Optional[str]:
        return self._text("TPE1")

    def album(self) -> Optional[str]:
        return self._text("TALB")

    def genre(self) -> Optional[str]:
        frame = self._tag.get("TCON")
        if frame is None:
            return None
        # TCON may hold numeric references like "(17)"; .genres resolves them
        genres = [g for g in frame.genres if g]
        return genres[0] if genres else None

    def track_text(self) -> Optional[str]:
        return self._text("TRCK")


def read_id3_tag(path) -> Optional[TagSource]:
    """Open the ID3v2 tag of ``path``; ``None`` when there is no readable tag.

    ID3v1 trailers are ignored: a file carrying only one has no metadata.
    """
    try:
        tag = ID3(path, load_v1=False)
    except MutagenError as e:
        logger.debug("No readable ID3 tag in %s: %s", path, e)
        return None
    return Id3TagSource(tag)


def parse_track_number(text: Optional[str]) -> int:
    """Parse tag track text as an unsigned integer, rejecting anything else."""
    raw = (text or "").strip()
    if not _TRACK_RE.fullmatch(raw):
        raise InvalidTrackNumberError(
            f"Invalid track number: {text!r}", {"track_text": text}
        )
    value = int(raw)
    if value > MAX_TRACK_NUMBER:
        raise InvalidTrackNumberError(
            f"Track number out of range: {text!r}", {"track_text": text}
        )
    return value


class TagExtractor:
    def __init__(self, reader: Optional[Callable[[object], Optional[TagSource]]] = None):
        """Extracts song metadata from audio files.

        :param reader: Opens a file and returns its TagSource (or None).
            Defaults to the mutagen ID3v2 reader.
        """
        self.reader = reader or read_id3_tag

    def extract(self, path) -> Optional[TagData]:
        tag = self.reader(path)
        if tag is None:
            return None
        return TagData(
            title=tag.title(),
            artist=tag.artist(),
            album=tag.album(),
            genre=tag.genre(),
            track=parse_track_number(tag.track_text()),
        )


__all__ = [
    "TagSource",
    "Id3TagSource",
    "TagExtractor",
    "read_id3_tag",
    "parse_track_number",
    "MAX_TRACK_NUMBER",
]
