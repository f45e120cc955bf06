import os

import pytest

from sound_app.models.dto import Upload


def _temp_upload(tmp_path, content=b"audio-bytes", filename="song.mp3"):
    src = tmp_path / "incoming.part"
    src.write_bytes(content)
    return Upload(tempfile=str(src), filename=filename)


@pytest.mark.unit
def test_store_copies_bytes_and_returns_resolved_path(tmp_path, storage_root):
    from sound_app.domain.songs import FileStore

    upload = _temp_upload(tmp_path, content=b"\x00\x01payload")
    stored = FileStore(collision_policy="overwrite").store(str(storage_root), upload)

    assert os.path.isabs(stored.path)
    assert stored.path == os.path.abspath(storage_root / "song.mp3")
    assert stored.replaced is False
    with open(stored.path, "rb") as f:
        assert f.read() == b"\x00\x01payload"


@pytest.mark.unit
def test_store_creates_missing_destination_root(tmp_path):
    from sound_app.domain.songs import FileStore

    root = tmp_path / "not" / "yet"
    stored = FileStore(collision_policy="overwrite").store(str(root), _temp_upload(tmp_path))
    assert os.path.isfile(stored.path)


@pytest.mark.unit
def test_overwrite_policy_replaces_existing_file(tmp_path, storage_root):
    from sound_app.domain.songs import FileStore

    (storage_root / "song.mp3").write_bytes(b"old")
    stored = FileStore(collision_policy="overwrite").store(str(storage_root), _temp_upload(tmp_path, b"new"))

    assert stored.replaced is True
    assert (storage_root / "song.mp3").read_bytes() == b"new"


@pytest.mark.unit
def test_reject_policy_keeps_existing_file(tmp_path, storage_root):
    from sound_app.domain.songs import FileStore, StorageCollisionError

    (storage_root / "song.mp3").write_bytes(b"old")
    with pytest.raises(StorageCollisionError):
        FileStore(collision_policy="reject").store(str(storage_root), _temp_upload(tmp_path, b"new"))
    assert (storage_root / "song.mp3").read_bytes() == b"old"


@pytest.mark.unit
def test_rename_policy_picks_next_free_name(tmp_path, storage_root):
    from sound_app.domain.songs import FileStore

    (storage_root / "song.mp3").write_bytes(b"old")
    (storage_root / "song (1).mp3").write_bytes(b"older")
    stored = FileStore(collision_policy="rename").store(str(storage_root), _temp_upload(tmp_path, b"new"))

    assert os.path.basename(stored.path) == "song (2).mp3"
    assert stored.replaced is False
    assert (storage_root / "song.mp3").read_bytes() == b"old"


@pytest.mark.unit
def test_unknown_policy_is_rejected():
    from sound_app.domain.songs import FileStore

    with pytest.raises(ValueError):
        FileStore(collision_policy="shrug")


@pytest.mark.unit
def test_sanitize_filename_strips_directories_and_forbidden_chars():
    from sound_app.domain.songs import FileStore

    fs = FileStore(collision_policy="overwrite")
    assert fs.sanitize_filename("../../etc/passwd") == "passwd"
    assert fs.sanitize_filename("C:\\music\\AC: DC?.mp3") == "AC_ DC_.mp3"
    sanitized = fs.sanitize_filename('  a*b"c<d>e|f.mp3  ')
    for ch in '\\/:*?"<>|':
        assert ch not in sanitized
    assert sanitized == sanitized.strip()


@pytest.mark.unit
@pytest.mark.parametrize("name", ["", "  ", "..", "dir/.."])
def test_sanitize_filename_rejects_unusable_names(name):
    from sound_app.domain.songs import FileStore, InvalidFilenameError

    with pytest.raises(InvalidFilenameError):
        FileStore(collision_policy="overwrite").sanitize_filename(name)


@pytest.mark.unit
def test_missing_source_propagates_io_error(tmp_path, storage_root):
    from sound_app.domain.songs import FileStore

    upload = Upload(tempfile=str(tmp_path / "gone.part"), filename="x.mp3")
    with pytest.raises(FileNotFoundError):
        FileStore(collision_policy="overwrite").store(str(storage_root), upload)


@pytest.mark.unit
def test_relative_path_resolve_and_remove(tmp_path, storage_root):
    from sound_app.domain.songs import FileStore, InvalidFilenameError

    fs = FileStore(collision_policy="overwrite")
    stored = fs.store(str(storage_root), _temp_upload(tmp_path))

    relative = fs.relative_path(str(storage_root), stored.path)
    assert relative == "song.mp3"
    assert fs.resolve(str(storage_root), relative) == stored.path

    with pytest.raises(InvalidFilenameError):
        fs.resolve(str(storage_root), "../outside.mp3")

    fs.remove(str(storage_root), relative)
    assert not os.path.exists(stored.path)
    with pytest.raises(FileNotFoundError):
        fs.remove(str(storage_root), relative)
