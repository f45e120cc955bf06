import os
import re
import shutil
import logging

from config import Config, COLLISION_POLICIES
from sound_app.models.dto import StoredFile, Upload
from .errors import InvalidFilenameError, StorageCollisionError

logger = logging.getLogger(__name__)


class FileStore:
    def __init__(self, collision_policy=None):
        """Copies uploads into permanent storage.

        :param collision_policy: 'overwrite', 'reject' or 'rename'; what to do
            when the target filename already exists under the storage root.
        """
        policy = (collision_policy or Config.SONG_COLLISION_POLICY).lower()
        if policy not in COLLISION_POLICIES:
            raise ValueError(f"Unknown collision policy: {collision_policy}")
        self.collision_policy = policy

    def sanitize_filename(self, name):
        """
        Sanitizes a declared upload name so it is a single safe path component.
        """
        # Clients may send a full path; keep only the last component
        name = re.split(r'[\\/]', name or '')[-1]
        name = re.sub(r'[\\/:*?"<>|]', '_', name)
        name = name.strip()
        name = re.sub(r'_{2,}', '_', name)
        if name in ('', '.', '..'):
            raise InvalidFilenameError(f"Invalid upload filename: {name!r}", {"filename": name})
        return name

    def _free_name(self, destination_root, filename):
        stem, ext = os.path.splitext(filename)
        counter = 1
        candidate = filename
        while os.path.exists(os.path.join(destination_root, candidate)):
            candidate = f"{stem} ({counter}){ext}"
            counter += 1
        return candidate

    def store(self, destination_root, upload: Upload) -> StoredFile:
        """Copy the upload's temporary file to ``destination_root/filename``.

        I/O errors (unreadable source, unwritable destination, full disk)
        propagate to the caller.
        """
        filename = self.sanitize_filename(upload.filename)
        os.makedirs(destination_root, exist_ok=True)

        target = os.path.join(destination_root, filename)
        replaced = False
        if os.path.exists(target):
            if self.collision_policy == 'reject':
                raise StorageCollisionError(
                    f"A file named {filename!r} is already stored", {"path": target}
                )
            if self.collision_policy == 'rename':
                target = os.path.join(destination_root, self._free_name(destination_root, filename))
            else:
                replaced = True

        shutil.copyfile(upload.tempfile, target)
        resolved = os.path.abspath(target)
        if replaced:
            logger.warning(f"Overwrote existing stored file: {resolved}")
        else:
            logger.info(f"Stored upload {upload.filename!r} at {resolved}")
        return StoredFile(path=resolved, replaced=replaced)

    def relative_path(self, destination_root, path):
        """Express ``path`` relative to the storage root."""
        return os.path.relpath(os.path.abspath(path), os.path.abspath(destination_root))

    def resolve(self, destination_root, relative):
        """Join a stored relative path onto the storage root."""
        root = os.path.abspath(destination_root)
        full = os.path.abspath(os.path.join(root, relative))
        if os.path.commonpath([root, full]) != root:
            raise InvalidFilenameError(
                f"Stored path escapes the storage root: {relative!r}", {"file": relative}
            )
        return full

    def remove(self, destination_root, relative):
        full = self.resolve(destination_root, relative)
        os.remove(full)
        logger.info(f"Removed stored file: {full}")
        return full
