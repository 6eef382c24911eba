# sandboxfs/services/filesystem.py
import logging
import os
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Union

from sandboxfs.errors import AlreadyExistsError, MissingDirectoryError, StorageError
from sandboxfs.services.checksum import Checksum, md5_checksum
from sandboxfs.services.paths import PathTranslator

logger = logging.getLogger(__name__)

DIRECTORY_MODE = 0o777

# ValueError: a path with an embedded NUL byte
FS_ERRORS = (OSError, ValueError)


@contextmanager
def permission_mask(mask: int) -> Iterator[int]:
    """Set the process umask for the duration of the block, then restore it."""
    previous = os.umask(mask)
    try:
        yield previous
    finally:
        os.umask(previous)


class FileSystemService:
    """
    Sandbox all file operations inside a root directory.

    Callers address entries by key: a forward-slash path relative to the root,
    where '' is the root itself. Every operation translates the key first and
    fails with BoundaryError before touching the disk if it escapes the root.
    OS failures surface as StorageError chained to the underlying error.
    """

    def __init__(
        self,
        root: Union[str, Path],
        create: bool = False,
        checksum: Checksum = md5_checksum,
    ):
        self._paths = PathTranslator(str(root))
        self.root = self._paths.root
        self._checksum = checksum
        self.ensure_directory_exists("", create)

    # ---------- Key <-> path ----------

    def normalize_path(self, path: str) -> str:
        return self._paths.normalize(path)

    def compute_path(self, key: str) -> str:
        return self._paths.compute_path(key)

    def compute_key(self, path: str) -> str:
        return self._paths.compute_key(path)

    # ---------- Directories ----------

    def ensure_directory_exists(self, key: str, create: bool = False) -> None:
        if not os.path.isdir(self.compute_path(key)):
            if not create:
                raise MissingDirectoryError(f"The directory '{key}' does not exist.")
            self.create_directory(key)

    def create_directory(self, key: str) -> None:
        """
        Create the directory and any missing parents with mode 0777.
        Existing directories are an error, not a no-op.
        """
        path = self.compute_path(key)
        if os.path.isdir(path):
            raise AlreadyExistsError(f"The directory '{key}' already exists.")

        try:
            with permission_mask(0):
                os.makedirs(path, DIRECTORY_MODE)
        except FileExistsError as exc:
            if os.path.isdir(path):
                # Another creator got there between the check and makedirs
                raise AlreadyExistsError(f"The directory '{key}' already exists.") from exc
            raise StorageError(f"The directory '{key}' could not be created.") from exc
        except FS_ERRORS as exc:
            raise StorageError(f"The directory '{key}' could not be created.") from exc

        logger.info("created directory %r", key)

    def is_directory(self, key: str) -> bool:
        return os.path.isdir(self.compute_path(key))

    def _materialize_parent(self, path: str) -> None:
        if path != self.root:
            self.ensure_directory_exists(self.compute_key(os.path.dirname(path)), create=True)

    # ---------- Files ----------

    def read(self, key: str) -> bytes:
        path = self.compute_path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FS_ERRORS as exc:
            raise StorageError(f"Could not read the '{key}' file.") from exc

    def write(self, key: str, content: Union[bytes, str]) -> int:
        """Create or truncate the file, creating parent directories as needed."""
        path = self.compute_path(key)
        self._materialize_parent(path)

        if isinstance(content, str):
            content = content.encode("utf-8")
        try:
            with open(path, "wb") as f:
                f.write(content)
        except FS_ERRORS as exc:
            raise StorageError(f"Could not write the '{key}' file.") from exc

        logger.debug("wrote %d bytes to %r", len(content), key)
        return len(content)

    def rename(self, key: str, new_key: str) -> None:
        source = self.compute_path(key)
        target = self.compute_path(new_key)
        if not os.path.lexists(source):
            raise StorageError(f"Could not rename the '{key}' file: it does not exist.")
        self._materialize_parent(target)
        try:
            os.replace(source, target)
        except FS_ERRORS as exc:
            raise StorageError(f"Could not rename the '{key}' file to '{new_key}'.") from exc

    def copy(self, key: str, new_key: str) -> None:
        source = self.compute_path(key)
        target = self.compute_path(new_key)
        if not os.path.isfile(source):
            raise StorageError(f"Could not copy the '{key}' file: it is not a file.")
        self._materialize_parent(target)
        try:
            shutil.copyfile(source, target)
        except FS_ERRORS as exc:
            raise StorageError(f"Could not copy the '{key}' file to '{new_key}'.") from exc

    def exists(self, key: str) -> bool:
        return os.path.exists(self.compute_path(key))

    def mtime(self, key: str) -> int:
        path = self.compute_path(key)
        try:
            return int(os.stat(path).st_mtime)
        except FS_ERRORS as exc:
            raise StorageError(f"Could not get the mtime of the '{key}' file.") from exc

    def size(self, key: str) -> int:
        path = self.compute_path(key)
        try:
            return os.stat(path).st_size
        except FS_ERRORS as exc:
            raise StorageError(f"Could not get the size of the '{key}' file.") from exc

    def checksum(self, key: str) -> str:
        return self._checksum(self.read(key))

    # ---------- Trees ----------

    def keys(self, key: str = "") -> List[str]:
        """
        Every file and directory key below `key`, at any depth, sorted.
        The starting directory itself is not included. Symlinked
        directories are listed but never descended into.
        """
        path = self.compute_path(key)
        if not os.path.isdir(path) or (path != self.root and os.path.islink(path)):
            raise StorageError(f"Could not list the '{key}' directory.")

        def _fail(exc: OSError) -> None:
            raise StorageError(f"Could not list the '{key}' directory.") from exc

        found: List[str] = []
        for dirpath, dirnames, filenames in os.walk(path, onerror=_fail):
            for name in dirnames + filenames:
                found.append(self.compute_key(os.path.join(dirpath, name)))
        return sorted(found)

    def delete(self, key: str) -> None:
        """
        Remove a file or a whole directory tree. Absent keys are a no-op.

        A child that cannot be removed gets its mode forced to 0777 and is
        retried once; a second failure propagates.
        """
        path = self.compute_path(key)
        if not os.path.lexists(path):
            return

        if os.path.isdir(path) and not os.path.islink(path):
            self._delete_directory(key, path)
            logger.info("deleted directory %r", key)
            return

        try:
            os.unlink(path)
        except FS_ERRORS as exc:
            raise StorageError(f"Could not remove the '{key}' file.") from exc
        logger.debug("deleted %r", key)

    def _delete_directory(self, key: str, path: str) -> None:
        try:
            entries = sorted(os.listdir(path))
        except FS_ERRORS as exc:
            raise StorageError(f"Could not list the '{key}' directory.") from exc

        for entry in entries:
            child = self.compute_key(os.path.join(path, entry))
            try:
                self.delete(child)
            except StorageError as exc:
                logger.warning("could not delete %r (%s), retrying with mode 0777", child, exc)
                self._open_permissions(child)
                self.delete(child)

        try:
            os.rmdir(path)
        except FS_ERRORS as exc:
            raise StorageError(f"Could not remove the '{key}' directory.") from exc

    def _open_permissions(self, key: str) -> None:
        path = self.compute_path(key)
        # chmod would follow the link out of the sandbox
        if os.path.islink(path):
            return
        try:
            os.chmod(path, DIRECTORY_MODE)
        except FS_ERRORS as exc:
            raise StorageError(f"Could not change the permissions of '{key}'.") from exc
