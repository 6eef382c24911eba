# sandboxfs/services/paths.py
import os

from sandboxfs.errors import BoundaryError


def normalize_path(path: str) -> str:
    """
    Collapse '.'/'..' segments and redundant separators into an absolute path.
    Pure string work: symlinks are not resolved and nothing is stat'ed.
    """
    return os.path.abspath(os.path.normpath(path))


def is_within(root: str, path: str) -> bool:
    # Segment-aligned: '/data2' is not inside '/data'.
    try:
        return os.path.commonpath([root, path]) == root
    except ValueError:
        # Different drives on Windows
        return False


class PathTranslator:
    """
    Maps logical keys ('a/b/c.txt') to physical paths under a fixed root and back.

    Every mapping normalizes first and checks containment second, so a key
    like '../../etc/passwd' can never produce a path outside the root.
    """

    def __init__(self, root: str):
        self.root = normalize_path(root)

    def normalize(self, path: str) -> str:
        return normalize_path(path)

    def compute_path(self, key: str) -> str:
        # A leading slash in the key is treated as relative to the root.
        path = self.normalize(os.path.join(self.root, key.lstrip("/")))
        if not is_within(self.root, path):
            raise BoundaryError(f"The file '{key}' is out of the filesystem.")
        return path

    def compute_key(self, path: str) -> str:
        path = self.normalize(path)
        if not is_within(self.root, path):
            raise BoundaryError(f"The path '{path}' is out of the filesystem.")
        key = path[len(self.root):].lstrip(os.sep)
        if os.sep != "/":
            key = key.replace(os.sep, "/")
        return key
