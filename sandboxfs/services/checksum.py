# sandboxfs/services/checksum.py
import hashlib
from typing import Callable

Checksum = Callable[[bytes], str]


def md5_checksum(content: bytes) -> str:
    return hashlib.md5(content).hexdigest()


def make_checksum(algorithm: str = "md5") -> Checksum:
    """
    Return a `bytes -> hex digest` function for any hashlib algorithm.
    Raises ValueError up front for unknown names.
    """
    name = algorithm.strip().lower()
    if name == "md5":
        return md5_checksum
    # shake_* digests need an explicit length
    if name not in hashlib.algorithms_available or name.startswith("shake_"):
        raise ValueError(f"Unsupported checksum algorithm: {algorithm}")

    def checksum(content: bytes) -> str:
        return hashlib.new(name, content).hexdigest()

    checksum.__name__ = f"{name}_checksum"
    return checksum
