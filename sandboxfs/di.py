# sandboxfs/di.py
from dataclasses import dataclass
from typing import Optional

from sandboxfs.config import Settings
from sandboxfs.services.checksum import make_checksum
from sandboxfs.services.filesystem import FileSystemService


@dataclass
class Container:
    settings: Settings
    fs_service: FileSystemService


def build_container(settings: Optional[Settings] = None) -> Container:
    s = settings or Settings()
    fs = FileSystemService(
        s.SANDBOX_ROOT,
        create=s.SANDBOX_CREATE,
        checksum=make_checksum(s.CHECKSUM_ALGORITHM),
    )
    return Container(s, fs)
