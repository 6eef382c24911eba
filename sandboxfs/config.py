# sandboxfs/config.py
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Filesystem sandbox
    SANDBOX_ROOT: Path = Path("./.sandbox")
    SANDBOX_CREATE: bool = True   # create the root on startup if missing

    # Digest used by fs checksum (any hashlib name)
    CHECKSUM_ALGORITHM: str = "md5"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_PREVIEW_CHARS: int = Field(default=200, ge=16, le=10_000)
