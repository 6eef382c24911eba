# sandboxfs_mcp/tools/files.py
import base64
from typing import Literal

from pydantic import BaseModel, Field

Encoding = Literal["utf-8", "base64"]


class FsWriteIn(BaseModel):
    path: str = Field(..., description="Key (relative path) under sandbox root")
    content: str = Field(..., description="Content to write, encoded as `encoding`")
    encoding: Encoding = Field("utf-8", description="'utf-8' text or 'base64' bytes")


class FsReadIn(BaseModel):
    path: str = Field(..., description="Key (relative path) under sandbox root")
    encoding: Encoding = Field("utf-8", description="'utf-8' text or 'base64' bytes")


class FsPathIn(BaseModel):
    path: str = Field("", description="Key (relative path) under sandbox root; '' is the root")


class FsMoveIn(BaseModel):
    path: str = Field(..., description="Source key under sandbox root")
    new_path: str = Field(..., description="Destination key under sandbox root")


def decode_content(content: str, encoding: Encoding) -> bytes:
    if encoding == "base64":
        return base64.b64decode(content, validate=True)
    return content.encode("utf-8")


def encode_content(content: bytes, encoding: Encoding) -> str:
    if encoding == "base64":
        return base64.b64encode(content).decode("ascii")
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError("Content is not valid UTF-8 text; read it with encoding='base64'") from exc
