# tests/test_registry.py
import base64
import inspect
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from sandboxfs.config import Settings
from sandboxfs.di import build_container
from sandboxfs.errors import AlreadyExistsError, BoundaryError
from sandboxfs_mcp.registry import (
    build_tool_registry,
    dispatch_tool_call,
    list_tools_payload,
    register_into_fastmcp,
)
from sandboxfs_mcp.tools.files import FsReadIn, FsWriteIn


@pytest.fixture
def registry(tmp_path: Path):
    settings = Settings(SANDBOX_ROOT=tmp_path / "sandbox", SANDBOX_CREATE=True, LOG_PREVIEW_CHARS=16)
    return build_tool_registry(build_container(settings))


def test_tools_payload_lists_every_tool(registry):
    payload = list_tools_payload(registry)
    names = {t["name"] for t in payload["tools"]}
    assert names == {
        "fs_write", "fs_read", "fs_delete", "fs_exists", "fs_list",
        "fs_rename", "fs_copy", "fs_mtime", "fs_checksum", "fs_mkdir",
    }
    write = next(t for t in payload["tools"] if t["name"] == "fs_write")
    assert "path" in write["inputSchema"]["properties"]


def test_write_read_list_delete_roundtrip(registry):
    out = dispatch_tool_call(registry, "fs_write", {"path": "notes/a.txt", "content": "hi"})
    assert out == {"path": "notes/a.txt", "bytes": 2}
    assert dispatch_tool_call(registry, "fs_read", {"path": "notes/a.txt"}) == "hi"
    assert dispatch_tool_call(registry, "fs_list", {"path": "notes"}) == {
        "count": 1,
        "keys": ["notes/a.txt"],
    }
    assert dispatch_tool_call(registry, "fs_exists", {"path": "notes/a.txt"}) is True
    assert dispatch_tool_call(registry, "fs_delete", {"path": "notes"}) == "OK"
    assert dispatch_tool_call(registry, "fs_exists", {"path": "notes"}) is False


def test_base64_content(registry):
    raw = b"\x00\xffbinary\x00"
    encoded = base64.b64encode(raw).decode("ascii")
    dispatch_tool_call(registry, "fs_write", {"path": "b.bin", "content": encoded, "encoding": "base64"})
    assert dispatch_tool_call(registry, "fs_read", {"path": "b.bin", "encoding": "base64"}) == encoded


def test_move_copy_and_metadata(registry):
    dispatch_tool_call(registry, "fs_write", {"path": "a.txt", "content": "abc"})
    dispatch_tool_call(registry, "fs_copy", {"path": "a.txt", "new_path": "b.txt"})
    dispatch_tool_call(registry, "fs_rename", {"path": "b.txt", "new_path": "sub/c.txt"})
    assert dispatch_tool_call(registry, "fs_read", {"path": "sub/c.txt"}) == "abc"
    assert dispatch_tool_call(registry, "fs_checksum", {"path": "sub/c.txt"}) == (
        "900150983cd24fb0d6963f7d28e17f72"
    )
    assert isinstance(dispatch_tool_call(registry, "fs_mtime", {"path": "a.txt"}), int)


def test_mkdir_surfaces_service_errors(registry):
    assert dispatch_tool_call(registry, "fs_mkdir", {"path": "d"}) == "OK"
    with pytest.raises(AlreadyExistsError):
        dispatch_tool_call(registry, "fs_mkdir", {"path": "d"})
    with pytest.raises(BoundaryError):
        dispatch_tool_call(registry, "fs_read", {"path": "../../etc/passwd"})


def test_bad_calls(registry):
    with pytest.raises(KeyError):
        dispatch_tool_call(registry, "fs_nope", {})
    with pytest.raises(ValidationError):
        dispatch_tool_call(registry, "fs_rename", {"path": "a.txt"})
    with pytest.raises(ValidationError):
        dispatch_tool_call(registry, "fs_read", {"path": "a.txt", "encoding": "latin-1"})


def test_tool_calls_are_logged_redacted(registry, caplog):
    with caplog.at_level(logging.INFO, logger="sandboxfs_mcp.registry"):
        dispatch_tool_call(
            registry, "fs_write", {"path": "who.txt", "content": "mail jane@example.com now please"}
        )
    assert "tool_call fs_write" in caplog.text
    assert "jane@example.com" not in caplog.text


def test_binary_content_read_as_text_asks_for_base64(registry):
    encoded = base64.b64encode(b"\xff\xfe\x00").decode("ascii")
    dispatch_tool_call(registry, "fs_write", {"path": "bin.dat", "content": encoded, "encoding": "base64"})
    with pytest.raises(ValueError, match="base64") as exc:
        dispatch_tool_call(registry, "fs_read", {"path": "bin.dat"})
    assert not isinstance(exc.value, UnicodeDecodeError)


def test_register_into_fastmcp_binds_each_spec(registry):
    class FakeMCP:
        def __init__(self):
            self.tools = {}

        def tool(self, name, description):
            def decorator(fn):
                self.tools[name] = fn
                return fn
            return decorator

    mcp = FakeMCP()
    register_into_fastmcp(mcp, registry)

    assert set(mcp.tools) == set(registry)
    handler = mcp.tools["fs_write"]
    assert list(inspect.signature(handler).parameters) == ["input_obj"]
    assert handler(FsWriteIn(path="via-host.txt", content="ok")) == {"path": "via-host.txt", "bytes": 2}
    assert mcp.tools["fs_read"](FsReadIn(path="via-host.txt")) == "ok"
