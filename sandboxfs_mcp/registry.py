# sandboxfs_mcp/registry.py
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel

from sandboxfs.di import Container, build_container
from sandboxfs.logging import log_tool_call
from sandboxfs_mcp.tools.files import (
    FsMoveIn,
    FsPathIn,
    FsReadIn,
    FsWriteIn,
    decode_content,
    encode_content,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: Type[BaseModel]
    handler: Callable[[BaseModel], Any]


class ToolHandlers:
    """
    Named handlers for each tool (no lambdas).
    Each one is a thin adapter: the service owns containment and error semantics.
    """
    def __init__(self, container: Container):
        self.container = container

    def logged(self, name: str, handler: Callable[[BaseModel], Any]) -> Callable[[BaseModel], Any]:
        preview = self.container.settings.LOG_PREVIEW_CHARS

        def run(args: BaseModel) -> Any:
            log_tool_call(logger, name, args.model_dump(), preview)
            return handler(args)

        return run

    @property
    def fs(self):
        return self.container.fs_service

    def fs_write(self, args: FsWriteIn) -> Dict[str, Any]:
        written = self.fs.write(args.path, decode_content(args.content, args.encoding))
        return {"path": args.path, "bytes": written}

    def fs_read(self, args: FsReadIn) -> str:
        return encode_content(self.fs.read(args.path), args.encoding)

    def fs_delete(self, args: FsPathIn) -> str:
        self.fs.delete(args.path)
        return "OK"

    def fs_exists(self, args: FsPathIn) -> bool:
        return self.fs.exists(args.path)

    def fs_list(self, args: FsPathIn) -> Dict[str, Any]:
        keys = self.fs.keys(args.path)
        return {"count": len(keys), "keys": keys}

    def fs_rename(self, args: FsMoveIn) -> str:
        self.fs.rename(args.path, args.new_path)
        return "OK"

    def fs_copy(self, args: FsMoveIn) -> str:
        self.fs.copy(args.path, args.new_path)
        return "OK"

    def fs_mtime(self, args: FsPathIn) -> int:
        return self.fs.mtime(args.path)

    def fs_checksum(self, args: FsPathIn) -> str:
        return self.fs.checksum(args.path)

    def fs_mkdir(self, args: FsPathIn) -> str:
        self.fs.create_directory(args.path)
        return "OK"


def build_tool_registry(container: Optional[Container] = None) -> Dict[str, ToolSpec]:
    """
    Build a registry once at startup using DI.
    The stdio host reads from this registry to expose tools.
    """
    handlers = ToolHandlers(container or build_container())

    def tool(name, description, model, handler) -> ToolSpec:
        return ToolSpec(name, description, model, handlers.logged(name, handler))

    specs = [
        tool("fs_write", "Write a file under sandbox root, creating parent directories",
             FsWriteIn, handlers.fs_write),
        tool("fs_read", "Read a file under sandbox root", FsReadIn, handlers.fs_read),
        tool("fs_delete", "Delete a file or directory tree (no-op if absent)",
             FsPathIn, handlers.fs_delete),
        tool("fs_exists", "Check whether a key exists", FsPathIn, handlers.fs_exists),
        tool("fs_list", "List every key below a directory, recursively",
             FsPathIn, handlers.fs_list),
        tool("fs_rename", "Move a file to a new key", FsMoveIn, handlers.fs_rename),
        tool("fs_copy", "Copy a file to a new key", FsMoveIn, handlers.fs_copy),
        tool("fs_mtime", "Last modification time (unix seconds)",
             FsPathIn, handlers.fs_mtime),
        tool("fs_checksum", "Digest of a file's content", FsPathIn, handlers.fs_checksum),
        tool("fs_mkdir", "Create a directory and its parents (error if it exists)",
             FsPathIn, handlers.fs_mkdir),
    ]
    return {spec.name: spec for spec in specs}


def list_tools_payload(registry: Dict[str, ToolSpec]) -> Dict[str, Any]:
    """
    Produce the `tools/list` payload body as per MCP Tools spec.
    """
    tools = []
    for spec in registry.values():
        tools.append({
            "name": spec.name,
            "description": spec.description,
            "inputSchema": spec.input_model.model_json_schema(),
        })
    return {"tools": tools}


def dispatch_tool_call(registry: Dict[str, ToolSpec], name: str, arguments: Dict[str, Any]) -> Any:
    """
    Validate args with the tool's Pydantic model, then invoke the named handler.
    """
    if name not in registry:
        raise KeyError(f"Tool not found: {name}")
    spec = registry[name]
    args_obj = spec.input_model(**arguments)
    return spec.handler(args_obj)


def register_into_fastmcp(mcp, registry: Dict[str, ToolSpec]) -> None:
    """
    Register all registry tools into a FastMCP stdio host.
    """
    for spec in registry.values():
        # Local closure so each handler binds to its own spec
        def make_tool(spec: ToolSpec):
            def tool_handler(input_obj: spec.input_model):
                return spec.handler(input_obj)
            tool_handler.__name__ = spec.name
            return tool_handler

        mcp.tool(name=spec.name, description=spec.description)(make_tool(spec))
