# sandboxfs/errors.py


class SandboxError(Exception):
    """Base class for every error raised by the sandboxed filesystem."""


class BoundaryError(SandboxError, PermissionError):
    """A key or path resolves outside the sandbox root."""


class MissingDirectoryError(SandboxError, FileNotFoundError):
    """A directory was required but does not exist."""


class AlreadyExistsError(SandboxError, FileExistsError):
    """A directory was about to be created but already exists."""


class StorageError(SandboxError, OSError):
    """An underlying filesystem primitive failed."""
