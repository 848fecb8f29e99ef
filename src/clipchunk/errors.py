# src/clipchunk/errors.py


class ClipchunkError(Exception):
    """Base class for every error clipchunk raises on purpose."""


class ConfigurationError(ClipchunkError, ValueError):
    """Bad arguments: invalid token limit, unknown mode, missing directory."""


class EnumerationError(ClipchunkError):
    """The file pattern cannot be compiled, so no file list can be built."""


class SinkError(ClipchunkError):
    """The destination could not be acquired or rejected a chunk."""
