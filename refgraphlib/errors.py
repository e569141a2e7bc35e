"""Exception types raised by RefGraphLib."""

from typing import Optional


class RefGraphError(Exception):
    """Base class for RefGraphLib errors."""


class UserError(RefGraphError):
    """An input supplied by the user refers to something that does not exist
    or is otherwise unusable (unknown module, missing version, bad mapping)."""


class SynchronizationError(RefGraphError):
    """A workspace is not synchronized with its remote.

    Traversals treat this as fatal: it is never resolved through the
    error policy.
    """

    def __init__(self, message: str, path: Optional[object] = None):
        super().__init__(message)
        self.path = path


class ConfigurationError(RefGraphError):
    """A traversal configuration failed validation."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("Invalid configuration: " + "; ".join(self.problems))


class PropertiesError(RefGraphError):
    """A properties store could not be read or written."""
