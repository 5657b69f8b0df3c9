from __future__ import annotations

"""
Error Taxonomy.

Every fatal condition raised by the analysis core carries its kind and, where
one exists, the offending filesystem path. Intentionally dropped includes are
not errors and never appear here.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    IO = "io"
    INVARIANT = "invariant"


class IncgraphError(Exception):
    """
    Base class for fatal errors of a scan run.

    Attributes:
        kind: Category of the failure.
        path: Offending filesystem path, if the failure concerns one.
    """

    kind: ErrorKind = ErrorKind.IO

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message}: {self.path}"
        return self.message


class ConfigurationError(IncgraphError):
    """Invalid invocation parameters, reported before any scanning begins."""

    kind = ErrorKind.CONFIGURATION


class ScanIOError(IncgraphError):
    """A directory could not be listed or a source file could not be read."""

    kind = ErrorKind.IO

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message, path)


class InvariantViolation(AssertionError):
    """Internal precondition failure. Indicates a programming defect."""

    kind = ErrorKind.INVARIANT
