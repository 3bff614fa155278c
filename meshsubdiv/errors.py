"""
Error Types
===========

Typed failures raised by the mesh toolkit.
"""

from typing import Optional


class MeshError(Exception):
    """Base class for all mesh toolkit errors."""


class FormatError(MeshError, ValueError):
    """
    Malformed mesh text (missing header, bad counts, bad vertex/face line).

    Attributes:
        line: Index of the offending line within its block, when known
    """

    def __init__(self, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.line = line


class NotFoundError(MeshError, LookupError):
    """A named mesh resource could not be located."""

    def __init__(self, name: str, searched: Optional[list] = None):
        self.name = name
        self.searched = list(searched) if searched else []
        message = f"Failed to find mesh resource '{name}'"
        if self.searched:
            message += " in: " + ", ".join(str(p) for p in self.searched)
        super().__init__(message)


class DegenerateInputError(MeshError, ValueError):
    """Geometry that an operation cannot handle (e.g. no vertices to center)."""


class ReadError(MeshError, OSError):
    """A mesh file exists but could not be read."""
