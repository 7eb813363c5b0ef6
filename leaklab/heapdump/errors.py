"""Exceptions raised by the heap snapshot utilities."""

from __future__ import annotations


class HeapdumpError(Exception):
    """Base class for heap snapshot failures."""


class DirectoryCreationError(HeapdumpError, OSError):
    """The snapshot output directory could not be created.

    Also an OSError carrying the original errno, strerror and filename, so
    callers that handle filesystem errors keep working.
    """


class SnapshotWriteError(HeapdumpError):
    """The snapshot primitive failed while writing the file."""


class SnapshotStatError(HeapdumpError):
    """A snapshot file could not be stat'ed."""


class SnapshotListError(HeapdumpError):
    """The snapshot directory could not be listed."""


UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


def describe(exc: BaseException) -> str:
    """Message of ``exc``, or the generic fallback when it carries none."""
    return str(exc) or UNKNOWN_ERROR_MESSAGE
