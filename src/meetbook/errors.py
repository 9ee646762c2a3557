"""Exception types shared across meetbook."""

from __future__ import annotations


class MeetbookError(Exception):
    """Base class for all meetbook errors."""


class BackupFormatError(MeetbookError):
    """A backup document is malformed or incomplete."""


class EngineError(MeetbookError):
    """The text-generation engine failed to produce a response."""


class FileHostError(MeetbookError):
    """A file save/open or external-link operation failed."""


class NoContactsError(MeetbookError):
    """A meeting cannot be scheduled before any contact exists."""
