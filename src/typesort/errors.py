"""Exception hierarchy shared by the organizer core."""


class TypesortError(Exception):
    """Base exception for organizer failures."""


class DestinationError(TypesortError):
    """Raised when the destination root cannot be resolved or created.

    This is the only failure that aborts a run before any file is processed.
    """


class ArchiveError(TypesortError):
    """Raised when an archive cannot be expanded."""


class UnsupportedArchiveError(ArchiveError):
    """Raised when no extraction backend is available for an archive format."""


class UnsafeArchiveError(ArchiveError):
    """Raised when an archive entry would be written outside its scratch directory."""


class ArchiveLimitError(ArchiveError):
    """Raised when an archive exceeds the configured entry count or byte limit."""


class PlacementError(TypesortError):
    """Raised when a file cannot be copied into the destination tree."""
