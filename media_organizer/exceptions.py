"""
Custom exception hierarchy for the media organizer.

Per-file errors derive from MediaOrganizerError so the placement engine can
isolate them; only SourceRootError is allowed to abort a whole run.
"""


class MediaOrganizerError(Exception):
    """Base exception for all media organizer errors."""
    pass


class SourceRootError(MediaOrganizerError):
    """Raised when the source root is missing or is not a directory."""
    pass


class FileHashError(MediaOrganizerError):
    """Raised when file hashing fails."""
    pass


class FileOperationError(MediaOrganizerError):
    """Raised when directory creation or copy/move operations fail."""
    pass
