"""
Custom exception hierarchy for the MIDI catalog builder.

This module defines a structured hierarchy of exceptions that separates
per-file grammar rejections from run-level failures and filesystem errors.
"""


class MusicCatalogError(Exception):
    """Base class for all application-specific errors."""
    pass


class ConfigurationError(MusicCatalogError):
    """Raised when there are configuration-related issues."""
    pass


class GrammarRejectionError(MusicCatalogError):
    """Raised when a filename does not follow <difficulty>-<title>-<artist>.mid(i)."""

    def __init__(self, filename: str, reason, detail: str = None):
        self.filename = filename
        self.reason = reason
        self.detail = detail

        message = f"Filename rejected ({getattr(reason, 'value', reason)}): {filename}"
        if detail:
            message += f" - {detail}"

        super().__init__(message)


class NoAcceptedFilesError(MusicCatalogError):
    """Raised when candidate files existed but none of them passed parsing."""

    def __init__(self, rejected_count: int, result=None):
        self.rejected_count = rejected_count
        self.result = result
        super().__init__(
            f"No processable files: all {rejected_count} candidate file(s) were rejected"
        )


class LibraryLayoutError(MusicCatalogError):
    """Raised when neither the drop folder nor the library folder exists."""

    def __init__(self, new_dir: str, midi_dir: str):
        self.new_dir = new_dir
        self.midi_dir = midi_dir
        super().__init__(f"Both {new_dir} and {midi_dir} are missing")


class FilesystemError(MusicCatalogError):
    """Raised when filesystem operations fail."""

    def __init__(self, path: str, operation: str, reason: str = None):
        self.path = path
        self.operation = operation
        self.reason = reason

        message = f"Filesystem error during {operation} on {path}"
        if reason:
            message += f": {reason}"

        super().__init__(message)
