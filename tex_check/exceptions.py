"""Package-specific exception types."""

from __future__ import annotations

from pathlib import Path


class CheckError(ValueError):
    """Base class for errors that prevent a document from being checked.

    Malformed markup is never an error; it is reported as a diagnostic.
    """


class FileTooLargeError(CheckError):
    """Raised when a document exceeds the configured maximum size.

    Args:
        filepath: Path of the offending document.
        max_file_size: Maximum allowed size in bytes.
    """

    def __init__(self, filepath: Path, max_file_size: int):
        self.filepath = filepath
        self.max_file_size = max_file_size
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"{self.filepath} exceeds the maximum allowed size of {self.max_file_size} bytes."


class UnsupportedFileError(CheckError):
    """Raised when a path does not name a TeX document we accept.

    Args:
        filepath: Path that was rejected.
        extensions: Suffixes that are accepted.
    """

    def __init__(self, filepath: Path, extensions: list[str]):
        self.filepath = filepath
        self.extensions = extensions
        super().__init__(
            f"{filepath} is not a TeX file.\nSupported extensions are: {', '.join(extensions)}"
        )
