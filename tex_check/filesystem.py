"""Filesystem helpers for tex-check."""

from __future__ import annotations

import os
import stat
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO

from .constants import DEFAULT_MAX_FILE_SIZE, TEX_EXTENSIONS
from .exceptions import FileTooLargeError, UnsupportedFileError

MAX_FILE_SIZE_ENV_VAR = "TEX_CHECK_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Resolve the maximum allowed file size.

    Args:
        default: Fallback value in bytes when the environment variable is unset.

    Returns:
        int: Maximum allowed file size in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["TEX_CHECK_MAX_FILE_SIZE"] = "204800"
        limit = get_max_file_size(default=102400)
    """
    env_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if env_value is None:
        return default

    try:
        max_size = int(env_value)
    except ValueError as error:
        error_message = (
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {env_value} (expected positive integer)"
        )
        raise ValueError(error_message) from error

    if max_size <= 0:
        error_message = f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {max_size}."
        raise ValueError(error_message)

    return max_size


def normalize_filepath(raw_path: str, extensions: Sequence[str] = TEX_EXTENSIONS) -> Path:
    """Resolve and validate the path of a TeX document.

    Args:
        raw_path: User-supplied path (absolute, relative, or starting with ``~``).
        extensions: Accepted lower-case suffixes, including the leading dot.

    Returns:
        Path: Absolute path to the document.

    Raises:
        ValueError: If the path does not exist or is not a regular file.
        UnsupportedFileError: If the suffix is not one of `extensions`.

    Examples:
        normalize_filepath("chapters/intro.tex")
        normalize_filepath("~/notes.mkiv")
    """
    path = Path(raw_path).expanduser()

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        error_message = f"{path} does not exist."
        raise ValueError(error_message) from error
    except OSError as error:
        error_message = f"Error resolving {path}: {error}"
        raise ValueError(error_message) from error

    if not resolved.is_file():
        error_message = f"{resolved} is not a regular file."
        raise ValueError(error_message)

    if resolved.suffix.lower() not in extensions:
        raise UnsupportedFileError(resolved, list(extensions))

    return resolved


def collect_file_stat(filepath: Path) -> os.stat_result:
    """Return stat information for a regular file.

    Args:
        filepath: Path to the file.

    Returns:
        os.stat_result: File metadata.

    Raises:
        IOError: If the path is inaccessible or not a regular file.

    Examples:
        stat_result = collect_file_stat(Path("thesis.tex"))
    """
    try:
        stat_result = os.stat(filepath)
    except OSError as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error

    if not stat.S_ISREG(stat_result.st_mode):
        error_message = f"{filepath} is not a regular file."
        raise IOError(error_message)

    return stat_result


def enforce_file_size(stat_result: os.stat_result, max_size: int, filepath: Path) -> None:
    """Guard against files that exceed the configured maximum size.

    Raises:
        FileTooLargeError: If `stat_result.st_size` exceeds `max_size`.

    Examples:
        enforce_file_size(os.stat("thesis.tex"), 102400, Path("thesis.tex"))
    """
    if stat_result.st_size > max_size:
        raise FileTooLargeError(filepath, max_size)


def safe_open(filepath: Path) -> BinaryIO:
    """Open a file for binary reading with consistent error handling.

    Args:
        filepath: Path to the file.

    Returns:
        BinaryIO: File handle opened for reading bytes.

    Raises:
        IOError: If the path is missing, inaccessible, or not a file.

    Examples:
        with safe_open(Path("thesis.tex")) as handle:
            head = handle.read(64)
    """
    try:
        return open(filepath, "rb")
    except (
        FileNotFoundError,
        PermissionError,
        IsADirectoryError,
        NotADirectoryError,
    ) as error:
        error_message = f"Error accessing {filepath}: {error}"
        raise IOError(error_message) from error


def open_document(filepath: Path, max_file_size: int) -> BinaryIO:
    """Open a document for binary reading after checking its type and size.

    Args:
        filepath: Path to the document.
        max_file_size: Maximum allowed size in bytes.

    Returns:
        BinaryIO: File handle opened for reading bytes.

    Raises:
        IOError: If the path is inaccessible or not a regular file.
        FileTooLargeError: If the file exceeds `max_file_size`.
    """
    stat_result = collect_file_stat(filepath)
    enforce_file_size(stat_result, max_file_size, filepath)
    return safe_open(filepath)
