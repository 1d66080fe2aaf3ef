"""Constants used across the tex-check package."""

from __future__ import annotations

import string

from .config import CheckConfig

DEFAULT_CONFIG = CheckConfig()

# Input defaults
TEX_EXTENSIONS = tuple(DEFAULT_CONFIG.extensions)
DEFAULT_MAX_FILE_SIZE = DEFAULT_CONFIG.max_file_size
DEFAULT_CHUNK_SIZE = DEFAULT_CONFIG.chunk_size

# Byte classes for the tokenizer
NEWLINE_BYTES = frozenset(b"\n\r")
SPACE_BYTES = frozenset(b" \t")
LETTER_BYTES = frozenset(string.ascii_letters.encode("ascii"))
DIGIT_BYTES = frozenset(string.digits.encode("ascii"))
ESCAPE_BYTE = ord("\\")
COMMENT_BYTE = ord("%")
CARRIAGE_RETURN = ord("\r")
LINE_FEED = ord("\n")

# Control words with a dedicated checker rule
BEGIN = b"\\begin"
END = b"\\end"
LEFT = b"\\left"
RIGHT = b"\\right"
TYPE = b"\\type"
START_TYPING = b"\\starttyping"
START_PREFIX = b"\\start"
STOP_PREFIX = b"\\stop"
