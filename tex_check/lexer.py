"""Tokenizer for TeX-like markup.

The split functions are pure: given a buffer, a cursor and whether the buffer
holds the final bytes of the input, they return the length and bytes of the
next token, or None when more input is needed to decide. `Lexer` drives them
over an in-memory buffer or a binary stream read in chunks.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import BinaryIO, Callable, Optional, Union

from .constants import (
    CARRIAGE_RETURN,
    COMMENT_BYTE,
    DEFAULT_CHUNK_SIZE,
    DIGIT_BYTES,
    ESCAPE_BYTE,
    LETTER_BYTES,
    LINE_FEED,
    NEWLINE_BYTES,
    SPACE_BYTES,
)
from .symbols import encode_text

Source = Union[bytes, bytearray, str, BinaryIO]
SplitResult = Optional[tuple[int, bytes]]

SPACE_RUN = re.compile(rb"[ \t]+")
LETTER_RUN = re.compile(rb"[A-Za-z]+")
DIGIT_RUN = re.compile(rb"[0-9]+")
NEWLINE = re.compile(rb"[\r\n]")


def _split_newline(data: bytes, pos: int, at_eof: bool) -> SplitResult:
    # "\r\n" counts as a single line break.
    if data[pos] == CARRIAGE_RETURN:
        if pos + 1 < len(data):
            if data[pos + 1] == LINE_FEED:
                return 2, data[pos : pos + 2]
        elif not at_eof:
            return None
    return 1, data[pos : pos + 1]


def _split_run(data: bytes, pos: int, pattern: re.Pattern, at_eof: bool) -> SplitResult:
    end = pattern.match(data, pos).end()
    if end == len(data) and not at_eof:
        return None
    return end - pos, data[pos:end]


def _split_escape(data: bytes, pos: int, at_eof: bool) -> SplitResult:
    """Split a control word (``\\begin``) or a control symbol (``\\$``)."""
    letters = LETTER_RUN.match(data, pos + 1)
    if letters is not None:
        end = letters.end()
        if end == len(data) and not at_eof:
            return None
        return end - pos, data[pos:end]

    if pos + 1 == len(data):
        if not at_eof:
            return None
        return 1, data[pos : pos + 1]

    # A backslash never swallows a line break.
    if data[pos + 1] in NEWLINE_BYTES:
        return 1, data[pos : pos + 1]
    return 2, data[pos : pos + 2]


def _split_comment(data: bytes, pos: int, at_eof: bool) -> SplitResult:
    newline = NEWLINE.search(data, pos)
    if newline is None:
        if not at_eof:
            return None
        return len(data) - pos, data[pos:]
    end = newline.start()
    return end - pos, data[pos:end]


def split_token(data: bytes, pos: int = 0, at_eof: bool = True) -> SplitResult:
    r"""Split the next token in normal or math mode.

    Rules, applied to the byte at `pos`: a line break; a run of spaces and
    tabs; a run of ASCII letters; a run of digits; an escape (backslash plus
    a run of letters, or backslash plus one other byte); a comment up to the
    line break; any other single byte.

    Args:
        data: Buffer holding the input.
        pos: Zero-based index of the first unconsumed byte.
        at_eof: Whether `data` ends at the end of the input.

    Returns:
        SplitResult: ``(length, token)``, or None when the buffer is exhausted
            or when more input is needed to find the end of the token.

    Examples:
        split_token(b"\\begin{x}")  # (6, b"\\begin")
        split_token(b"word", at_eof=False)  # None, the word may continue
    """
    if pos >= len(data):
        return None

    byte = data[pos]
    if byte in NEWLINE_BYTES:
        return _split_newline(data, pos, at_eof)
    if byte in SPACE_BYTES:
        return _split_run(data, pos, SPACE_RUN, at_eof)
    if byte in LETTER_BYTES:
        return _split_run(data, pos, LETTER_RUN, at_eof)
    if byte in DIGIT_BYTES:
        return _split_run(data, pos, DIGIT_RUN, at_eof)
    if byte == ESCAPE_BYTE:
        return _split_escape(data, pos, at_eof)
    if byte == COMMENT_BYTE:
        return _split_comment(data, pos, at_eof)
    return 1, data[pos : pos + 1]


def split_verbatim(data: bytes, marker: bytes, pos: int = 0, at_eof: bool = True) -> SplitResult:
    r"""Split the next token inside a verbatim region.

    Verbatim content is opaque: the only tokens are line breaks, the literal
    closing `marker`, and the content between them.

    Args:
        data: Buffer holding the input.
        marker: Closing spelling that ends the region, such as ``b"|"`` or
            ``b"\\stoptyping"``. Never contains a line break.
        pos: Zero-based index of the first unconsumed byte.
        at_eof: Whether `data` ends at the end of the input.

    Returns:
        SplitResult: ``(length, token)``, or None when the buffer is exhausted
            or more input is needed.

    Raises:
        ValueError: If `marker` is empty.

    Examples:
        split_verbatim(b"a{b|c", b"|")  # (3, b"a{b")
        split_verbatim(b"|c", b"|")  # (1, b"|")
    """
    if not marker:
        raise ValueError("verbatim marker must not be empty")
    if pos >= len(data):
        return None

    if data[pos] in NEWLINE_BYTES:
        return _split_newline(data, pos, at_eof)
    if data.startswith(marker, pos):
        return len(marker), data[pos : pos + len(marker)]

    newline = NEWLINE.search(data, pos + 1)
    line_end = len(data) if newline is None else newline.start()
    hit = data.find(marker, pos + 1, line_end)
    end = line_end if hit == -1 else hit
    if end == len(data) and not at_eof:
        return None
    return end - pos, data[pos:end]


class Lexer:
    """Pull tokens from bytes, text, or a binary stream.

    Streams are read `chunk_size` bytes at a time; unconsumed bytes are kept
    across reads. Bytes handed back through `unread` are split again by the
    next call, under whatever mode that call asks for.

    Args:
        source: Input document. Text is encoded as UTF-8.
        chunk_size: Number of bytes read from a stream per refill.
    """

    def __init__(self, source: Source, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if isinstance(source, str):
            source = encode_text(source)
        if isinstance(source, (bytes, bytearray)):
            self._stream = None
            self._buffer = bytes(source)
            self._eof = True
        else:
            self._stream = source
            self._buffer = b""
            self._eof = False
        self._pos = 0
        self.chunk_size = chunk_size

    def _fill(self) -> None:
        chunk = self._stream.read(self.chunk_size)
        if not chunk:
            self._eof = True
            return
        self._buffer = self._buffer[self._pos :] + chunk
        self._pos = 0

    def _next(self, split: Callable[[bytes, int, bool], SplitResult]) -> bytes | None:
        while True:
            result = split(self._buffer, self._pos, self._eof)
            if result is not None:
                length, token = result
                self._pos += length
                return token
            if self._eof:
                return None
            self._fill()

    def next_token(self, marker: bytes | None = None) -> bytes | None:
        """Return the next token, or None at end of input.

        Args:
            marker: Closing spelling of the open verbatim region; when given,
                verbatim splitting replaces the normal rules.
        """
        if marker is None:
            return self._next(split_token)
        return self._next(lambda data, pos, at_eof: split_verbatim(data, marker, pos, at_eof))

    def next_byte(self) -> int | None:
        """Return the next raw byte, or None at end of input."""
        while self._pos >= len(self._buffer):
            if self._eof:
                return None
            self._fill()

        byte = self._buffer[self._pos]
        self._pos += 1
        return byte

    def unread(self, raw: bytes) -> None:
        """Put `raw` back in front of the unconsumed input."""
        if raw:
            self._buffer = raw + self._buffer[self._pos :]
            self._pos = 0

    def __iter__(self) -> Iterator[bytes]:
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token


def tokenize(source: Source, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the normal-mode tokens of `source`.

    Examples:
        list(tokenize("a {b}"))  # [b"a", b" ", b"{", b"b", b"}"]
    """
    return iter(Lexer(source, chunk_size))
