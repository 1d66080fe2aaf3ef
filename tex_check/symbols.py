"""Grouping symbols tracked by the balance checker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"


def decode_bytes(raw: bytes) -> str:
    """Decode input bytes into text without losing information.

    Undecodable bytes are kept as lone surrogates so that `encode_text`
    restores the exact original bytes.

    Examples:
        decode_bytes(b"itemize")  # "itemize"
    """
    return raw.decode(TEXT_ENCODING, TEXT_ERRORS)


def encode_text(text: str) -> bytes:
    """Inverse of `decode_bytes`."""
    return text.encode(TEXT_ENCODING, TEXT_ERRORS)


def display_text(text: str) -> str:
    """Render decoded text for output, escaping bytes that were not UTF-8.

    Examples:
        display_text(decode_bytes(b"caf\\xe9"))  # "caf\\xe9"
    """
    return encode_text(text).decode(TEXT_ENCODING, "backslashreplace")


@dataclass(frozen=True)
class Brace:
    opening: ClassVar[str] = "{"
    closing: ClassVar[str] = "}"


@dataclass(frozen=True)
class Bracket:
    opening: ClassVar[str] = "["
    closing: ClassVar[str] = "]"


@dataclass(frozen=True)
class Paren:
    opening: ClassVar[str] = "("
    closing: ClassVar[str] = ")"


@dataclass(frozen=True)
class Chevron:
    opening: ClassVar[str] = "<"
    closing: ClassVar[str] = ">"


@dataclass(frozen=True)
class Dollar:
    """Inline math shift."""

    opening: ClassVar[str] = "$"
    closing: ClassVar[str] = "$"


@dataclass(frozen=True)
class At:
    """Verbatim escape delimited by ``@`` on both sides."""

    opening: ClassVar[str] = "@"
    closing: ClassVar[str] = "@"


@dataclass(frozen=True)
class Delimiter:
    """A ``\\left`` ... ``\\right`` pair."""

    opening: ClassVar[str] = "\\left"
    closing: ClassVar[str] = "\\right"


@dataclass(frozen=True)
class StartStop:
    """A ConTeXt ``\\start<name>`` ... ``\\stop<name>`` environment.

    Attributes:
        name: Environment name following ``\\start``; may be empty.
    """

    name: str

    @property
    def opening(self) -> str:
        return f"\\start{self.name}"

    @property
    def closing(self) -> str:
        return f"\\stop{self.name}"


@dataclass(frozen=True)
class BeginEnd:
    """A LaTeX ``\\begin{<name>}`` ... ``\\end{<name>}`` environment.

    Attributes:
        name: Environment name given between braces.
    """

    name: str

    @property
    def opening(self) -> str:
        return f"\\begin{{{self.name}}}"

    @property
    def closing(self) -> str:
        return f"\\end{{{self.name}}}"


@dataclass(frozen=True)
class Other:
    """A single arbitrary byte used as a verbatim fence, as in ``\\type|code|``.

    Attributes:
        byte: Value of the fence byte (0-255).
    """

    byte: int

    @property
    def opening(self) -> str:
        return decode_bytes(bytes([self.byte]))

    @property
    def closing(self) -> str:
        return self.opening


Symbol = Union[
    Brace, Bracket, Paren, Chevron, Dollar, At, Delimiter, StartStop, BeginEnd, Other
]

_BRACKET_CLASSES: dict[int, Symbol] = {
    ord("{"): Brace(),
    ord("}"): Brace(),
    ord("["): Bracket(),
    ord("]"): Bracket(),
    ord("("): Paren(),
    ord(")"): Paren(),
    ord("<"): Chevron(),
    ord(">"): Chevron(),
}


def classify_delimiter(byte: int) -> Symbol:
    """Map the byte following a one-shot verbatim opener to its symbol.

    Bracket-like bytes (either side of the pair) map to their bracket symbol,
    so ``\\type{code}`` closes on ``}``. Any other byte fences itself.

    Args:
        byte: The delimiter byte.

    Returns:
        Symbol: The symbol whose closing spelling ends the verbatim region.

    Examples:
        classify_delimiter(ord("{"))  # Brace()
        classify_delimiter(ord("|"))  # Other(byte=124)
    """
    symbol = _BRACKET_CLASSES.get(byte)
    if symbol is None:
        return Other(byte)
    return symbol
