"""Nesting checks for TeX and ConTeXt documents."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from .config import CheckConfig, ConfigError, normalize_config, validate_config
from .constants import (
    BEGIN,
    COMMENT_BYTE,
    END,
    ESCAPE_BYTE,
    LEFT,
    NEWLINE_BYTES,
    RIGHT,
    SPACE_BYTES,
    START_PREFIX,
    START_TYPING,
    STOP_PREFIX,
    TYPE,
)
from .exceptions import CheckError
from .filesystem import open_document
from .lexer import Lexer, Source
from .logger import get_logger
from .models import (
    CheckerState,
    CheckResult,
    Diagnostic,
    DiagnosticKind,
    LocatedSymbol,
    MismatchPolicy,
    ScannerMode,
)
from .symbols import (
    At,
    BeginEnd,
    Brace,
    Bracket,
    Chevron,
    Delimiter,
    Dollar,
    Paren,
    StartStop,
    Symbol,
    classify_delimiter,
    decode_bytes,
    display_text,
    encode_text,
)

logger = get_logger(__name__)

Report = Callable[[Diagnostic], None]

OPENERS: dict[bytes, Symbol] = {b"{": Brace(), b"[": Bracket(), b"(": Paren()}
CLOSERS: dict[bytes, Symbol] = {b"}": Brace(), b"]": Bracket(), b")": Paren()}
CHEVRON_OPEN = b"<"
CHEVRON_CLOSE = b">"


def push(state: CheckerState, symbol: Symbol) -> None:
    """Record `symbol` as opened on the current line."""
    logger.debug("line %d: push %s", state.line, display_text(symbol.opening))
    state.stack.append(LocatedSymbol(symbol, state.line))


def pop(state: CheckerState, symbol: Symbol) -> bool:
    """Close the innermost open construct, expecting it to be `symbol`.

    A close with nothing open, or one that does not match the innermost open
    construct, is recorded as a diagnostic. On a mismatch the stack is left
    alone under `MismatchPolicy.KEEP`, so a stray closer does not unwind the
    wrong layer; `MismatchPolicy.POP` discards the innermost entry instead.

    Args:
        state: Checker state to update.
        symbol: Symbol the closing token belongs to.

    Returns:
        bool: True when the closer matched and the stack was popped.

    Examples:
        state = CheckerState()
        push(state, Brace())
        pop(state, Brace())  # True
    """
    logger.debug("line %d: pop %s", state.line, display_text(symbol.closing))
    if not state.stack:
        state.diagnostics.append(Diagnostic(DiagnosticKind.UNOPENED_CLOSE, state.line, symbol))
        return False

    top = state.stack[-1]
    if top.symbol == symbol:
        state.stack.pop()
        return True

    state.diagnostics.append(
        Diagnostic(DiagnosticKind.MISMATCHED_CLOSE, state.line, symbol, expected=top)
    )
    if state.mismatch_policy is MismatchPolicy.POP:
        state.stack.pop()
    return False


def _next_non_space(lexer: Lexer) -> bytes | None:
    token = lexer.next_token()
    while token is not None and token[0] in SPACE_BYTES:
        token = lexer.next_token()
    return token


def read_group_argument(lexer: Lexer) -> str | None:
    """Read a braced argument such as the ``{itemize}`` of ``\\begin{itemize}``.

    Spaces before the opening brace are skipped. The argument is every token
    up to the closing brace on the same line.

    Args:
        lexer: Lexer positioned right after the command.

    Returns:
        str | None: The argument text, or None when no well-formed argument
            follows; the bytes looked at are then handed back to the lexer.
    """
    token = _next_non_space(lexer)
    if token != b"{":
        if token is not None:
            lexer.unread(token)
        return None

    parts: list[bytes] = []
    while True:
        token = lexer.next_token()
        if token == b"}":
            return decode_bytes(b"".join(parts))
        if token is None or token == b"{" or token[0] in NEWLINE_BYTES:
            lexer.unread(b"{" + b"".join(parts) + (token or b""))
            return None
        parts.append(token)


def read_delimiter(state: CheckerState, lexer: Lexer) -> bytes | None:
    """Consume the delimiter token after ``\\left`` or ``\\right``.

    Spaces, line breaks and comments before the delimiter are skipped, as TeX
    skips them; each line break skipped advances `state.line`.
    """
    token = lexer.next_token()
    while token is not None:
        if token[0] in NEWLINE_BYTES:
            state.line += 1
        elif token[0] not in SPACE_BYTES and token[0] != COMMENT_BYTE:
            return token
        token = lexer.next_token()
    return None


def read_fence_byte(lexer: Lexer) -> int | None:
    """Read the raw byte that fences a ``\\type`` argument.

    Spaces are skipped. A line break cannot serve as a fence; it is left in
    the input and None is returned, as it is at end of input.
    """
    byte = lexer.next_byte()
    while byte is not None and byte in SPACE_BYTES:
        byte = lexer.next_byte()
    if byte is None:
        return None
    if byte in NEWLINE_BYTES:
        lexer.unread(bytes([byte]))
        return None
    return byte


def _enter_verbatim(state: CheckerState, symbol: Symbol) -> None:
    push(state, symbol)
    logger.debug("line %d: %s -> VERBATIM", state.line, state.mode.name)
    state.resume_mode = state.mode
    state.mode = ScannerMode.VERBATIM
    state.verbatim_marker = encode_text(symbol.closing)


def _try_close_verbatim(state: CheckerState, token: bytes) -> bool:
    """Leave verbatim mode when `token` is the watched closing marker."""
    if state.mode is not ScannerMode.VERBATIM or token != state.verbatim_marker:
        return False

    pop(state, state.stack[-1].symbol)
    logger.debug("line %d: VERBATIM -> %s", state.line, state.resume_mode.name)
    state.mode = state.resume_mode
    state.resume_mode = ScannerMode.NORMAL
    state.verbatim_marker = None
    return True


def _toggle_math(state: CheckerState) -> None:
    if state.mode is ScannerMode.MATH:
        pop(state, Dollar())
        state.mode = ScannerMode.NORMAL
    else:
        push(state, Dollar())
        state.mode = ScannerMode.MATH


def _handle_escape(state: CheckerState, lexer: Lexer, token: bytes) -> None:
    if token == START_TYPING:
        _enter_verbatim(state, StartStop("typing"))
    elif token == BEGIN:
        name = read_group_argument(lexer)
        if name is not None:
            push(state, BeginEnd(name))
    elif token == END:
        name = read_group_argument(lexer)
        if name is not None:
            pop(state, BeginEnd(name))
    elif token == LEFT:
        push(state, Delimiter())
        read_delimiter(state, lexer)
    elif token == RIGHT:
        pop(state, Delimiter())
        read_delimiter(state, lexer)
    elif token == TYPE:
        fence = read_fence_byte(lexer)
        if fence is not None:
            _enter_verbatim(state, classify_delimiter(fence))
    elif token.startswith(START_PREFIX):
        push(state, StartStop(decode_bytes(token[len(START_PREFIX) :])))
    elif token.startswith(STOP_PREFIX):
        pop(state, StartStop(decode_bytes(token[len(STOP_PREFIX) :])))


def _handle_token(state: CheckerState, lexer: Lexer, token: bytes, track_chevrons: bool) -> None:
    """Apply the normal/math mode rule for one token."""
    first = token[0]
    if first in NEWLINE_BYTES:
        state.line += 1
    elif first == ESCAPE_BYTE:
        _handle_escape(state, lexer, token)
    elif token in OPENERS:
        push(state, OPENERS[token])
    elif token in CLOSERS:
        pop(state, CLOSERS[token])
    elif token == b"$":
        _toggle_math(state)
    elif token == b"@":
        _enter_verbatim(state, At())
    elif track_chevrons and token == CHEVRON_OPEN:
        push(state, Chevron())
    elif track_chevrons and token == CHEVRON_CLOSE:
        pop(state, Chevron())


def _step(state: CheckerState, lexer: Lexer, track_chevrons: bool) -> bool:
    """Consume one token; return False at end of input."""
    if state.mode is ScannerMode.VERBATIM:
        token = lexer.next_token(state.verbatim_marker)
        if token is None:
            return False
        if token[0] in NEWLINE_BYTES:
            state.line += 1
        else:
            _try_close_verbatim(state, token)
        return True

    token = lexer.next_token()
    if token is None:
        return False
    _handle_token(state, lexer, token, track_chevrons)
    return True


def _close_open_constructs(state: CheckerState) -> None:
    # Innermost first, the order in which the closers are owed.
    for located in reversed(state.stack):
        state.diagnostics.append(
            Diagnostic(
                DiagnosticKind.UNTERMINATED_OPEN, state.line, located.symbol, expected=located
            )
        )


def check_source(
    source: Source, config: CheckConfig | None = None, report: Report | None = None
) -> CheckResult:
    """Check that every construct opened in `source` is closed in order.

    The whole input is always scanned; problems are collected, never raised.
    The document is balanced only when no problem at all was found, so a
    mismatched closer fails the verdict even if the stack is empty at the end.

    Args:
        source: Document as bytes, text, or a binary stream.
        config: Checking rules. Defaults to a new `CheckConfig` when omitted.
        report: Optional callback invoked with each diagnostic as it is found.

    Returns:
        CheckResult: Verdict and diagnostics in detection order.

    Raises:
        ConfigError: If the configuration fails validation.

    Examples:
        check_source("a {b (c) d} e").balanced  # True
        check_source(b"\\type|a{b|").balanced  # True
    """
    config = normalize_config(config or CheckConfig())
    validate_config(config)

    state = CheckerState(mismatch_policy=MismatchPolicy(config.mismatch_policy))
    lexer = Lexer(source, config.chunk_size)

    reported = 0
    while _step(state, lexer, config.track_chevrons):
        reported = _forward(state, reported, report)
    _close_open_constructs(state)
    _forward(state, reported, report)

    return CheckResult(
        balanced=not state.diagnostics,
        diagnostics=list(state.diagnostics),
        last_line=state.line,
    )


def _forward(state: CheckerState, reported: int, report: Report | None) -> int:
    if report is not None:
        for diagnostic in state.diagnostics[reported:]:
            report(diagnostic)
    return len(state.diagnostics)


class CheckFileError(Exception):
    """Raised when a document cannot be checked."""


def check_file(
    filepath: Path, config: CheckConfig | None = None, report: Report | None = None
) -> CheckResult:
    """Check a TeX document on disk.

    Args:
        filepath: Path to the document.
        config: Checking rules and limits; defaults to a new `CheckConfig`.
        report: Optional callback invoked with each diagnostic as it is found.

    Returns:
        CheckResult: Verdict and diagnostics for the document.

    Raises:
        CheckFileError: If the configuration is invalid, the file is too
            large, or it cannot be read.

    Examples:
        result = check_file(Path("thesis.tex"))
    """
    config = config or CheckConfig()
    try:
        validate_config(config)
    except ConfigError as error:
        raise CheckFileError(str(error)) from error

    try:
        with open_document(filepath, config.max_file_size) as stream:
            return check_source(stream, config, report)
    except (IOError, CheckError) as error:
        raise CheckFileError(str(error)) from error
