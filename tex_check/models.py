"""Data models for tex-check."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .symbols import Symbol, display_text


class ScannerMode(Enum):
    """Scanner modes used while walking the token stream.

    Attributes:
        NORMAL: Default mode for running text.
        MATH: Inside an inline math span opened by ``$``.
        VERBATIM: Inside a verbatim region; only the closing marker matters.
    """

    NORMAL = auto()
    MATH = auto()
    VERBATIM = auto()


class MismatchPolicy(str, Enum):
    """What happens to the stack when a closer does not match its top.

    Attributes:
        KEEP: Report and leave the stack untouched.
        POP: Report and discard the top element.
    """

    KEEP = "keep"
    POP = "pop"


@dataclass(frozen=True)
class LocatedSymbol:
    """A symbol paired with the one-based line where it was opened."""

    symbol: Symbol
    line: int


class DiagnosticKind(Enum):
    UNOPENED_CLOSE = auto()
    MISMATCHED_CLOSE = auto()
    UNTERMINATED_OPEN = auto()


@dataclass(frozen=True)
class Diagnostic:
    """A nesting problem found during a scan.

    Attributes:
        kind: Category of the problem.
        line: One-based line where the problem was detected.
        symbol: The closer that was found, or for unterminated opens the
            symbol left on the stack.
        expected: The stack entry that should have been closed; None for a
            close without any opener.
    """

    kind: DiagnosticKind
    line: int
    symbol: Symbol
    expected: LocatedSymbol | None = None

    def __str__(self) -> str:
        closer = display_text(self.symbol.closing)
        if self.kind is DiagnosticKind.UNOPENED_CLOSE or self.expected is None:
            return f'Line {self.line}: unexpected "{closer}", closed without opening'

        expected = self.expected.symbol
        context = (
            f'(to close "{display_text(expected.opening)}" from line {self.expected.line})'
        )
        if self.kind is DiagnosticKind.MISMATCHED_CLOSE:
            return (
                f'Line {self.line}: unexpected "{closer}", '
                f'expected "{display_text(expected.closing)}" {context}'
            )
        return f'Unexpected end of input, expected "{display_text(expected.closing)}" {context}'


@dataclass
class CheckerState:
    """Mutable state owned by a single document scan.

    Attributes:
        mode: Current scanner mode.
        line: One-based number of the line being scanned.
        stack: Open constructs, outermost first.
        verbatim_marker: Closing bytes watched for while in verbatim mode.
        resume_mode: Mode restored when the verbatim region closes.
        mismatch_policy: Stack handling for mismatched closers.
        diagnostics: Problems reported so far, in detection order.
    """

    mode: ScannerMode = ScannerMode.NORMAL
    line: int = 1
    stack: list[LocatedSymbol] = field(default_factory=list)
    verbatim_marker: bytes | None = None
    resume_mode: ScannerMode = ScannerMode.NORMAL
    mismatch_policy: MismatchPolicy = MismatchPolicy.KEEP
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class CheckResult:
    """Outcome of checking one document.

    Attributes:
        balanced: True when the scan reported no diagnostic at all.
        diagnostics: Every problem found, in detection order.
        last_line: Line number reached at the end of input.
    """

    balanced: bool
    diagnostics: list[Diagnostic]
    last_line: int
