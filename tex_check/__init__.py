"""
tex-check: nesting checker for TeX and ConTeXt documents.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    tex-check thesis.tex

Library Usage:
    from pathlib import Path
    from tex_check import check_file, check_source

    result = check_source(r"\\begin{itemize} \\item {a] \\end{itemize}")
    for diagnostic in result.diagnostics:
        print(diagnostic)

    result = check_file(Path("thesis.tex"))
    print("balanced" if result.balanced else "unbalanced")
"""

from .checker import CheckFileError, check_file, check_source
from .config import CheckConfig, ConfigError
from .exceptions import CheckError, FileTooLargeError, UnsupportedFileError
from .lexer import Lexer, split_token, split_verbatim, tokenize
from .models import CheckResult, Diagnostic, DiagnosticKind, LocatedSymbol, MismatchPolicy
from .symbols import (
    At,
    BeginEnd,
    Brace,
    Bracket,
    Chevron,
    Delimiter,
    Dollar,
    Other,
    Paren,
    StartStop,
    Symbol,
    classify_delimiter,
)

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "check_source",
    "check_file",
    "tokenize",
    "split_token",
    "split_verbatim",
    "Lexer",
    # Data models
    "CheckResult",
    "Diagnostic",
    "DiagnosticKind",
    "LocatedSymbol",
    "MismatchPolicy",
    # Symbols
    "Symbol",
    "Brace",
    "Bracket",
    "Paren",
    "Chevron",
    "Dollar",
    "At",
    "Delimiter",
    "StartStop",
    "BeginEnd",
    "Other",
    "classify_delimiter",
    # Configuration
    "CheckConfig",
    # Exceptions
    "CheckError",
    "CheckFileError",
    "ConfigError",
    "FileTooLargeError",
    "UnsupportedFileError",
    # Version
    "__version__",
]
