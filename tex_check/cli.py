"""
Checks that groups, environments, math and verbatim spans in TeX and ConTeXt
documents are closed in the order they were opened.
"""

from __future__ import annotations

import json
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path

import click
from .checker import CheckFileError, check_file, check_source
from .config import CheckConfig, ConfigError, build_config
from .filesystem import get_max_file_size, normalize_filepath, open_document
from .lexer import tokenize
from .logger import disable_trace, enable_trace
from .models import CheckResult
from .symbols import decode_bytes

__all__ = ["cli"]

STDIN_PATH = "-"

EXIT_UNBALANCED = 1
EXIT_UNCHECKED = 2


@dataclass
class _Outcome:
    filepath: str
    result: CheckResult | None = None
    error: str | None = None


def _resolve_config(filepath: str, overrides: dict[str, object]) -> CheckConfig:
    search_path = Path.cwd() if filepath == STDIN_PATH else Path(filepath).expanduser().parent
    try:
        config = build_config(search_path, **overrides)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    return replace(config, max_file_size=max_file_size)


def _check_one(filepath: str, overrides: dict[str, object]) -> _Outcome:
    config = _resolve_config(filepath, overrides)
    if filepath == STDIN_PATH:
        return _Outcome(filepath, result=check_source(click.get_binary_stream("stdin"), config))

    try:
        resolved = normalize_filepath(filepath, config.extensions)
        return _Outcome(filepath, result=check_file(resolved, config))
    except (ValueError, CheckFileError) as error:
        return _Outcome(filepath, error=str(error))


def _dump_tokens(filepath: str, overrides: dict[str, object]) -> str | None:
    """Print the tokens of one document; return an error message on failure."""
    config = _resolve_config(filepath, overrides)
    if filepath == STDIN_PATH:
        for token in tokenize(click.get_binary_stream("stdin"), config.chunk_size):
            click.echo(json.dumps(decode_bytes(token)))
        return None

    try:
        resolved = normalize_filepath(filepath, config.extensions)
        with open_document(resolved, config.max_file_size) as source:
            for token in tokenize(source, config.chunk_size):
                click.echo(json.dumps(decode_bytes(token)))
    except (ValueError, IOError) as error:
        return str(error)
    return None


@click.command()
@click.version_option(package_name="tex-check")
@click.option(
    "--mismatch-policy",
    type=click.Choice(["keep", "pop"]),
    help="Keep or drop the open construct when a closer does not match it",
)
@click.option("--chevrons/--no-chevrons", default=None, help="Check < and > as a bracket pair")
@click.option("--tokens", is_flag=True, help="Print the token stream instead of checking")
@click.option("--trace", is_flag=True, help="Log every push, pop and mode switch to stderr")
@click.option("-q", "--quiet", is_flag=True, help="Only report through the exit code")
@click.option("-j", "--jobs", type=click.IntRange(min=1), default=1, help="Files checked at once")
@click.argument(
    "filepaths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, allow_dash=True),
)
def cli(
    filepaths: tuple[str, ...],
    mismatch_policy: str | None = None,
    chevrons: bool | None = None,
    tokens: bool = False,
    trace: bool = False,
    quiet: bool = False,
    jobs: int = 1,
):
    """
    Entry point for checking the nesting of one or more TeX documents.

    Args:
        filepaths: Documents to check; ``-`` reads standard input.
        mismatch_policy: Override for the mismatch policy (`keep` or `pop`).
        chevrons: Override for checking ``<``/``>`` pairs.
        tokens: Print each token as a JSON string instead of checking.
        trace: Log the checker's stack operations to stderr.
        quiet: Suppress diagnostics and summaries.
        jobs: Number of documents checked concurrently.

    Returns:
        None. Exits with 1 when a document is unbalanced and with 2 when a
        document could not be checked.

    Raises:
        click.BadParameter: If configuration values are invalid.
        click.ClickException: If the size limit from the environment is invalid.

    Examples:
        tex-check thesis.tex chapters/*.tex --jobs 4
    """
    overrides = {"mismatch_policy": mismatch_policy, "track_chevrons": chevrons}
    if tokens:
        exit_code = 0
        for filepath in filepaths:
            error = _dump_tokens(filepath, overrides)
            if error is not None:
                click.echo(f"{filepath}: {error}", err=True)
                exit_code = EXIT_UNCHECKED
        sys.exit(exit_code)

    handler = enable_trace() if trace else None
    try:
        if jobs > 1:
            with ThreadPoolExecutor(max_workers=jobs) as executor:
                outcomes = list(executor.map(lambda path: _check_one(path, overrides), filepaths))
        else:
            outcomes = [_check_one(filepath, overrides) for filepath in filepaths]
    finally:
        if handler is not None:
            disable_trace(handler)

    exit_code = 0
    for outcome in outcomes:
        if outcome.error is not None:
            click.echo(f"{outcome.filepath}: {outcome.error}", err=True)
            exit_code = EXIT_UNCHECKED
            continue

        result = outcome.result
        if not quiet:
            for diagnostic in result.diagnostics:
                click.echo(f"{outcome.filepath}: {diagnostic}")
            click.echo(f"{outcome.filepath}: {'balanced' if result.balanced else 'unbalanced'}")
        if not result.balanced and exit_code == 0:
            exit_code = EXIT_UNBALANCED

    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
