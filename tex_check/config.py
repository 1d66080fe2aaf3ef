"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib

MISMATCH_POLICIES = ("keep", "pop")


def _default_extensions() -> list[str]:
    return [".tex", ".ltx", ".sty", ".cls", ".mkii", ".mkiv", ".mkvi", ".mkxl", ".mklx"]


@dataclass
class CheckConfig:
    """Configuration for checking TeX and ConTeXt documents.

    Attributes:
        mismatch_policy: Stack handling when a closer does not match the
            innermost open construct (``"keep"`` or ``"pop"``).
        track_chevrons: Whether ``<`` and ``>`` are checked as a bracket pair.
        extensions: File suffixes accepted on the command line.
        max_file_size: Maximum file size in bytes that will be checked.
        chunk_size: Number of bytes the lexer reads from a stream at a time.

    Examples:
        CheckConfig(mismatch_policy="pop", track_chevrons=True)
    """

    # Checking rules
    mismatch_policy: str = "keep"
    track_chevrons: bool = False

    # Input files
    extensions: list[str] = field(default_factory=_default_extensions)

    # Limits
    max_file_size: int = 10 * 1024 * 1024
    chunk_size: int = 64 * 1024


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`mismatch_policy` must be one of: keep, pop")
    """


# Files consulted in each directory, and the tables read from them, in order.
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", "tex-check"),)),
    (".tex-check.toml", (("tex-check",), ("tool", "tex-check"))),
)


def load_config(search_path: Path) -> CheckConfig:
    """Load configuration from the nearest config file.

    Each directory from `search_path` up to the filesystem root is searched
    for a ``[tool.tex-check]`` table in `pyproject.toml`, then a
    ``[tex-check]`` or ``[tool.tex-check]`` table in `.tex-check.toml`. The
    first table found wins, even an empty one. Files that cannot be read or
    decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        CheckConfig: Loaded configuration, or defaults when no table is found.

    Raises:
        ConfigError: If the table is not a mapping or holds unknown keys.

    Examples:
        load_config(Path("chapters"))
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            config = _read_config_table(directory / filename, table_paths)
            if config is not None:
                return normalize_config(config)
    return CheckConfig()


def _read_config_table(
    config_file: Path, table_paths: tuple[tuple[str, ...], ...]
) -> CheckConfig | None:
    if not config_file.is_file():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        table: object = data
        for key in table_path:
            table = table.get(key) if isinstance(table, dict) else None
        if table is not None:
            return _config_from_table(table, ".".join(table_path), config_file)
    return None


def _config_from_table(table: object, table_name: str, config_file: Path) -> CheckConfig:
    if not isinstance(table, dict):
        raise ConfigError(f"Invalid `[{table_name}]` settings in {config_file}")

    # `track-chevrons` and `track_chevrons` are the same key.
    settings = {key.replace("-", "_"): value for key, value in table.items()}
    unknown = sorted(set(settings) - {item.name for item in fields(CheckConfig)})
    if unknown:
        raise ConfigError(
            f"Invalid `[{table_name}]` settings in {config_file}: unknown {', '.join(unknown)}"
        )
    return CheckConfig(**settings)


def normalize_config(config: CheckConfig) -> CheckConfig:
    """Canonicalize spellings that have several accepted forms.

    Policies are lower-cased and extensions gain a leading dot and are
    lower-cased, so ``"TEX"`` and ``".tex"`` are the same suffix.
    """
    mismatch_policy = config.mismatch_policy
    if isinstance(mismatch_policy, str):
        mismatch_policy = mismatch_policy.lower()

    extensions = config.extensions
    if isinstance(extensions, (list, tuple)) and all(isinstance(ext, str) for ext in extensions):
        extensions = [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions]

    return replace(config, mismatch_policy=mismatch_policy, extensions=extensions)


def validate_config(config: CheckConfig) -> None:
    """Validate a `CheckConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If the mismatch policy is unknown, flags are not
            booleans, extensions are malformed, or numeric limits are not
            positive integers.

    Examples:
        validate_config(CheckConfig(mismatch_policy="pop"))
    """
    config = normalize_config(config)

    for name in ("max_file_size", "chunk_size"):
        _ensure_positive_integer(name, getattr(config, name))

    if config.mismatch_policy not in MISMATCH_POLICIES:
        raise ConfigError(f"`mismatch_policy` must be one of: {', '.join(MISMATCH_POLICIES)}")
    if not isinstance(config.track_chevrons, bool):
        raise ConfigError("`track_chevrons` must be a boolean")

    if not isinstance(config.extensions, list) or not config.extensions:
        raise ConfigError("`extensions` must be a non-empty list of suffixes")
    for extension in config.extensions:
        if not isinstance(extension, str) or extension in ("", "."):
            raise ConfigError("`extensions` must contain non-empty strings")


def apply_overrides(config: CheckConfig, **overrides: object) -> CheckConfig:
    """Return `config` with command-line values laid over it.

    Overrides set to None were not given on the command line and are skipped.
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> CheckConfig:
    """Resolve the configuration for a document in `search_path`.

    Raises:
        ConfigError: If a config table or the merged result is invalid.

    Examples:
        config = build_config(Path.cwd(), track_chevrons=True)
    """
    config = normalize_config(apply_overrides(load_config(search_path), **overrides))
    validate_config(config)
    return config


def _ensure_positive_integer(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"`{name}` must be a positive integer")
