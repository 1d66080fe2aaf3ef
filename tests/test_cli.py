from __future__ import annotations

import json
import textwrap
from pathlib import Path

from tex_check.cli import cli


def _write(tmp_path: Path, filename: str, content: str) -> Path:
    path = tmp_path / filename
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_cli_reports_balanced_document(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(
        tmp_path,
        "doc.tex",
        r"""
        \startitemize
        \item {a} and $x^2$
        \stopitemize
        """,
    )

    result = cli_runner.invoke(cli, ["doc.tex"])
    assert result.exit_code == 0
    assert result.output == "doc.tex: balanced\n"


def test_cli_reports_unbalanced_document(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(
        tmp_path,
        "doc.tex",
        r"""
        \startitemize
        \item {a]
        \stopitemize
        """,
    )

    result = cli_runner.invoke(cli, ["doc.tex"])
    assert result.exit_code == 1
    lines = result.output.splitlines()
    assert lines[0] == 'doc.tex: Line 2: unexpected "]", expected "}" (to close "{" from line 2)'
    assert lines[-1] == "doc.tex: unbalanced"


def test_cli_rejects_non_tex_files(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "notes.md", "# Notes\n")

    result = cli_runner.invoke(cli, ["notes.md"])
    assert result.exit_code == 2
    assert "is not a TeX file" in result.output


def test_cli_rejects_missing_files(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = cli_runner.invoke(cli, ["missing.tex"])
    assert result.exit_code == 2


def test_cli_quiet_only_sets_exit_code(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "doc.tex", "{\n")

    result = cli_runner.invoke(cli, ["--quiet", "doc.tex"])
    assert result.exit_code == 1
    assert result.output == ""


def test_cli_prints_tokens(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "doc.tex").write_bytes(b"\\emph{x}\n")

    result = cli_runner.invoke(cli, ["--tokens", "doc.tex"])
    assert result.exit_code == 0
    tokens = [json.loads(line) for line in result.output.splitlines()]
    assert tokens == ["\\emph", "{", "x", "}", "\n"]


def test_cli_reports_latin1_documents(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "doc.tex").write_bytes("\\begin{café}\n\\end{x}\n".encode("latin-1"))
    (tmp_path / "fence.tex").write_bytes(b"\\type\xff abc\n")

    result = cli_runner.invoke(cli, ["doc.tex", "fence.tex"])
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert result.exit_code == 1
    lines = result.output.splitlines()
    assert lines[0] == (
        'doc.tex: Line 2: unexpected "\\end{x}", expected "\\end{caf\\xe9}" '
        '(to close "\\begin{caf\\xe9}" from line 1)'
    )
    assert (
        'fence.tex: Unexpected end of input, expected "\\xff" (to close "\\xff" from line 1)'
        in lines
    )


def test_cli_tokens_rejects_non_tex_files(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "notes.md", "# Notes\n")
    _write(tmp_path, "doc.tex", "{}\n")

    result = cli_runner.invoke(cli, ["--tokens", "notes.md", "doc.tex"])
    assert result.exit_code == 2
    assert "notes.md: " in result.output
    assert "is not a TeX file" in result.output
    assert '"{"' in result.output


def test_cli_tokens_respects_file_size_limit(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TEX_CHECK_MAX_FILE_SIZE", "10")
    (tmp_path / "large.tex").write_text("X" * 20, encoding="utf-8")

    result = cli_runner.invoke(cli, ["--tokens", "large.tex"])
    assert result.exit_code == 2
    assert "large.tex: " in result.output
    assert "maximum allowed size" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_cli_reads_standard_input(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = cli_runner.invoke(cli, ["-"], input="\\begin{a}\n\\end{b}\n")
    assert result.exit_code == 1
    assert '-: Line 2: unexpected "\\end{b}"' in result.output

    result = cli_runner.invoke(cli, ["-"], input="\\type|{|\n")
    assert result.exit_code == 0
    assert result.output == "-: balanced\n"


def test_cli_mismatch_policy_option(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "doc.tex", "{ ] ]\n")

    kept = cli_runner.invoke(cli, ["doc.tex"])
    popped = cli_runner.invoke(cli, ["--mismatch-policy", "pop", "doc.tex"])

    assert kept.output.count('expected "}"') == 3
    assert "closed without opening" in popped.output
    assert popped.exit_code == 1


def test_cli_chevrons_flag(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "doc.tex", "$a < b$\n")

    assert cli_runner.invoke(cli, ["doc.tex"]).exit_code == 0
    assert cli_runner.invoke(cli, ["--chevrons", "doc.tex"]).exit_code == 1


def test_cli_reads_config_from_pyproject(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_pyproject(
        tmp_path,
        """
        [tool.tex-check]
        track_chevrons = true
        extensions = [".txt"]
        """,
    )
    _write(tmp_path, "doc.txt", "a < b\n")

    result = cli_runner.invoke(cli, ["doc.txt"])
    assert result.exit_code == 1

    result = cli_runner.invoke(cli, ["--no-chevrons", "doc.txt"])
    assert result.exit_code == 0


def test_cli_rejects_invalid_config(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_pyproject(
        tmp_path,
        """
        [tool.tex-check]
        mismatch_policy = "sometimes"
        """,
    )
    _write(tmp_path, "doc.tex", "{}\n")

    result = cli_runner.invoke(cli, ["doc.tex"])
    assert result.exit_code == 2
    assert "mismatch_policy" in result.output


def test_cli_file_size_limit_enforced(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TEX_CHECK_MAX_FILE_SIZE", "10")
    (tmp_path / "large.tex").write_text("X" * 20, encoding="utf-8")

    result = cli_runner.invoke(cli, ["large.tex"])
    assert result.exit_code == 2
    assert "maximum allowed size" in result.output


def test_cli_rejects_invalid_size_from_environment(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TEX_CHECK_MAX_FILE_SIZE", "big")
    _write(tmp_path, "doc.tex", "{}\n")

    result = cli_runner.invoke(cli, ["doc.tex"])
    assert result.exit_code == 1
    assert "TEX_CHECK_MAX_FILE_SIZE" in result.output


def test_cli_exit_code_prefers_unchecked_files(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "open.tex", "{\n")
    _write(tmp_path, "notes.md", "# Notes\n")

    result = cli_runner.invoke(cli, ["open.tex", "notes.md"])
    assert result.exit_code == 2
    assert "open.tex: unbalanced" in result.output


def test_cli_jobs_keep_argument_order(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    names = [f"part{index}.tex" for index in range(6)]
    for index, name in enumerate(names):
        _write(tmp_path, name, "{\n" if index % 2 else "{}\n")

    result = cli_runner.invoke(cli, ["--quiet", *names])
    assert result.exit_code == 1

    result = cli_runner.invoke(cli, ["--jobs", "3", *names])
    assert result.exit_code == 1
    summaries = [line for line in result.output.splitlines() if line.endswith("balanced")]
    assert [line.split(":")[0] for line in summaries] == names


def test_cli_trace_logs_stack_operations(cli_runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(tmp_path, "doc.tex", "{x}\n")

    result = cli_runner.invoke(cli, ["--trace", "doc.tex"])
    assert result.exit_code == 0
    assert "push {" in result.output
    assert "pop }" in result.output


def test_cli_version(cli_runner):
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_cli_public_api():
    import tex_check.cli as cli_module

    assert cli_module.__all__ == ["cli"]
