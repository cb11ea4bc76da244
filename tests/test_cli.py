from __future__ import annotations

import io
import shutil
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

PROJECT_ROOT = str(Path(__file__).resolve().parents[1])
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import main as cli

DATA_DIR = Path(__file__).resolve().parent / "data"


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / ".editorconfig").write_text("root = true\n", encoding="utf-8")
    shutil.copytree(DATA_DIR / "unformatted", tmp_path / "src")
    return tmp_path


def _formatted(name: str) -> str:
    return (DATA_DIR / "formatted" / name).read_text(encoding="utf-8")


def test_check_reports_files_needing_formatting(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    before = (project / "src" / "MultiTableTest.kt").read_text(encoding="utf-8")

    code = cli.main(["check", str(project)])

    out = capsys.readouterr().out
    assert code == 1
    assert "Checked 8 files" in out
    assert "8 files need formatting:" in out
    assert str(project / "src" / "MultiTableTest.kt") in out
    assert (project / "src" / "MultiTableTest.kt").read_text(encoding="utf-8") == before


def test_apply_rewrites_files_then_check_passes(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["apply", str(project)]) == 0
    out = capsys.readouterr().out
    assert "Formatted 8 files" in out
    assert "8 files were reformatted" in out

    for path in (project / "src").iterdir():
        assert path.read_text(encoding="utf-8") == _formatted(path.name)

    assert cli.main(["check", str(project)]) == 0
    assert "All files are already formatted" in capsys.readouterr().out


def test_apply_with_indent_size_zero_keeps_indentation(project: Path) -> None:
    target = project / "src" / "MultiTableTest.kt"

    assert cli.main(["apply", str(target), "--indent-size", "0"]) == 0

    content = target.read_text(encoding="utf-8")
    assert "    x  | y  | sum\n    1  | 2  | 3\n    10 | 20 | 30\n    \"\"\")" in content


def test_malformed_file_fails_and_is_left_unmodified(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    broken = project / "src" / "BrokenTest.java"
    source = 'class BrokenTest {\n    @TableTest("""\n    a|b\n    c|d|e\n    """)\n    void t() {}\n}\n'
    broken.write_text(source, encoding="utf-8")

    code = cli.main(["apply", str(project)])

    captured = capsys.readouterr()
    assert code == 1
    assert broken.read_text(encoding="utf-8") == source
    assert f"{broken}:4" in captured.err
    assert "1 files could not be formatted" in captured.out
    assert (project / "src" / "MultiTableTest.kt").read_text(encoding="utf-8") == _formatted("MultiTableTest.kt")


def test_no_files_found(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["check", str(tmp_path)]) == 0
    assert "No files found to format" in capsys.readouterr().out


@pytest.mark.parametrize(
    ("report", "marker"),
    [("text", "needs formatting"), ("markdown", "| File"), ("csv", "File,Status,Detail")],
)
def test_verbose_report(project: Path, capsys: pytest.CaptureFixture[str], report: str, marker: str) -> None:
    cli.main(["check", str(project / "src" / "NamedParameterTest.java"), "-v", "--report", report])

    assert marker in capsys.readouterr().out


def test_write_failure_is_reported_as_error(
    project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    target = project / "src" / "NamedParameterTest.java"
    before = target.read_text(encoding="utf-8")

    def failing_write(path: Path, content: str) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(cli, "write_atomically", failing_write)

    code = cli.main(["apply", str(target), "-v"])

    out = capsys.readouterr().out
    report_line = next(line for line in out.splitlines() if str(target) in line)
    assert code == 1
    assert "error" in report_line
    assert "disk full" in report_line
    assert "reformatted" not in report_line
    assert "1 files could not be formatted" in out
    assert target.read_text(encoding="utf-8") == before


def test_threads_format_all_files(
    project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "ProcessPoolExecutor", ThreadPoolExecutor)

    assert cli.main(["apply", str(project), "--threads", "3"]) == 0

    for path in (project / "src").iterdir():
        assert path.read_text(encoding="utf-8") == _formatted(path.name)


def test_table_command_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("x|y|sum\n1|2|3\n10|20|30\n"))

    assert cli.main(["table"]) == 0
    assert capsys.readouterr().out == "x  | y  | sum\n1  | 2  | 3\n10 | 20 | 30\n"


def test_table_command_with_indent(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    table = tmp_path / "calc.table"
    table.write_text("a|b\nccc|d\n", encoding="utf-8")

    assert cli.main(["table", str(table), "--indent-style", "tab", "--indent-size", "1"]) == 0
    assert capsys.readouterr().out == "\ta   | b\n\tccc | d\n"


def test_table_command_reports_malformed_table(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("a|b\nc|d|e\n"))

    assert cli.main(["table", "--delimiter", "|"]) == 1
    assert "line 2" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["check"],
        ["check", ".", "--indent-size", "-1"],
        ["check", ".", "--delimiter", "||"],
        ["table", "--indent-style", "wavy"],
        ["table", "--indent-style", "tab"],
    ],
)
def test_usage_errors_exit_with_2(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == 2


def test_log_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    log_file = tmp_path / "logs" / "format.log"
    monkeypatch.setattr(sys, "stdin", io.StringIO("a|b\nc|d\n"))

    assert cli.main(["table", "--log-file", str(log_file), "-v"]) == 0
    assert log_file.exists()
