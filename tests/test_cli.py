from __future__ import annotations

import io
from pathlib import Path

import pytest

from bsontranspile.cli import main


def test_compiles_a_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "query.py"
    source.write_text("{'x': ObjectId()}\n")
    assert main(["-t", "java", str(source)]) == 0
    out = capsys.readouterr().out
    assert out == 'eq("x", new ObjectId())\n'


def test_prints_imports(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "query.py"
    source.write_text("{'x': 1}")
    assert main(["--target", "java", "--no-idiomatic", "--imports", str(source)]) == 0
    out = capsys.readouterr().out
    assert out == 'new Document("x", 1L)\n\nimport org.bson.Document;\n'


def test_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("datetime(2020, 1, 1)"))
    assert main(["-t", "python", "--imports"]) == 0
    out = capsys.readouterr().out
    assert out == "datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)\n\nimport datetime\n"


def test_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "bad.py"
    source.write_text("Foo()")
    assert main(["-t", "java", str(source)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("error[E_REFERENCE]: ")
    assert "Symbol 'Foo' is undefined" in captured.err


def test_max_length(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "long.py"
    source.write_text("[1, 2, 3]")
    assert main(["-t", "java", "--max-length", "4", str(source)]) == 1
    assert capsys.readouterr().err.startswith("error[E_ARGUMENT]: ")


def test_rejects_unknown_target() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["-t", "cobol"])
    assert excinfo.value.code == 2
