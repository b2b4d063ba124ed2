#!/usr/bin/env python3
"""
Tests for the `recmatch` command line entry point.
"""

import pytest

from recmatch.__main__ import main

pytestmark = pytest.mark.integration


def _write(tmp_path, source, name="main.rec"):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return path


class TestCli:

    def test_runs_program_and_prints(self, tmp_path, capsys):
        path = _write(tmp_path, """
record Point(x: int, y: int);
let p = Point(1, 2);
let ok = p matches Point(var x, var y);
print(x, y);
""")
        assert main([str(path)]) == 0
        assert capsys.readouterr().out == "1 2\n"

    def test_compile_error_exits_nonzero(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        path = _write(tmp_path, """
record Point(x: int, y: int);
let ok = Point(1, 2) matches Point(var x);
""")
        assert main([str(path)]) == 1
        err = capsys.readouterr().err
        assert "error[E0202]" in err
        assert "main.rec:3:" in err
        assert "aborting due to 1 previous error" in err

    def test_runtime_error_exits_nonzero(self, tmp_path, capsys):
        path = _write(tmp_path, "record Unit();\nassert(Unit() != Unit());\n")
        assert main([str(path)]) == 1
        assert "assertion failed" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.rec")]) == 1
        assert "file not found" in capsys.readouterr().err

    def test_directory_is_not_a_file(self, tmp_path, capsys):
        assert main([str(tmp_path)]) == 1
        assert "not a file" in capsys.readouterr().err
