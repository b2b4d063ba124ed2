#!/usr/bin/env python3
"""
Tests for diagnostics: the error reporter formatter and the error hierarchy.
"""

import re

import pytest

from recmatch.shared.errors import (
    DuplicateBindingNameError, Error, ErrorReporter, MatchOperatorResolutionError, ParseError,
    PatternArityError, PatternTypeError, RecmatchError, RecmatchImplementationError,
)
from recmatch.shared.source_location import SourceLocation

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE.sub("", text)


class TestErrorReporter:

    def test_location_none(self):
        err = Error(message="something failed", location=None, code="E0001")
        out = ErrorReporter({}).format_error(err, color=False)
        assert "error[E0001]: something failed" in out
        assert "<unknown location>" in out

    def test_file_not_in_source_files(self):
        loc = SourceLocation(file="missing.rec", line=1, column=1)
        out = ErrorReporter({}).format_error(Error("oops", loc, code="E0103"), color=False)
        assert "error[E0103]" in out
        assert "missing.rec:1:1" in out

    def test_snippet_with_carets_and_label(self):
        source = "record P(x: int);\nlet ok = p matches P(var a, var a);"
        loc = SourceLocation(file="m.rec", line=2, column=29, end_line=2, end_column=34)
        err = DuplicateBindingNameError("a", loc).to_diagnostic()
        out = ErrorReporter({"m.rec": source}).format_error(err, color=False)
        assert "error[E0204]: duplicate binding name `a` in pattern" in out
        assert " --> m.rec:2:29" in out
        assert "2 | let ok = p matches P(var a, var a);" in out
        assert "^^^^^ `a` bound twice" in out
        assert "= help: rename one of the pattern variables" in out

    def test_line_beyond_source(self):
        loc = SourceLocation(file="x.rec", line=10, column=1)
        out = ErrorReporter({"x.rec": "let a = 1;\n"}).format_error(Error("bad", loc), color=False)
        assert " --> x.rec:10:1" in out

    def test_multiple_errors_summary(self):
        reporter = ErrorReporter({})
        reporter.report_error("first", None, code="E0101")
        reporter.report_error("second", None, code="E0102")
        out = reporter.format_all_errors(color=False)
        assert out.endswith("error: aborting due to 2 previous errors")
        assert reporter.error_codes() == ["E0101", "E0102"]

    def test_single_error_summary(self):
        reporter = ErrorReporter({})
        reporter.report_exception(ParseError("unexpected token `;`"))
        assert reporter.has_errors()
        assert reporter.format_all_errors(color=False).endswith("aborting due to 1 previous error")

    def test_color_output(self):
        err = Error("colored", None, code="E0001")
        out = ErrorReporter({}).format_error(err, color=True)
        assert "\x1b[" in out
        assert "error[E0001]: colored" in _strip_ansi(out)

    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        out = ErrorReporter({}).format_error(Error("plain", None))
        assert "\x1b[" not in out


class TestErrorHierarchy:

    def test_pattern_errors_are_resolution_errors(self):
        assert issubclass(PatternArityError, MatchOperatorResolutionError)
        assert issubclass(PatternTypeError, MatchOperatorResolutionError)
        assert issubclass(MatchOperatorResolutionError, RecmatchError)

    def test_str_includes_code_and_location(self):
        err = ParseError("unexpected end of file", SourceLocation("a.rec", 3, 4))
        assert str(err) == "error[E0001]: unexpected end of file\n --> a.rec:3:4"

    def test_candidates_become_a_note(self):
        err = MatchOperatorResolutionError("ambiguous", None, candidates=("A.Match(A self, out int)",))
        assert "candidates: A.Match(A self, out int)" in err.to_diagnostic().note

    def test_implementation_error_is_not_a_user_error(self):
        assert not issubclass(RecmatchImplementationError, RecmatchError)
        with pytest.raises(RecmatchImplementationError, match=r"\[E9999\]"):
            raise RecmatchImplementationError("invariant broken")
