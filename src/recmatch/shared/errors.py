"""
Error Reporting

Diagnostics are rendered rustc-style: a header with the error code, an arrow
pointing at the source location, the offending line with carets underneath,
and optional help/note annotations.

Compile-time problems are raised as RecmatchError subclasses by the core
operations and collected into an ErrorReporter by the passes. A failed match
at run time is never an error (see runtime.evaluator).
"""

import os
import re
from dataclasses import dataclass
from typing import Optional, List, Dict, Sequence

from .source_location import SourceLocation
from ..utils.config import COLOR_ENV_VAR


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get(COLOR_ENV_VAR, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return True

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

_WORD = re.compile(r"\w+")

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Diagnostic dataclass
# ---------------------------------------------------------------------------

@dataclass
class Error:
    """One reported compiler diagnostic."""
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def _format_diagnostic(
    error: Error,
    source_files: Dict[str, str],
    color: bool = False,
) -> str:
    """
    Render a single diagnostic.

    Example output (plain, no color)::

        error[E0204]: duplicate binding name `a` in pattern
         --> main.rec:4:33
          |
        4 | let ok = o matches Outer(Inner(var a), var a);
          |                                        ^^^^^ `a` bound twice
          |
          = help: rename one of the pattern variables
    """
    out: List[str] = []

    code_str = f"[{error.code}]" if error.code else ""
    out.append(
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {error.message}", _BOLD, color=color)
    )

    loc = error.location
    if loc is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    source = source_files.get(loc.file)
    if source is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + str(loc))
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    src_lines = source.split("\n")
    gw = max(len(str(loc.line)), 1)

    out.append(_style(" " * gw + "--> ", _BOLD, _BLUE, color=color) + str(loc))
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))

    idx = loc.line - 1
    code_line = src_lines[idx] if 0 <= idx < len(src_lines) else ""
    out.append(_style(str(loc.line).rjust(gw) + " | ", _BOLD, _BLUE, color=color) + code_line)

    col_start = max(loc.column, 1) - 1
    if loc.end_column > loc.column and loc.end_line in (0, loc.line):
        span_len = loc.end_column - loc.column
    else:
        span_len = _guess_span(code_line, col_start)
    carets = " " * col_start + "^" * max(1, span_len)
    label_suffix = f" {error.label}" if error.label else ""
    out.append(
        _style(" " * (gw + 1) + "| ", _BOLD, _BLUE, color=color)
        + _style(carets + label_suffix, _BOLD, _RED, color=color)
    )

    _append_annotations(out, error, gw, color)
    return "\n".join(out)


def _guess_span(code_line: str, col_start: int) -> int:
    """Length of the word under the caret when the span end is unknown."""
    word = _WORD.match(code_line, col_start)
    return max(1, len(word.group(0))) if word else 1


def _append_annotations(out: List[str], error: Error, gw: int, color: bool) -> None:
    if not (error.help or error.note):
        return
    out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))
    pad = " " * (gw + 1)
    if error.help:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("help: ", _BOLD, color=color)
            + error.help
        )
    if error.note:
        out.append(
            _style(f"{pad}= ", _BOLD, _CYAN, color=color)
            + _style("note: ", _BOLD, color=color)
            + error.note
        )


# ---------------------------------------------------------------------------
# ErrorReporter
# ---------------------------------------------------------------------------

class ErrorReporter:
    """Collects diagnostics for one compilation and renders them."""

    def __init__(self, source_files: Dict[str, str]):
        self.source_files = source_files
        self.errors: List[Error] = []

    def report_error(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help: Optional[str] = None,
        note: Optional[str] = None,
        label: Optional[str] = None,
    ) -> None:
        self.errors.append(Error(
            message=message,
            location=location,
            code=code,
            help=help,
            note=note,
            label=label,
        ))

    def report_exception(self, exc: "RecmatchError") -> None:
        self.errors.append(exc.to_diagnostic())

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(error, self.source_files, color=use_color)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        parts = [self.format_error(e, color=use_color) for e in self.errors]
        count = len(self.errors)
        summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
        parts.append(
            _style("error", _BOLD, _RED, color=use_color)
            + _style(f": {summary}", _BOLD, color=use_color)
        )
        return "\n\n".join(parts)

    def error_codes(self) -> List[str]:
        return [e.code for e in self.errors if e.code]

    def has_errors(self) -> bool:
        return len(self.errors) > 0


# ============================================================================
# Exception Classes
# ============================================================================

class RecmatchError(Exception):
    """Base exception for every diagnosable recmatch error."""
    error_code = "E0000"

    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 help: Optional[str] = None,
                 note: Optional[str] = None,
                 label: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location
        self.help_text = help
        self.note_text = note
        self.label_text = label

    def to_diagnostic(self) -> Error:
        return Error(
            message=self.message,
            location=self.location,
            code=self.error_code,
            help=self.help_text,
            note=self.note_text,
            label=self.label_text,
        )

    def __str__(self):
        if self.location:
            return f"error[{self.error_code}]: {self.message}\n --> {self.location}"
        return f"error[{self.error_code}]: {self.message}"


class ParseError(RecmatchError):
    """Malformed .rec source."""
    error_code = "E0001"


# -- record declarations ------------------------------------------------------

class DuplicatePrimaryMemberError(RecmatchError):
    error_code = "E0101"

    def __init__(self, member_name: str, location: Optional[SourceLocation] = None):
        super().__init__(
            f"primary member `{member_name}` is declared more than once",
            location,
            label=f"`{member_name}` redeclared here",
            help="primary member names must be unique within a record",
        )
        self.member_name = member_name


class MutablePrimaryMemberError(RecmatchError):
    error_code = "E0102"

    def __init__(self, member_name: str, location: Optional[SourceLocation] = None):
        super().__init__(
            f"primary member `{member_name}` cannot be mutable",
            location,
            note="synthesized equality and hashing read primary members; "
                 "a mutable member would change the hash of a stored record",
        )
        self.member_name = member_name


class UnknownTypeError(RecmatchError):
    error_code = "E0103"

    def __init__(self, type_name: str, location: Optional[SourceLocation] = None):
        super().__init__(f"cannot find type `{type_name}`", location, label="not found")
        self.type_name = type_name


class RecordHierarchyError(RecmatchError):
    error_code = "E0104"


class DuplicateRecordError(RecmatchError):
    error_code = "E0105"

    def __init__(self, record_name: str, location: Optional[SourceLocation] = None):
        super().__init__(f"record `{record_name}` is defined multiple times", location)
        self.record_name = record_name


class UnknownNameError(RecmatchError):
    error_code = "E0106"


class RecordConstructionError(RecmatchError):
    error_code = "E0107"


# -- match resolution ---------------------------------------------------------

class MatchOperatorResolutionError(RecmatchError):
    """No Match operator, or more than one, fits a pattern."""
    error_code = "E0201"

    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 candidates: Sequence[object] = (),
                 help: Optional[str] = None):
        note = None
        if candidates:
            note = "candidates: " + "; ".join(str(c) for c in candidates)
        super().__init__(message, location, help=help, note=note)
        self.candidates = tuple(candidates)


class PatternArityError(MatchOperatorResolutionError):
    error_code = "E0202"


class PatternTypeError(MatchOperatorResolutionError):
    error_code = "E0203"


class DuplicateBindingNameError(RecmatchError):
    error_code = "E0204"

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        super().__init__(
            f"duplicate binding name `{name}` in pattern",
            location,
            label=f"`{name}` bound twice",
            help="rename one of the pattern variables",
        )
        self.name = name


class MatchOperatorDeclarationError(RecmatchError):
    error_code = "E0205"


# -- run time -----------------------------------------------------------------

class RecmatchRuntimeError(RecmatchError):
    """Fault while running a program (assertion, unbound name, bad construction)."""
    error_code = "E0300"


class RecmatchImplementationError(Exception):
    """
    Error in recmatch itself, not in the user's declarations or patterns.

    Never use this for errors in user code - use a RecmatchError subclass instead.
    """
    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"
