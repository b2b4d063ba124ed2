"""
Parser

Lark LALR parser for .rec sources, with lark's native grammar cache and
position propagation so every node can point back at its source span.
"""

import logging
from pathlib import Path

from lark import Lark
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from .transformer import RecmatchTransformer
from ..shared.errors import ParseError, RecmatchError
from ..shared.nodes import Program
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_PARSER_CACHE_FILE, DEFAULT_SOURCE_FILE

logger = logging.getLogger("recmatch.frontend.parser")


class Parser:
    """Source text in, Program out. Parse failures raise ParseError."""

    def __init__(self, cache_file: str = DEFAULT_PARSER_CACHE_FILE):
        grammar_path = Path(__file__).parent / "grammar.lark"
        self.parser = Lark.open(
            str(grammar_path),
            start='program',
            parser='lalr',              # required for caching
            cache=cache_file,
            propagate_positions=True,
            maybe_placeholders=False,
        )
        self.transformer = RecmatchTransformer()

    def parse(self, source: str, source_file: str = DEFAULT_SOURCE_FILE) -> Program:
        self.transformer.current_file = source_file
        try:
            tree = self.parser.parse(source)
        except UnexpectedInput as e:
            raise ParseError(_describe(e), _error_location(e, source_file), help=_expected_help(e)) from e

        try:
            program = self.transformer.transform(tree)
        except VisitError as e:
            if isinstance(e.orig_exc, RecmatchError):
                raise e.orig_exc from e
            raise
        logger.debug(f"parsed {source_file}: {len(program.records)} record(s), "
                     f"{len(program.statements)} statement(s)")
        return program


def _describe(e: UnexpectedInput) -> str:
    if isinstance(e, UnexpectedCharacters):
        return f"unexpected character `{e.char}`"
    if isinstance(e, UnexpectedEOF):
        return "unexpected end of file"
    if isinstance(e, UnexpectedToken):
        if e.token.type == '$END':
            return "unexpected end of file"
        return f"unexpected token `{e.token}`"
    return "invalid syntax"


def _expected_help(e: UnexpectedInput):
    expected = getattr(e, 'expected', None) or getattr(e, 'allowed', None)
    if not expected:
        return None
    shown = sorted(str(t) for t in expected)[:8]
    return "expected one of: " + ", ".join(shown)


def _error_location(e: UnexpectedInput, source_file: str) -> SourceLocation:
    line = getattr(e, 'line', None) or 0
    column = getattr(e, 'column', None) or 0
    start = getattr(e, 'pos_in_stream', None) or 0
    if line < 1:
        # UnexpectedEOF carries no position
        return SourceLocation(file=source_file, line=1, column=1)
    return SourceLocation(file=source_file, line=line, column=max(column, 1),
                          start=max(start, 0), end=max(start, 0) + 1)
