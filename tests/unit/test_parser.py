#!/usr/bin/env python3
"""
Tests for the .rec parser and AST transformer.
"""

import pytest

from recmatch.frontend.parser import Parser
from recmatch.shared.errors import ParseError
from recmatch.shared.nodes import (
    Call, Comparison, Construction, DiscardPattern, ExpressionStatement, Identifier, LetStatement,
    Literal, MatchesExpression, MemberAccess, TypePattern, VariablePattern,
)
from recmatch.shared.types import INT, STR, RecordType


@pytest.fixture(scope="module")
def parser():
    return Parser()


class TestRecordDeclarations:

    def test_members_in_declared_order(self, parser):
        program = parser.parse("record Person(name: str, age: int, home: Address);", "p.rec")
        record, = program.records
        assert record.name == "Person"
        assert record.layout == ("name", "age", "home")
        assert [m.position for m in record.primary_members] == [0, 1, 2]
        assert [m.type for m in record.primary_members] == [STR, INT, RecordType("Address")]
        assert record.base is None

    def test_empty_record_with_base(self, parser):
        record, = parser.parse("record Circle() : Shape;").records
        assert record.primary_members == ()
        assert record.base == "Shape"

    def test_mutable_member_flag(self, parser):
        record, = parser.parse("record Counter(mut n: int);").records
        assert record.primary_members[0].mutable

    def test_locations(self, parser):
        program = parser.parse("\nrecord Point(x: int);", "loc.rec")
        member = program.records[0].primary_members[0]
        assert str(member.location) == "loc.rec:2:14"


class TestStatements:

    def test_let_with_construction(self, parser):
        statement, = parser.parse("let p = Point(1, -2);").statements
        assert isinstance(statement, LetStatement)
        assert statement.name == "p"
        value = statement.value
        assert isinstance(value, Construction)
        assert value.type_name == "Point"
        assert [a.value for a in value.args] == [1, -2]

    def test_builtin_calls(self, parser):
        statement, = parser.parse('print("hi", 1.5, true, null);').statements
        assert isinstance(statement, ExpressionStatement)
        call = statement.expression
        assert isinstance(call, Call) and call.name == "print"
        assert [a.value for a in call.args] == ["hi", 1.5, True, None]

    def test_comparison_and_member_access(self, parser):
        statement, = parser.parse("assert(a.x != b.y);").statements
        comparison = statement.expression.args[0]
        assert isinstance(comparison, Comparison) and comparison.operator == "!="
        assert isinstance(comparison.left, MemberAccess)
        assert comparison.left.member == "x"
        assert isinstance(comparison.left.target, Identifier)

    def test_matches_binds_looser_than_equality(self, parser):
        statement, = parser.parse("let m = a == b matches Flag(_);").statements
        assert isinstance(statement.value, MatchesExpression)
        assert isinstance(statement.value.subject, Comparison)

    def test_comments_are_ignored(self, parser):
        program = parser.parse("# header\nlet a = 1; # trailing\n")
        assert len(program.statements) == 1
        assert isinstance(program.statements[0].value, Literal)


class TestPatterns:

    def test_all_pattern_forms(self, parser):
        statement, = parser.parse("let m = c matches Circle(Point(var x, _), int r);").statements
        pattern = statement.value.pattern
        assert isinstance(pattern, TypePattern) and pattern.type_name == "Circle"
        nested, typed = pattern.args
        assert isinstance(nested, TypePattern) and nested.type_name == "Point"
        assert nested.args[0] == VariablePattern("x")
        assert isinstance(nested.args[1], DiscardPattern)
        assert typed == VariablePattern("r", INT)

    def test_zero_argument_pattern(self, parser):
        statement, = parser.parse("let m = s matches Shape();").statements
        assert statement.value.pattern.args == ()


class TestParseErrors:

    def test_unexpected_token(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("let = 1;", "bad.rec")
        assert exc_info.value.location.file == "bad.rec"
        assert exc_info.value.location.line == 1

    def test_unexpected_end_of_file(self, parser):
        with pytest.raises(ParseError):
            parser.parse("record Point(x: int", "eof.rec")

    def test_unexpected_character(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("let a = 1 @ 2;")
        assert "unexpected character" in exc_info.value.message
