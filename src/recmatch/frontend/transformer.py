"""
recmatch AST Transformer

Converts the lark parse tree into declaration, pattern and expression nodes.
Every node carries a SourceLocation taken from the rule's meta.
"""

import ast
import logging
from typing import Any, List, Optional, Tuple, Union

from lark import Transformer, v_args
from lark.lexer import Token
from typing_extensions import TypeAlias

from ..shared.nodes import (
    Call, Comparison, Construction, DiscardPattern, Expression, ExpressionStatement, Identifier,
    LetStatement, Literal, MatchesExpression, MemberAccess, Pattern, PrimaryMember, Program,
    RecordDeclaration, Statement, TypePattern, VariablePattern,
)
from ..shared.source_location import SourceLocation
from ..shared.types import Type, RecordType, lookup_builtin_type

logger: logging.Logger = logging.getLogger(__name__)

# Lark Meta object; None when the rule matched nothing
LarkMeta: TypeAlias = Any
MemberSpec: TypeAlias = Tuple[str, Type, bool, SourceLocation]

BUILTIN_CALLS = ("print", "assert")


def type_from_name(name: str) -> Type:
    """Builtin type for a builtin name, otherwise a (not yet checked) record type."""
    builtin = lookup_builtin_type(name)
    if builtin is not None:
        return builtin
    return RecordType(name)


@v_args(inline=True, meta=True)
class RecmatchTransformer(Transformer):

    def __init__(self) -> None:
        super().__init__()
        self.current_file: str = ""  # set by the Parser before each transform

    def _extract_location(self, meta: LarkMeta) -> SourceLocation:
        if not self.current_file:
            raise RuntimeError("Parser bug: current_file not set before transform")
        if meta is None or getattr(meta, 'empty', True):
            return SourceLocation(file=self.current_file, line=0, column=0)
        return SourceLocation(
            file=self.current_file,
            line=meta.line,
            column=meta.column,
            start=meta.start_pos,
            end=meta.end_pos,
            end_line=meta.end_line,
            end_column=meta.end_column,
        )

    def _token_location(self, token: Token) -> SourceLocation:
        return SourceLocation(
            file=self.current_file,
            line=token.line or 0,
            column=token.column or 0,
            start=token.start_pos or 0,
            end=token.end_pos or 0,
            end_line=token.end_line or 0,
            end_column=token.end_column or 0,
        )

    # =========================================================================
    # PROGRAM STRUCTURE
    # =========================================================================

    def program(self, meta: LarkMeta, *items: Union[RecordDeclaration, Statement]) -> Program:
        records = tuple(i for i in items if isinstance(i, RecordDeclaration))
        statements = tuple(i for i in items if not isinstance(i, RecordDeclaration))
        return Program(records=records, statements=statements, source_file=self.current_file)

    # =========================================================================
    # RECORDS
    # =========================================================================

    def record_decl(self, meta: LarkMeta, name: Token, *rest: Any) -> RecordDeclaration:
        """Grammar: 'record' NAME '(' member_list? ')' base_clause? ';'"""
        members: List[MemberSpec] = []
        base: Optional[str] = None
        for item in rest:
            if isinstance(item, list):
                members = item
            else:
                base = item
        primary = tuple(
            PrimaryMember(member_name, member_type, position, mutable, location)
            for position, (member_name, member_type, mutable, location) in enumerate(members)
        )
        return RecordDeclaration(
            name=str(name),
            primary_members=primary,
            base=base,
            location=self._token_location(name),
        )

    def member_list(self, meta: LarkMeta, *members: MemberSpec) -> List[MemberSpec]:
        return list(members)

    def member(self, meta: LarkMeta, *tokens: Token) -> MemberSpec:
        """Grammar: MUT? NAME ':' NAME"""
        mutable = len(tokens) == 3
        name, type_name = tokens[-2], tokens[-1]
        return (str(name), type_from_name(str(type_name)), mutable, self._token_location(name))

    def base_clause(self, meta: LarkMeta, name: Token) -> str:
        return str(name)

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    def let_stmt(self, meta: LarkMeta, name: Token, value: Expression) -> LetStatement:
        return LetStatement(name=str(name), value=value, location=self._extract_location(meta))

    def expr_stmt(self, meta: LarkMeta, expression: Expression) -> ExpressionStatement:
        return ExpressionStatement(expression=expression, location=self._extract_location(meta))

    # =========================================================================
    # EXPRESSIONS
    # =========================================================================

    def matches_expr(self, meta: LarkMeta, subject: Expression, pattern: TypePattern) -> MatchesExpression:
        return MatchesExpression(subject=subject, pattern=pattern, location=self._extract_location(meta))

    def eq_expr(self, meta: LarkMeta, left: Expression, right: Expression) -> Comparison:
        return Comparison("==", left, right, self._extract_location(meta))

    def ne_expr(self, meta: LarkMeta, left: Expression, right: Expression) -> Comparison:
        return Comparison("!=", left, right, self._extract_location(meta))

    def member_access(self, meta: LarkMeta, target: Expression, member: Token) -> MemberAccess:
        return MemberAccess(target=target, member=str(member), location=self._extract_location(meta))

    def call(self, meta: LarkMeta, name: Token, args: Optional[List[Expression]] = None) -> Expression:
        """`print(...)`/`assert(...)` are builtin calls, any other `T(...)` constructs a record."""
        location = self._extract_location(meta)
        arguments = tuple(args or ())
        if str(name) in BUILTIN_CALLS:
            return Call(name=str(name), args=arguments, location=location)
        return Construction(type_name=str(name), args=arguments, location=location)

    def arg_list(self, meta: LarkMeta, *args: Expression) -> List[Expression]:
        return list(args)

    def identifier(self, meta: LarkMeta, name: Token) -> Identifier:
        return Identifier(name=str(name), location=self._token_location(name))

    # =========================================================================
    # LITERALS
    # =========================================================================

    def number(self, meta: LarkMeta, token: Token) -> Literal:
        text = str(token)
        if any(c in text for c in ".eE"):
            value: Union[int, float] = float(text)
        else:
            value = int(text)
        return Literal(value, self._token_location(token))

    def string(self, meta: LarkMeta, token: Token) -> Literal:
        return Literal(ast.literal_eval(str(token)), self._token_location(token))

    def true_lit(self, meta: LarkMeta, token: Token) -> Literal:
        return Literal(True, self._token_location(token))

    def false_lit(self, meta: LarkMeta, token: Token) -> Literal:
        return Literal(False, self._token_location(token))

    def null_lit(self, meta: LarkMeta, token: Token) -> Literal:
        return Literal(None, self._token_location(token))

    # =========================================================================
    # PATTERNS
    # =========================================================================

    def type_pattern(self, meta: LarkMeta, name: Token, args: Optional[List[Pattern]] = None) -> TypePattern:
        return TypePattern(type_name=str(name), args=tuple(args or ()), location=self._extract_location(meta))

    def pattern_list(self, meta: LarkMeta, *patterns: Pattern) -> List[Pattern]:
        return list(patterns)

    def var_pattern(self, meta: LarkMeta, name: Token) -> VariablePattern:
        return VariablePattern(name=str(name), location=self._extract_location(meta))

    def typed_pattern(self, meta: LarkMeta, type_name: Token, name: Token) -> VariablePattern:
        return VariablePattern(
            name=str(name),
            declared_type=type_from_name(str(type_name)),
            location=self._extract_location(meta),
        )

    def discard_pattern(self, meta: LarkMeta, token: Token) -> DiscardPattern:
        return DiscardPattern(location=self._token_location(token))
