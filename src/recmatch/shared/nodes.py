"""
Declaration, Pattern and Expression Nodes

Declarations and patterns are frozen value objects compared structurally.
Expressions and statements compare by identity (`eq=False`): a `matches`
expression is a site, and two textually identical sites still get their
own MatchPlan.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence, Tuple, Union

from .source_location import SourceLocation
from .types import Type, RecordType


# =============================================================================
# Record declarations
# =============================================================================

class MemberKind(Enum):
    PROPERTY = "property"
    METHOD = "method"
    OPERATOR = "operator"


@dataclass(frozen=True)
class PrimaryMember:
    """Named, typed constructor input. `position` is its canonical order."""
    name: str
    type: Type
    position: int
    mutable: bool = False
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class UserDeclaredMember:
    """
    A member the user wrote by hand.

    `body` is host code. Its calling convention depends on the member:
    properties take the instance, `Equals` takes two instances,
    `GetHashCode`/`ToString` take the instance, and a `Match` operator takes
    `(subject, out)` and returns a bool. For operators `param_types` lists the
    subject parameter type followed by the out-parameter types.
    """
    name: str
    kind: MemberKind
    body: Optional[Callable[..., Any]] = field(default=None, compare=False)
    param_types: Tuple[Type, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class RecordDeclaration:
    name: str
    primary_members: Tuple[PrimaryMember, ...]
    user_members: Tuple[UserDeclaredMember, ...] = ()
    base: Optional[str] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)

    @classmethod
    def of(cls,
           name: str,
           members: Iterable[Tuple[str, Type]] = (),
           user_members: Iterable[UserDeclaredMember] = (),
           base: Optional[str] = None,
           location: Optional[SourceLocation] = None) -> "RecordDeclaration":
        """Build a declaration from (name, type) pairs, numbering positions in order."""
        primary = tuple(
            PrimaryMember(member_name, member_type, position)
            for position, (member_name, member_type) in enumerate(members)
        )
        return cls(name, primary, tuple(user_members), base, location)

    @property
    def record_type(self) -> RecordType:
        return RecordType(self.name)

    @property
    def layout(self) -> Tuple[str, ...]:
        """Declared member order; equality and positional patterns depend on it."""
        return tuple(m.name for m in self.primary_members)


# =============================================================================
# Patterns
# =============================================================================

class Pattern:
    """Base class for the argument patterns of a `matches` expression."""
    __slots__ = ()


@dataclass(frozen=True)
class VariablePattern(Pattern):
    """`var name`, or `T name` when declared_type is set."""
    name: str
    declared_type: Optional[Type] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class DiscardPattern(Pattern):
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class TypePattern(Pattern):
    """`T(p1, ..., pn)` - recursive positional pattern."""
    type_name: str
    args: Tuple[Pattern, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False)


# =============================================================================
# Expressions and statements (surface language)
# =============================================================================

class Expression:
    __slots__ = ()


@dataclass(frozen=True, eq=False)
class Literal(Expression):
    value: Union[int, float, str, bool, None]
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, eq=False)
class Identifier(Expression):
    name: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, eq=False)
class Construction(Expression):
    type_name: str
    args: Tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, eq=False)
class Call(Expression):
    """Builtin call (print, assert)."""
    name: str
    args: Tuple[Expression, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, eq=False)
class MemberAccess(Expression):
    target: Expression
    member: str
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, eq=False)
class Comparison(Expression):
    operator: str  # "==" or "!="
    left: Expression
    right: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, eq=False)
class MatchesExpression(Expression):
    subject: Expression
    pattern: TypePattern
    location: Optional[SourceLocation] = None


class Statement:
    __slots__ = ()


@dataclass(frozen=True, eq=False)
class LetStatement(Statement):
    name: str
    value: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, eq=False)
class ExpressionStatement(Statement):
    expression: Expression
    location: Optional[SourceLocation] = None


@dataclass(frozen=True, eq=False)
class Program:
    records: Tuple[RecordDeclaration, ...] = ()
    statements: Tuple[Statement, ...] = ()
    source_file: str = "<memory>"

    @classmethod
    def of_records(cls, records: Sequence[RecordDeclaration]) -> "Program":
        return cls(records=tuple(records))
