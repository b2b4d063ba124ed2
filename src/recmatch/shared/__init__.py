"""
Shared foundational types: source spans, diagnostics, the type system,
declaration/pattern/expression nodes and effective-member variants.
"""

from .source_location import SourceLocation
from .errors import (
    Error, ErrorReporter, RecmatchError, RecmatchImplementationError, RecmatchRuntimeError,
    ParseError, DuplicatePrimaryMemberError, MutablePrimaryMemberError, UnknownTypeError,
    RecordHierarchyError, DuplicateRecordError, UnknownNameError, RecordConstructionError,
    MatchOperatorResolutionError, PatternArityError, PatternTypeError,
    DuplicateBindingNameError, MatchOperatorDeclarationError,
)
from .types import (
    Type, TypeKind, PrimitiveType, RecordType, ObjectType, NullType,
    INT, STR, BOOL, FLOAT, OBJECT, NULL,
    lookup_builtin_type, is_subtype, are_related,
)
from .nodes import (
    MemberKind, PrimaryMember, UserDeclaredMember, RecordDeclaration,
    Pattern, VariablePattern, DiscardPattern, TypePattern,
    Expression, Literal, Identifier, Construction, Call, MemberAccess, Comparison,
    MatchesExpression, Statement, LetStatement, ExpressionStatement, Program,
)
from .members import (
    Origin, EffectiveMember, SynthesizedMember, UserProvidedMember,
    OutArguments, MatchOperator, in_primary_order,
)
