"""
Match Resolution Pass

Turns every `subject matches T(p1, ..., pn)` site into a MatchPlan at compile
time:

1. determine the static type of the subject;
2. ask the overload oracle for the unique Match operator on T accepting the
   argument shapes (none or several is a compile-time error);
3. record the dynamic type test narrowing the subject to the operator's
   subject parameter type;
4. recurse: `var x`/`T x` bind an out-value, `T(...)` resolves a nested plan
   against the out-parameter's declared type, `_` drops the out-value;
5. reject plans binding the same name twice.
"""

import logging
from typing import Dict, Optional, Sequence

from .base import BasePass, TyCtxt
from .deconstruction import DeconstructionPass
from .equality_synthesis import EqualitySynthesisPass
from ..analysis.overload import OverloadOracle, OverloadResolution, PatternShape, ResolutionStatus, ShapeKind
from ..ir.plan import DiscardSlot, MatchPlan, NestedSlot, TypeTest, VariableSlot
from ..shared.errors import (
    DuplicateBindingNameError, MatchOperatorResolutionError, PatternArityError, PatternTypeError,
    RecmatchError, RecmatchImplementationError, RecordConstructionError, UnknownNameError,
)
from ..shared.members import MatchOperator
from ..shared.nodes import (
    Call, Comparison, Construction, DiscardPattern, Expression, ExpressionStatement, Identifier,
    LetStatement, Literal, MatchesExpression, MemberAccess, Pattern, Program, TypePattern,
    VariablePattern,
)
from ..shared.source_location import SourceLocation
from ..shared.types import Type, RecordType, BOOL, FLOAT, INT, NULL, OBJECT, STR

logger = logging.getLogger("recmatch.passes.match_resolution")

BUILTIN_FUNCTIONS = ("print", "assert")


class MatchResolver:
    """
    Resolves patterns against the record catalog of a TyCtxt.

    `scope` maps names to static types for identifier subjects; resolving a
    `matches` site through `resolve_site` adds its bindings to the scope and
    widens the names it re-binds.
    """

    def __init__(self, tcx: TyCtxt, oracle: Optional[OverloadOracle] = None,
                 scope: Optional[Dict[str, Type]] = None):
        self.tcx = tcx
        self.oracle = oracle if oracle is not None else tcx.oracle
        self.scope: Dict[str, Type] = scope if scope is not None else {}
        self.typer = ExpressionTyper(tcx, self)

    def resolve(self,
                subject: Optional[Expression],
                target_type: Type,
                arg_patterns: Sequence[Pattern],
                subject_type: Optional[Type] = None,
                location: Optional[SourceLocation] = None) -> MatchPlan:
        """Resolve `subject matches target_type(arg_patterns...)`."""
        if subject_type is None:
            if subject is None:
                raise RecmatchImplementationError("resolve() needs a subject expression or its static type")
            subject_type = self.typer.type_of(subject)
        seen: Dict[str, Type] = {}
        return self._resolve_node(subject, subject_type, target_type, tuple(arg_patterns), seen, location)

    def resolve_pattern(self,
                        subject: Optional[Expression],
                        pattern: TypePattern,
                        subject_type: Optional[Type] = None) -> MatchPlan:
        target = self._target_type(pattern)
        return self.resolve(subject, target, pattern.args, subject_type, pattern.location)

    def resolve_site(self, site: MatchesExpression) -> MatchPlan:
        plan = self.resolve_pattern(site.subject, site.pattern)
        self.tcx.match_plans[site] = plan
        for name, bound_type in plan.bindings:
            previous = self.scope.get(name)
            self.scope[name] = bound_type if previous is None else self._widen(previous, bound_type)
        return plan

    def _widen(self, previous: Type, bound: Type) -> Type:
        """
        Static type of a name re-bound by a pattern. A failed match keeps the
        previous value, so the name may hold either one afterwards.
        """
        if self.tcx.is_subtype(previous, bound):
            return bound
        if self.tcx.is_subtype(bound, previous):
            return previous
        return OBJECT

    # -- recursion -------------------------------------------------------------

    def _resolve_node(self,
                      subject: Optional[Expression],
                      subject_type: Type,
                      target_type: Type,
                      args: tuple,
                      seen: Dict[str, Type],
                      location: Optional[SourceLocation]) -> MatchPlan:
        shapes = [self._shape_of(arg) for arg in args]
        resolution = self.oracle.resolve_overload(target_type, len(args), shapes)
        operator = self._select(resolution, target_type, shapes, location)
        type_test = self._type_test(subject_type, operator.subject_type, location)

        slots = []
        bindings = []
        for index, (arg, out_type) in enumerate(zip(args, operator.out_types)):
            if isinstance(arg, VariablePattern):
                if arg.name in seen:
                    raise DuplicateBindingNameError(arg.name, arg.location or location)
                bound_type = arg.declared_type if arg.declared_type is not None else out_type
                seen[arg.name] = bound_type
                slots.append(VariableSlot(index, arg.name, bound_type))
                bindings.append((arg.name, bound_type))
            elif isinstance(arg, TypePattern):
                nested = self._resolve_node(
                    None, out_type, self._target_type(arg), arg.args, seen, arg.location or location,
                )
                slots.append(NestedSlot(index, nested))
                bindings.extend(nested.bindings)
            elif isinstance(arg, DiscardPattern):
                slots.append(DiscardSlot(index))
            else:
                raise RecmatchImplementationError(f"unknown pattern node {type(arg).__name__}")

        return MatchPlan(
            subject_type=subject_type,
            target_type=target_type,
            operator=operator,
            type_test=type_test,
            slots=tuple(slots),
            bindings=tuple(bindings),
            subject=subject,
            location=location,
        )

    def _target_type(self, pattern: TypePattern) -> RecordType:
        target = self.tcx.resolve_type_name(pattern.type_name, pattern.location)
        if not isinstance(target, RecordType):
            raise MatchOperatorResolutionError(
                f"`{target}` is not a record and has no Match operator",
                pattern.location,
            )
        return target

    def _shape_of(self, arg: Pattern) -> PatternShape:
        if isinstance(arg, VariablePattern):
            if arg.declared_type is None:
                return PatternShape(ShapeKind.VARIABLE)
            return PatternShape(ShapeKind.TYPED, self.tcx.require_known(arg.declared_type, arg.location))
        if isinstance(arg, TypePattern):
            return PatternShape(ShapeKind.NESTED, self._target_type(arg))
        if isinstance(arg, DiscardPattern):
            return PatternShape(ShapeKind.DISCARD)
        raise RecmatchImplementationError(f"unknown pattern node {type(arg).__name__}")

    def _select(self,
                resolution: OverloadResolution,
                target: Type,
                shapes: Sequence[PatternShape],
                location: Optional[SourceLocation]) -> MatchOperator:
        shown = f"{target}({', '.join(str(s) for s in shapes)})"
        status = resolution.status
        if status is ResolutionStatus.RESOLVED:
            return resolution.selected
        if status is ResolutionStatus.NO_OPERATOR:
            raise MatchOperatorResolutionError(f"no Match operator found on `{target}`", location)
        if status is ResolutionStatus.ARITY_MISMATCH:
            arities = sorted({op.arity for op in resolution.candidates})
            raise PatternArityError(
                f"pattern `{shown}` has {len(shapes)} argument(s) but no Match operator on "
                f"`{target}` takes {len(shapes)} out-parameter(s)",
                location,
                resolution.candidates,
                help=f"available arities: {', '.join(map(str, arities))}",
            )
        if status is ResolutionStatus.TYPE_MISMATCH:
            raise PatternTypeError(
                f"no Match operator on `{target}` accepts the pattern `{shown}`",
                location,
                resolution.candidates,
            )
        raise MatchOperatorResolutionError(
            f"ambiguous Match operator for pattern `{shown}`",
            location,
            resolution.candidates,
            help="give the pattern arguments explicit types to select one overload",
        )

    def _type_test(self, subject_type: Type, first: Type, location: Optional[SourceLocation]) -> TypeTest:
        if not self.tcx.are_related(subject_type, first):
            raise PatternTypeError(
                f"an expression of type `{subject_type}` can never match a pattern of type `{first}`",
                location,
            )
        statically = subject_type != NULL and self.tcx.is_subtype(subject_type, first)
        return TypeTest(first, statically)


class ExpressionTyper:
    """Static types of surface-language expressions."""

    def __init__(self, tcx: TyCtxt, resolver: MatchResolver):
        self.tcx = tcx
        self.resolver = resolver

    def type_of(self, expr: Expression) -> Type:
        if isinstance(expr, Literal):
            return _literal_type(expr.value)
        if isinstance(expr, Identifier):
            if expr.name not in self.resolver.scope:
                raise UnknownNameError(f"cannot find value `{expr.name}` in this scope", expr.location)
            return self.resolver.scope[expr.name]
        if isinstance(expr, Construction):
            return self._construction(expr)
        if isinstance(expr, MemberAccess):
            return self._member_access(expr)
        if isinstance(expr, Comparison):
            self.type_of(expr.left)
            self.type_of(expr.right)
            return BOOL
        if isinstance(expr, MatchesExpression):
            self.resolver.resolve_site(expr)
            return BOOL
        if isinstance(expr, Call):
            if expr.name not in BUILTIN_FUNCTIONS:
                raise UnknownNameError(f"cannot find function `{expr.name}`", expr.location)
            for arg in expr.args:
                self.type_of(arg)
            return NULL
        raise RecmatchImplementationError(f"unknown expression node {type(expr).__name__}")

    def _construction(self, expr: Construction) -> Type:
        info = self.tcx.lookup_record(expr.type_name)
        if info is None:
            raise UnknownNameError(f"cannot find record `{expr.type_name}`", expr.location)
        primary = info.declaration.primary_members
        if len(expr.args) != len(primary):
            raise RecordConstructionError(
                f"`{info.name}` takes {len(primary)} value(s) but {len(expr.args)} were given",
                expr.location,
            )
        for member, arg in zip(primary, expr.args):
            arg_type = self.type_of(arg)
            if not self.tcx.is_subtype(arg_type, member.type):
                raise RecordConstructionError(
                    f"`{info.name}.{member.name}` expects `{member.type}`, found `{arg_type}`",
                    getattr(arg, "location", None) or expr.location,
                )
        return info.record_type

    def _member_access(self, expr: MemberAccess) -> Type:
        target = self.type_of(expr.target)
        info = self.tcx.lookup_record(target)
        member = info.members.get(expr.member) if info is not None else None
        if member is None:
            raise UnknownNameError(f"no member `{expr.member}` on type `{target}`", expr.location)
        return member.value_type or OBJECT


def _literal_type(value) -> Type:
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, int):
        return INT
    if isinstance(value, float):
        return FLOAT
    return STR


class MatchResolutionPass(BasePass):
    requires = [DeconstructionPass, EqualitySynthesisPass]

    def run(self, program: Program, tcx: TyCtxt) -> Program:
        resolver = MatchResolver(tcx)
        for statement in program.statements:
            try:
                if isinstance(statement, LetStatement):
                    resolver.scope[statement.name] = resolver.typer.type_of(statement.value)
                elif isinstance(statement, ExpressionStatement):
                    resolver.typer.type_of(statement.expression)
            except RecmatchError as e:
                tcx.reporter.report_exception(e)
                if isinstance(statement, LetStatement):
                    resolver.scope[statement.name] = OBJECT
        logger.debug(f"resolved {len(tcx.match_plans)} match site(s)")
        return program
