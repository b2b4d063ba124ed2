"""
Deconstruction Pass

Gives every record its Match operators. Without user-declared `Match`
operators the record gets one synthesized operator,

    Match(self: R, out m1: T1, ..., out mn: Tn) -> bool

which copies the primary members (read through their effective members) into
the out-parameters in declared order and always succeeds. User-declared
`Match` operators replace it entirely; several user overloads may coexist.
"""

import logging
from typing import Any, Mapping, Sequence, Tuple

from .base import BasePass, TyCtxt
from .member_synthesis import MemberSynthesisPass
from ..shared.errors import MatchOperatorDeclarationError, RecmatchError
from ..shared.members import (
    EffectiveMember, MatchOperator, Origin, OutArguments, UserProvidedMember, in_primary_order,
)
from ..shared.nodes import MemberKind, PrimaryMember, Program, UserDeclaredMember
from ..shared.types import RecordType
from ..utils.config import MATCH_OPERATOR_NAME

logger = logging.getLogger("recmatch.passes.deconstruction")


def synthesize_match(record_type: RecordType,
                     effective: Mapping[str, EffectiveMember],
                     primary_members: Sequence[PrimaryMember]) -> Tuple[MatchOperator, ...]:
    user = effective.get(MATCH_OPERATOR_NAME)
    if isinstance(user, UserProvidedMember):
        operators = tuple(
            _user_operator(record_type, declaration)
            for declaration in user.declarations
            if declaration.kind is MemberKind.OPERATOR
        )
        if operators:
            return operators

    ordered = in_primary_order(effective, primary_members)

    def match(subject: Any, out: OutArguments) -> bool:
        for index, member in enumerate(ordered):
            out[index] = member.read(subject)
        return True

    return (MatchOperator(
        owner=record_type,
        subject_type=record_type,
        out_types=tuple(m.type for m in primary_members),
        origin=Origin.SYNTHESIZED,
        body=match,
    ),)


def _user_operator(record_type: RecordType, declaration: UserDeclaredMember) -> MatchOperator:
    if not declaration.param_types:
        raise MatchOperatorDeclarationError(
            f"`{record_type}.{MATCH_OPERATOR_NAME}` must declare its subject parameter",
            declaration.location,
            help="list the subject type first, then one type per out-parameter",
        )
    if declaration.body is None:
        raise MatchOperatorDeclarationError(
            f"`{record_type}.{MATCH_OPERATOR_NAME}` has no body",
            declaration.location,
        )
    subject_type, *out_types = declaration.param_types
    return MatchOperator(
        owner=record_type,
        subject_type=subject_type,
        out_types=tuple(out_types),
        origin=Origin.USER_PROVIDED,
        body=declaration.body,
        location=declaration.location,
    )


class DeconstructionPass(BasePass):
    requires = [MemberSynthesisPass]

    def run(self, program: Program, tcx: TyCtxt) -> Program:
        for info in tcx.records.values():
            if not info.members and info.declaration.primary_members:
                continue
            try:
                operators = synthesize_match(info.record_type, info.members, info.declaration.primary_members)
                for operator in operators:
                    tcx.require_known(operator.subject_type, operator.location)
                    for out_type in operator.out_types:
                        tcx.require_known(out_type, operator.location)
            except RecmatchError as e:
                tcx.reporter.report_exception(e)
                continue
            info.match_operators = operators
            logger.debug(f"{info.name}: " + "; ".join(f"{op} [{op.origin.value}]" for op in operators))
        return program
