"""
Member Synthesis Pass

Computes the effective member set of each record: a read-only accessor for
every primary member, unless the user declared a member with the same name,
in which case the user's declaration wins for that name only. Also
synthesizes the record's display (`Point(x: 1, y: 2)`) unless the user
declared `ToString`.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence

from .base import BasePass, TyCtxt, DisplayFn
from .record_collection import RecordCollectionPass
from ..shared.errors import (
    DuplicatePrimaryMemberError, MutablePrimaryMemberError,
    RecmatchError, RecmatchImplementationError,
)
from ..shared.members import EffectiveMember, SynthesizedMember, UserProvidedMember, in_primary_order
from ..shared.nodes import PrimaryMember, Program, UserDeclaredMember
from ..utils.config import DISPLAY_MEMBER_NAME

logger = logging.getLogger("recmatch.passes.member_synthesis")


def synthesize(primary_members: Sequence[PrimaryMember],
               user_members: Sequence[UserDeclaredMember]) -> Dict[str, EffectiveMember]:
    """
    One EffectiveMember per distinct name.

    Raises DuplicatePrimaryMemberError for repeated primary names and
    MutablePrimaryMemberError for mutable primary members (forbidden: the
    synthesized hash reads them).
    """
    primary_by_name: Dict[str, PrimaryMember] = {}
    for position, member in enumerate(primary_members):
        if member.name in primary_by_name:
            raise DuplicatePrimaryMemberError(member.name, member.location)
        if member.mutable:
            raise MutablePrimaryMemberError(member.name, member.location)
        if member.position != position:
            raise RecmatchImplementationError(
                f"primary member `{member.name}` has position {member.position}, expected {position}"
            )
        primary_by_name[member.name] = member

    user_by_name: Dict[str, List[UserDeclaredMember]] = {}
    for declaration in user_members:
        user_by_name.setdefault(declaration.name, []).append(declaration)

    effective: Dict[str, EffectiveMember] = {}
    for member in primary_members:
        if member.name not in user_by_name:
            effective[member.name] = SynthesizedMember(member)
    for name, declarations in user_by_name.items():
        effective[name] = UserProvidedMember(tuple(declarations), shadows=primary_by_name.get(name))
    return effective


def synthesize_display(record_name: str,
                       effective: Mapping[str, EffectiveMember],
                       primary_members: Sequence[PrimaryMember]) -> DisplayFn:
    user = effective.get(DISPLAY_MEMBER_NAME)
    if isinstance(user, UserProvidedMember) and user.declaration.body is not None:
        body = user.declaration.body
        return lambda instance: str(body(instance))

    from ..runtime.values import display_value

    ordered = in_primary_order(effective, primary_members)

    def display(instance: Any) -> str:
        fields = ", ".join(f"{m.name}: {display_value(m.read(instance))}" for m in ordered)
        return f"{record_name}({fields})"

    return display


class MemberSynthesisPass(BasePass):
    requires = [RecordCollectionPass]

    def run(self, program: Program, tcx: TyCtxt) -> Program:
        for info in tcx.records.values():
            declaration = info.declaration
            try:
                info.members = synthesize(declaration.primary_members, declaration.user_members)
            except RecmatchError as e:
                e.message = f"in record `{declaration.name}`: {e.message}"
                tcx.reporter.report_exception(e)
                continue
            info.display = synthesize_display(declaration.name, info.members, declaration.primary_members)

            synthesized = sum(1 for m in info.members.values() if isinstance(m, SynthesizedMember))
            overridden = sorted(n for n, m in info.members.items()
                                if isinstance(m, UserProvidedMember) and m.shadows is not None)
            logger.debug(f"synthesized {synthesized} accessor(s) for {declaration.name}"
                         + (f", user overrides: {', '.join(overridden)}" if overridden else ""))
        return program
