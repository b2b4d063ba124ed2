"""
Equality Synthesis Pass

Element-wise Equals and an order-dependent hash over the primary members in
declared order, unless the user declared Equals or GetHashCode.

Hazard: the hash is only stable because primary members are immutable
(mutable primary members are rejected during member synthesis). A user
property override that reads mutable state makes the hash unstable; such a
record must not be used as a key in a hash-based container after mutation.
"""

import logging
from typing import Any, Mapping, Optional, Sequence, Tuple

from .base import BasePass, TyCtxt, EqualsFn, HashFn
from .member_synthesis import MemberSynthesisPass
from ..runtime.values import RecordInstance, runtime_type_of
from ..shared.members import EffectiveMember, UserProvidedMember, in_primary_order
from ..shared.nodes import PrimaryMember, Program
from ..utils.config import (
    EQUALS_MEMBER_NAME, HASH_MEMBER_NAME, HASH_SEED, HASH_MULTIPLIER, HASH_MASK,
)

logger = logging.getLogger("recmatch.passes.equality_synthesis")


def synthesize_equality(effective: Mapping[str, EffectiveMember],
                        primary_members: Sequence[PrimaryMember]) -> Tuple[EqualsFn, HashFn]:
    user_equals = _user_declared(effective, EQUALS_MEMBER_NAME)
    user_hash = _user_declared(effective, HASH_MEMBER_NAME)
    if user_equals is not None or user_hash is not None:
        if user_equals is None or user_hash is None:
            logger.warning(
                f"only one of {EQUALS_MEMBER_NAME}/{HASH_MEMBER_NAME} is user-declared; "
                "the other falls back to reference semantics"
            )
        return (_body_or(user_equals, _reference_equals), _body_or(user_hash, _reference_hash))

    ordered = in_primary_order(effective, primary_members)
    layout = tuple(m.name for m in primary_members)

    def equals(a: Any, b: Any) -> bool:
        if a is b:
            return True
        if not (isinstance(b, RecordInstance)
                and b.record_type == a.record_type
                and b.layout == layout):
            return False
        for member in ordered:
            if not same_value(member.read(a), member.read(b)):
                return False
        return True

    def hash_code(a: Any) -> int:
        h = HASH_SEED
        for member in ordered:
            h = combine_hash(h, value_hash(member.read(a)))
        return h

    return equals, hash_code


def combine_hash(accumulator: int, member_hash: int) -> int:
    return (accumulator * HASH_MULTIPLIER + member_hash) & HASH_MASK


def same_value(a: Any, b: Any) -> bool:
    """Member equality; values of different runtime types (1, true, 1.0) never compare equal."""
    return runtime_type_of(a) == runtime_type_of(b) and a == b


def value_hash(value: Any) -> int:
    return hash((runtime_type_of(value), value))


def _user_declared(effective: Mapping[str, EffectiveMember], name: str) -> Optional[UserProvidedMember]:
    member = effective.get(name)
    return member if isinstance(member, UserProvidedMember) else None


def _body_or(member: Optional[UserProvidedMember], fallback):
    if member is None or member.declaration.body is None:
        return fallback
    return member.declaration.body


def _reference_equals(a: Any, b: Any) -> bool:
    return a is b


def _reference_hash(a: Any) -> int:
    return object.__hash__(a)


class EqualitySynthesisPass(BasePass):
    requires = [MemberSynthesisPass]

    def run(self, program: Program, tcx: TyCtxt) -> Program:
        for info in tcx.records.values():
            if not info.members and info.declaration.primary_members:
                continue  # member synthesis failed for this record
            info.equals, info.hash = synthesize_equality(info.members, info.declaration.primary_members)
            logger.debug(f"equality for {info.name}: "
                         f"{'user-provided' if _user_declared(info.members, EQUALS_MEMBER_NAME) else 'synthesized'}")
        return program
