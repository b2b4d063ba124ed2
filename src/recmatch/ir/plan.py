"""
Match Plan IR

A MatchPlan is the resolved, immutable form of one `matches` site: which
Match operator to call, what dynamic type test guards the call, and what to
do with each out-value (bind it, match it against a nested plan, or drop it).
Plans hold no mutable state and can be evaluated concurrently.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from ..shared.members import MatchOperator
from ..shared.nodes import Expression
from ..shared.source_location import SourceLocation
from ..shared.types import Type


@dataclass(frozen=True)
class TypeTest:
    """
    Narrowing of the subject to the operator's first parameter type.

    When `statically_satisfied` is set the subject's static type already
    guarantees `target`; the test is still recorded so evaluation has a single
    code path, and it still rejects null.
    """
    target: Type
    statically_satisfied: bool


@dataclass(frozen=True)
class VariableSlot:
    index: int
    name: str
    type: Type


@dataclass(frozen=True)
class NestedSlot:
    index: int
    plan: "MatchPlan"


@dataclass(frozen=True)
class DiscardSlot:
    index: int


Slot = Union[VariableSlot, NestedSlot, DiscardSlot]


@dataclass(frozen=True)
class MatchPlan:
    subject_type: Type
    target_type: Type
    operator: MatchOperator
    type_test: TypeTest
    slots: Tuple[Slot, ...]
    # Union of every leaf binding below this node, in pattern order
    bindings: Tuple[Tuple[str, Type], ...]
    subject: Optional[Expression] = field(default=None, compare=False)
    location: Optional[SourceLocation] = field(default=None, compare=False)

    @property
    def binding_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.bindings)

    def binding_types(self) -> Dict[str, Type]:
        return dict(self.bindings)

    def depth(self) -> int:
        nested = [s.plan.depth() for s in self.slots if isinstance(s, NestedSlot)]
        return 1 + max(nested, default=0)
