"""
Effective Members and Match Operators

Override-by-presence is resolved once per record into tagged variants:
every member name maps to exactly one EffectiveMember, either
SynthesizedMember (an accessor generated from a primary member) or
UserProvidedMember (what the user wrote). Match operators carry the same
Origin tag.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from .errors import RecmatchRuntimeError
from .nodes import MemberKind, PrimaryMember, UserDeclaredMember
from .source_location import SourceLocation
from .types import Type, RecordType


class Origin(Enum):
    SYNTHESIZED = "synthesized"
    USER_PROVIDED = "user_provided"


class EffectiveMember(ABC):
    """The member actually exposed under a name."""

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def kind(self) -> MemberKind: ...

    @property
    @abstractmethod
    def origin(self) -> Origin: ...

    @property
    def value_type(self) -> Optional[Type]:
        """Static type of the value read(), when known."""
        return None

    @abstractmethod
    def read(self, instance: Any) -> Any:
        """Read this member from a record instance."""


@dataclass(frozen=True)
class SynthesizedMember(EffectiveMember):
    """Read-only auto property returning the constructor-time value."""
    source: PrimaryMember

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def kind(self) -> MemberKind:
        return MemberKind.PROPERTY

    @property
    def origin(self) -> Origin:
        return Origin.SYNTHESIZED

    @property
    def value_type(self) -> Optional[Type]:
        return self.source.type

    def read(self, instance: Any) -> Any:
        return instance.storage[self.source.position]


@dataclass(frozen=True)
class UserProvidedMember(EffectiveMember):
    """
    All user declarations sharing one name (overloads group together).

    `shadows` is the primary member this declaration replaced, if any; a
    bodiless re-declaration of a primary member reads its stored value.
    """
    declarations: Tuple[UserDeclaredMember, ...]
    shadows: Optional[PrimaryMember] = None

    @property
    def declaration(self) -> UserDeclaredMember:
        return self.declarations[0]

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def kind(self) -> MemberKind:
        return self.declaration.kind

    @property
    def origin(self) -> Origin:
        return Origin.USER_PROVIDED

    @property
    def value_type(self) -> Optional[Type]:
        return self.shadows.type if self.shadows is not None else None

    def read(self, instance: Any) -> Any:
        body = self.declaration.body
        if body is not None:
            return body(instance)
        if self.shadows is not None:
            return instance.storage[self.shadows.position]
        raise RecmatchRuntimeError(
            f"member `{self.name}` of `{instance.record_type}` has no body",
            self.declaration.location,
        )


def in_primary_order(effective: Mapping[str, EffectiveMember],
                     primary_members: Sequence[PrimaryMember]) -> List[EffectiveMember]:
    """Effective members of the primary members, in declared order."""
    return [effective[m.name] for m in primary_members]


class OutArguments:
    """
    Out-parameter slots handed to a Match operator body.

    Every slot starts at the default value (None). Whatever the body writes is
    only surfaced as bindings when the body returns true.
    """
    __slots__ = ('_slots',)

    def __init__(self, arity: int):
        self._slots: List[Any] = [None] * arity

    def __setitem__(self, index: int, value: Any) -> None:
        self._slots[index] = value

    def __getitem__(self, index: int) -> Any:
        return self._slots[index]

    def __len__(self) -> int:
        return len(self._slots)

    def values(self) -> Tuple[Any, ...]:
        return tuple(self._slots)


MatchBody = Callable[[Any, OutArguments], bool]


@dataclass(frozen=True)
class MatchOperator:
    """`(subject: subject_type, out o1: T1, ..., out on: Tn) -> bool`"""
    owner: RecordType
    subject_type: Type
    out_types: Tuple[Type, ...]
    origin: Origin
    body: MatchBody = field(compare=False)
    location: Optional[SourceLocation] = field(default=None, compare=False)

    @property
    def arity(self) -> int:
        return len(self.out_types)

    def invoke(self, subject: Any) -> Tuple[bool, Tuple[Any, ...]]:
        """Run the body; faults raised by the body propagate unchanged."""
        out = OutArguments(self.arity)
        succeeded = bool(self.body(subject, out))
        return succeeded, out.values()

    def __str__(self) -> str:
        outs = "".join(f", out {t}" for t in self.out_types)
        return f"{self.owner}.Match({self.subject_type} self{outs})"
