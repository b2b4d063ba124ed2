"""
Type System

Types are nominal and immutable. Record types carry only their name; the base
record of each record lives in the type catalog (passes.base.TyCtxt), so the
subtype relation is always asked through a `base_of` lookup.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional
from enum import Enum


class TypeKind(Enum):
    PRIMITIVE = "primitive"  # int, str, bool, float
    RECORD = "record"
    OBJECT = "object"        # top type
    NULL = "null"            # type of the `null` literal


@dataclass(frozen=True)
class Type:
    """Base of every semantic type (frozen, hashable, compared by value)."""
    kind: TypeKind


@dataclass(frozen=True)
class PrimitiveType(Type):
    """Primitive value type (int, str, bool, float). Never nullable."""
    name: str

    def __init__(self, name: str):
        super().__init__(kind=TypeKind.PRIMITIVE)
        object.__setattr__(self, 'name', name)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RecordType(Type):
    """Nominal reference to a declared record."""
    name: str

    def __init__(self, name: str):
        super().__init__(kind=TypeKind.RECORD)
        object.__setattr__(self, 'name', name)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"RecordType({self.name})"


@dataclass(frozen=True)
class ObjectType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.OBJECT)

    def __str__(self) -> str:
        return "object"

    __repr__ = __str__


@dataclass(frozen=True)
class NullType(Type):
    def __init__(self):
        super().__init__(kind=TypeKind.NULL)

    def __str__(self) -> str:
        return "null"

    __repr__ = __str__


INT = PrimitiveType("int")
STR = PrimitiveType("str")
BOOL = PrimitiveType("bool")
FLOAT = PrimitiveType("float")
OBJECT = ObjectType()
NULL = NullType()

BUILTIN_TYPES: Dict[str, Type] = {
    t.name if isinstance(t, PrimitiveType) else str(t): t
    for t in (INT, STR, BOOL, FLOAT, OBJECT)
}


def lookup_builtin_type(name: str) -> Optional[Type]:
    return BUILTIN_TYPES.get(name)


BaseLookup = Callable[[RecordType], Optional[RecordType]]


def is_subtype(sub: Type, sup: Type, base_of: BaseLookup) -> bool:
    """
    Reflexive nominal subtyping.

    Everything is an object; `null` converts to any record type (and object)
    but never to a primitive; records follow their base chain.
    """
    if sub == sup or sup == OBJECT:
        return True
    if sub == NULL:
        return isinstance(sup, RecordType)
    if isinstance(sub, RecordType) and isinstance(sup, RecordType):
        seen = {sub}
        current = base_of(sub)
        while current is not None and current not in seen:
            if current == sup:
                return True
            seen.add(current)
            current = base_of(current)
    return False


def are_related(a: Type, b: Type, base_of: BaseLookup) -> bool:
    """True when a runtime value of static type `a` could also be a `b`."""
    return is_subtype(a, b, base_of) or is_subtype(b, a, base_of)
