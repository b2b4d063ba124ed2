"""
Runtime Values

Record instances are immutable: values are fixed at construction and every
member read, equality check, hash and display goes through the effective
members synthesized for the record.
"""

from typing import Any, Sequence, Tuple, TYPE_CHECKING

from ..shared.errors import RecmatchRuntimeError
from ..shared.types import Type, RecordType, BOOL, FLOAT, INT, STR, OBJECT, NULL
from ..utils.config import NULL_LITERAL, BOOLEAN_TRUE_LITERAL, BOOLEAN_FALSE_LITERAL

if TYPE_CHECKING:
    from ..passes.base import RecordInfo


class RecordInstance:
    __slots__ = ('_info', '_storage')

    def __init__(self, info: "RecordInfo", values: Sequence[Any]):
        object.__setattr__(self, '_info', info)
        object.__setattr__(self, '_storage', tuple(values))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"record `{self.record_type}` is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"record `{self.record_type}` is immutable")

    @property
    def info(self) -> "RecordInfo":
        return self._info

    @property
    def record_type(self) -> RecordType:
        return self._info.record_type

    @property
    def layout(self) -> Tuple[str, ...]:
        return self._info.declaration.layout

    @property
    def storage(self) -> Tuple[Any, ...]:
        """Constructor-time values in primary order."""
        return self._storage

    def get(self, name: str) -> Any:
        member = self._info.members.get(name)
        if member is None:
            raise RecmatchRuntimeError(f"`{self.record_type}` has no member `{name}`")
        return member.read(self)

    __getitem__ = get

    def __eq__(self, other: Any) -> bool:
        return bool(self._info.equals(self, other))

    def __ne__(self, other: Any) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return self._info.hash(self)

    def __repr__(self) -> str:
        return self._info.display(self)


_PRIMITIVE_BY_PYTHON_TYPE = {bool: BOOL, int: INT, float: FLOAT, str: STR}


def runtime_type_of(value: Any) -> Type:
    if value is None:
        return NULL
    if isinstance(value, RecordInstance):
        return value.record_type
    return _PRIMITIVE_BY_PYTHON_TYPE.get(type(value), OBJECT)


def is_instance_of(value: Any, target: Type) -> bool:
    """Dynamic type test. Null is never an instance of anything."""
    if value is None:
        return False
    if target == OBJECT:
        return True
    if isinstance(value, RecordInstance):
        return target in value.info.ancestors
    return runtime_type_of(value) == target


def conforms(value: Any, declared: Type) -> bool:
    """May `value` be stored in a slot of the declared type?"""
    if value is None:
        return declared == OBJECT or isinstance(declared, RecordType)
    return is_instance_of(value, declared)


def display_value(value: Any) -> str:
    if value is None:
        return NULL_LITERAL
    if value is True:
        return BOOLEAN_TRUE_LITERAL
    if value is False:
        return BOOLEAN_FALSE_LITERAL
    if isinstance(value, str):
        return value
    return repr(value)
