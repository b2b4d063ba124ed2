"""
Match Evaluator

Executes a resolved MatchPlan against a run-time value, strictly in order:

1. dynamic type test - on failure (null included) the Match operator is
   not invoked at all;
2. invoke the operator on the narrowed subject;
3. false discards whatever the operator wrote to its out-parameters;
4. nested plans are evaluated against their out-values, first failure wins;
5. success carries the union of all leaf bindings.

Matching is all-or-nothing: bindings gathered before a failure are dropped.
A fault raised by an operator body propagates unmodified.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping

from ..ir.plan import MatchPlan, NestedSlot, TypeTest, VariableSlot
from .values import is_instance_of


class MatchResultTag(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class MatchResult:
    """Success(bindings) | Failure"""
    tag: MatchResultTag
    bindings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def success(cls, bindings: Mapping[str, Any]) -> 'MatchResult':
        return cls(MatchResultTag.SUCCESS, MappingProxyType(dict(bindings)))

    @classmethod
    def failure(cls) -> 'MatchResult':
        return cls(MatchResultTag.FAILURE)

    def is_success(self) -> bool:
        return self.tag == MatchResultTag.SUCCESS

    def is_failure(self) -> bool:
        return self.tag == MatchResultTag.FAILURE

    def __bool__(self) -> bool:
        return self.is_success()

    def __str__(self) -> str:
        if self.is_success():
            inner = ", ".join(f"{k}={v!r}" for k, v in self.bindings.items())
            return f"Success({inner})"
        return "Failure"


def evaluate(plan: MatchPlan, runtime_subject: Any) -> MatchResult:
    bindings: Dict[str, Any] = {}
    if not _match(plan, runtime_subject, bindings):
        return MatchResult.failure()
    return MatchResult.success(bindings)


def passes_type_test(test: TypeTest, subject: Any) -> bool:
    if subject is None:
        return False
    if test.statically_satisfied:
        return True
    return is_instance_of(subject, test.target)


def _match(plan: MatchPlan, subject: Any, bindings: Dict[str, Any]) -> bool:
    if not passes_type_test(plan.type_test, subject):
        return False
    succeeded, out_values = plan.operator.invoke(subject)
    if not succeeded:
        return False
    for slot in plan.slots:
        if isinstance(slot, VariableSlot):
            bindings[slot.name] = out_values[slot.index]
        elif isinstance(slot, NestedSlot):
            if not _match(slot.plan, out_values[slot.index], bindings):
                return False
    return True
