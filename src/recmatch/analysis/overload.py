"""
Overload Resolution Oracle

Finds the Match operator a positional pattern refers to. The resolver only
talks to the OverloadOracle interface; CatalogOverloadOracle answers from the
records registered in a TyCtxt.

Rules: filter candidates by arity, then by element-wise compatibility of each
out-parameter with its argument pattern. Several compatible candidates is an
ambiguity; there is no tie-break.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, TYPE_CHECKING

from ..shared.members import MatchOperator
from ..shared.types import Type, RecordType

if TYPE_CHECKING:
    from ..passes.base import TyCtxt

logger = logging.getLogger(__name__)


class ShapeKind(Enum):
    VARIABLE = "variable"   # var x
    TYPED = "typed"         # T x
    NESTED = "nested"       # T(...)
    DISCARD = "discard"     # _


@dataclass(frozen=True)
class PatternShape:
    """What is known about one argument pattern before an operator is chosen."""
    kind: ShapeKind
    type: Optional[Type] = None

    def __str__(self) -> str:
        if self.kind is ShapeKind.VARIABLE:
            return "var"
        if self.kind is ShapeKind.DISCARD:
            return "_"
        if self.kind is ShapeKind.NESTED:
            return f"{self.type}(...)"
        return str(self.type)


class ResolutionStatus(Enum):
    RESOLVED = "resolved"
    NO_OPERATOR = "no_operator"
    ARITY_MISMATCH = "arity_mismatch"
    TYPE_MISMATCH = "type_mismatch"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class OverloadResolution:
    status: ResolutionStatus
    selected: Optional[MatchOperator] = None
    # RESOLVED: (selected,); otherwise the operators that were considered last
    candidates: Tuple[MatchOperator, ...] = ()


class OverloadOracle(ABC):
    """(type, arity, argument shapes) -> best Match operator, none, or ambiguous."""

    @abstractmethod
    def resolve_overload(self,
                         target: Type,
                         arity: int,
                         shapes: Sequence[PatternShape]) -> OverloadResolution:
        raise NotImplementedError


class CatalogOverloadOracle(OverloadOracle):

    def __init__(self, tcx: "TyCtxt"):
        self.tcx = tcx

    def resolve_overload(self,
                         target: Type,
                         arity: int,
                         shapes: Sequence[PatternShape]) -> OverloadResolution:
        info = self.tcx.lookup_record(target) if isinstance(target, RecordType) else None
        if info is None or not info.match_operators:
            return OverloadResolution(ResolutionStatus.NO_OPERATOR)

        by_arity = tuple(op for op in info.match_operators if op.arity == arity)
        if not by_arity:
            return OverloadResolution(ResolutionStatus.ARITY_MISMATCH, candidates=info.match_operators)

        compatible = tuple(
            op for op in by_arity
            if all(self._accepts(out_type, shape) for out_type, shape in zip(op.out_types, shapes))
        )
        if not compatible:
            return OverloadResolution(ResolutionStatus.TYPE_MISMATCH, candidates=by_arity)
        if len(compatible) > 1:
            logger.debug(f"{len(compatible)} Match overloads on {target} accept ({', '.join(map(str, shapes))})")
            return OverloadResolution(ResolutionStatus.AMBIGUOUS, candidates=compatible)
        return OverloadResolution(ResolutionStatus.RESOLVED, compatible[0], compatible)

    def _accepts(self, out_type: Type, shape: PatternShape) -> bool:
        if shape.kind in (ShapeKind.VARIABLE, ShapeKind.DISCARD):
            return True
        if shape.kind is ShapeKind.TYPED:
            return self.tcx.is_subtype(out_type, shape.type)
        return self.tcx.are_related(out_type, shape.type)
