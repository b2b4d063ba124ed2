"""
Base Pass System

TyCtxt is the single source of truth for one compilation: the record
catalog (one cached RecordInfo per record type), the subtype relation, the
overload oracle, the resolved match plans and the error reporter. Passes
read and write it; the PassManager runs them in dependency order.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Type as PyType, Union

from ..shared.errors import ErrorReporter, RecmatchRuntimeError, UnknownTypeError
from ..shared.members import EffectiveMember, MatchOperator
from ..shared.nodes import MatchesExpression, Program, RecordDeclaration
from ..shared.source_location import SourceLocation
from ..shared.types import Type, RecordType, lookup_builtin_type, is_subtype, are_related
from ..utils.config import DEBUG_PASSES_ENV_VAR

logger = logging.getLogger("recmatch.passes.base")

EqualsFn = Callable[[Any, Any], bool]
HashFn = Callable[[Any], int]
DisplayFn = Callable[[Any], str]


@dataclass
class RecordInfo:
    """
    Everything known about one record type. Filled in pass by pass:
    collection sets the hierarchy, member synthesis the members and display,
    equality synthesis equals/hash, deconstruction the Match operators.
    """
    declaration: RecordDeclaration
    ancestors: Tuple[RecordType, ...] = ()
    members: Dict[str, EffectiveMember] = field(default_factory=dict)
    equals: Optional[EqualsFn] = None
    hash: Optional[HashFn] = None
    display: Optional[DisplayFn] = None
    match_operators: Tuple[MatchOperator, ...] = ()

    @property
    def name(self) -> str:
        return self.declaration.name

    @property
    def record_type(self) -> RecordType:
        return self.declaration.record_type

    def instantiate(self, *values: Any) -> Any:
        from ..runtime.values import RecordInstance, conforms

        primary = self.declaration.primary_members
        if len(values) != len(primary):
            raise RecmatchRuntimeError(
                f"`{self.name}` takes {len(primary)} value(s) but {len(values)} were given"
            )
        for member, value in zip(primary, values):
            if not conforms(value, member.type):
                raise RecmatchRuntimeError(
                    f"`{self.name}.{member.name}` expects {member.type}, got {value!r}"
                )
        return RecordInstance(self, values)


class TyCtxt:
    """Type context - compilation-scoped catalog and analysis results."""

    def __init__(self):
        from ..analysis.overload import CatalogOverloadOracle, OverloadOracle

        self.records: Dict[str, RecordInfo] = {}
        self.match_plans: Dict[MatchesExpression, Any] = {}
        self.source_files: Dict[str, str] = {}
        self.reporter: ErrorReporter = ErrorReporter(self.source_files)
        self.oracle: OverloadOracle = CatalogOverloadOracle(self)

    def add_source(self, source_file: str, source: str) -> None:
        self.source_files[source_file] = source

    # -- type catalog ----------------------------------------------------------

    def register_record(self, declaration: RecordDeclaration) -> RecordInfo:
        info = RecordInfo(declaration)
        self.records[declaration.name] = info
        return info

    def lookup_record(self, key: Union[str, Type]) -> Optional[RecordInfo]:
        if isinstance(key, RecordType):
            key = key.name
        if isinstance(key, str):
            return self.records.get(key)
        return None

    def resolve_type_name(self, name: str, location: Optional[SourceLocation] = None) -> Type:
        builtin = lookup_builtin_type(name)
        if builtin is not None:
            return builtin
        if name in self.records:
            return RecordType(name)
        raise UnknownTypeError(name, location)

    def require_known(self, t: Type, location: Optional[SourceLocation] = None) -> Type:
        if isinstance(t, RecordType) and t.name not in self.records:
            raise UnknownTypeError(t.name, location)
        return t

    def base_of(self, record_type: RecordType) -> Optional[RecordType]:
        info = self.records.get(record_type.name)
        if info is None or info.declaration.base is None:
            return None
        return RecordType(info.declaration.base)

    def is_subtype(self, sub: Type, sup: Type) -> bool:
        return is_subtype(sub, sup, self.base_of)

    def are_related(self, a: Type, b: Type) -> bool:
        return are_related(a, b, self.base_of)


class BasePass(ABC):
    """
    Base class for all passes.

    Passes declare their dependencies in `requires` and keep their results in
    the TyCtxt, never on the pass instance.
    """
    requires: List[PyType['BasePass']] = []

    @abstractmethod
    def run(self, program: Program, tcx: TyCtxt) -> Program:
        raise NotImplementedError


class PassManager:
    """Runs registered passes in topological order of their `requires`."""

    def __init__(self):
        self.passes: List[PyType[BasePass]] = []
        self._dependency_graph: Dict[PyType[BasePass], set] = {}

    def register_pass(self, pass_class: PyType[BasePass]) -> None:
        self.passes.append(pass_class)
        self._dependency_graph[pass_class] = set(pass_class.requires)

    def run_all(self, program: Program, tcx: TyCtxt, stop_on_error: bool = True) -> Program:
        """
        Run all passes in dependency order.

        With `stop_on_error`, passes after the first one that reported an
        error are skipped, so one bad declaration does not cascade into
        unrelated diagnostics further down the pipeline.
        """
        trace = bool(os.environ.get(DEBUG_PASSES_ENV_VAR))
        for pass_class in self._topological_sort():
            pass_name = pass_class.__name__
            if trace:
                logger.info(f"running {pass_name}")
            program = pass_class().run(program, tcx)
            if stop_on_error and tcx.reporter.has_errors():
                logger.debug(f"stopping after {pass_name}: {len(tcx.reporter.errors)} error(s)")
                break
        return program

    def _topological_sort(self) -> List[PyType[BasePass]]:
        in_degree = {p: len(self._dependency_graph[p]) for p in self.passes}
        queue = [p for p, degree in in_degree.items() if degree == 0]
        result = []

        while queue:
            pass_class = queue.pop(0)
            result.append(pass_class)

            for other_pass in self.passes:
                if pass_class in self._dependency_graph[other_pass]:
                    in_degree[other_pass] -= 1
                    if in_degree[other_pass] == 0:
                        queue.append(other_pass)

        if len(result) != len(self.passes):
            raise RuntimeError("Circular dependency detected in passes")

        return result
