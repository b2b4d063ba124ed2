"""
Record Collection Pass

Registers every record declaration in the type catalog, then validates the
declared base records (known, acyclic) and the primary member types, and
records each record's ancestor chain for run-time type tests.
"""

import logging
from typing import List, Tuple

from .base import BasePass, TyCtxt, RecordInfo
from ..shared.errors import DuplicateRecordError, RecmatchError, RecordHierarchyError, UnknownTypeError
from ..shared.nodes import Program
from ..shared.types import RecordType

logger = logging.getLogger("recmatch.passes.record_collection")


class RecordCollectionPass(BasePass):
    requires = []

    def run(self, program: Program, tcx: TyCtxt) -> Program:
        collected: List[RecordInfo] = []
        for declaration in program.records:
            if declaration.name in tcx.records:
                tcx.reporter.report_exception(DuplicateRecordError(declaration.name, declaration.location))
                continue
            collected.append(tcx.register_record(declaration))

        for info in collected:
            try:
                info.ancestors = _ancestors(info, tcx)
                for member in info.declaration.primary_members:
                    tcx.require_known(member.type, member.location)
            except RecmatchError as e:
                tcx.reporter.report_exception(e)

        logger.debug(f"collected {len(collected)} record(s): {', '.join(i.name for i in collected)}")
        return program


def _ancestors(info: RecordInfo, tcx: TyCtxt) -> Tuple[RecordType, ...]:
    """The record itself followed by its base chain."""
    chain = [info.record_type]
    declaration = info.declaration
    while declaration.base is not None:
        base_info = tcx.lookup_record(declaration.base)
        if base_info is None:
            raise UnknownTypeError(declaration.base, declaration.location)
        if base_info.record_type in chain:
            names = " -> ".join(t.name for t in chain + [base_info.record_type])
            raise RecordHierarchyError(
                f"cyclic base records: {names}",
                info.declaration.location,
                help="a record cannot derive from itself, directly or indirectly",
            )
        chain.append(base_info.record_type)
        declaration = base_info.declaration
    return tuple(chain)
