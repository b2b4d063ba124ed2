"""
Compiler Driver

Orchestrates one compilation: parse, then the record and match passes in
dependency order. Compile-time errors are collected in the TyCtxt's
ErrorReporter and make the result unsuccessful.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..frontend.parser import Parser
from ..passes.base import TyCtxt, PassManager
from ..passes.record_collection import RecordCollectionPass
from ..passes.member_synthesis import MemberSynthesisPass
from ..passes.equality_synthesis import EqualitySynthesisPass
from ..passes.deconstruction import DeconstructionPass
from ..passes.match_resolution import MatchResolutionPass
from ..shared.errors import ParseError
from ..shared.nodes import Program
from ..utils.config import DEFAULT_FILE_ENCODING, DEFAULT_SOURCE_FILE

logger = logging.getLogger("recmatch.compiler.driver")


class CompilationResult:
    """Compilation result"""
    def __init__(
        self,
        program: Optional[Program] = None,
        tcx: Optional[TyCtxt] = None,
        success: bool = False
    ):
        self.program = program
        self.tcx = tcx
        self.success = success

    def has_errors(self) -> bool:
        if self.tcx and self.tcx.reporter:
            return self.tcx.reporter.has_errors()
        return not self.success

    def get_errors(self) -> list:
        if self.tcx and self.tcx.reporter:
            if self.tcx.reporter.has_errors():
                return [self.tcx.reporter.format_all_errors(color=False)]
        return []

    def error_codes(self) -> list:
        if self.tcx and self.tcx.reporter:
            return self.tcx.reporter.error_codes()
        return []


class CompilerDriver:
    """
    Compiler driver.

    Pass order (resolved by the PassManager from each pass's `requires`):
    1. RecordCollectionPass   - catalog, base chains, member types
    2. MemberSynthesisPass    - effective members, display
    3. EqualitySynthesisPass  - Equals / GetHashCode
    4. DeconstructionPass     - Match operators
    5. MatchResolutionPass    - one MatchPlan per `matches` site
    """

    def __init__(self):
        self.pass_manager = PassManager()
        self.parser = Parser()
        self._register_passes()

    def _register_passes(self) -> None:
        for pass_class in (
            RecordCollectionPass,
            MemberSynthesisPass,
            EqualitySynthesisPass,
            DeconstructionPass,
            MatchResolutionPass,
        ):
            self.pass_manager.register_pass(pass_class)

    def compile(self, source: str, source_file: str = DEFAULT_SOURCE_FILE) -> CompilationResult:
        tcx = TyCtxt()
        tcx.add_source(source_file, source)
        try:
            program = self.parser.parse(source, source_file)
        except ParseError as e:
            tcx.reporter.report_exception(e)
            return CompilationResult(tcx=tcx, success=False)
        return self.analyze(program, tcx)

    def analyze(self, program: Program, tcx: Optional[TyCtxt] = None) -> CompilationResult:
        """Run the passes over an already built Program (the programmatic API)."""
        if tcx is None:
            tcx = TyCtxt()
        program = self.pass_manager.run_all(program, tcx)
        if tcx.reporter.has_errors():
            logger.debug(f"compilation failed with {len(tcx.reporter.errors)} error(s)")
            return CompilationResult(program=program, tcx=tcx, success=False)
        return CompilationResult(program=program, tcx=tcx, success=True)

    def compile_file(self, path: Union[str, Path]) -> CompilationResult:
        path = Path(path)
        source = path.read_text(encoding=DEFAULT_FILE_ENCODING)
        return self.compile(source, str(path))
