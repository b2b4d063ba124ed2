"""
Test utilities for the recmatch test suite.

Helpers for the compile-then-execute pattern and for building record
catalogs programmatically (user member bodies are Python callables and
cannot be written in .rec source).
"""

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from recmatch.compiler.driver import CompilerDriver, CompilationResult
from recmatch.passes.base import TyCtxt
from recmatch.runtime.runtime import RecmatchRuntime
from recmatch.shared.nodes import Program, RecordDeclaration, UserDeclaredMember, MemberKind
from recmatch.shared.types import Type


@dataclass
class ExecutionResult:
    """Unified execution result for tests."""
    value: Any = None
    outputs: Dict[str, Any] = field(default_factory=dict)
    printed: List[str] = field(default_factory=list)
    success: bool = False
    error: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    error_codes: List[str] = field(default_factory=list)

    def get_errors(self) -> list:
        return self.errors


def compile_and_execute(source: str,
                        compiler: Optional[CompilerDriver] = None,
                        runtime: Optional[RecmatchRuntime] = None,
                        source_file: str = "<test>") -> ExecutionResult:
    """Compile then run; compile errors come back as `errors`/`error_codes`."""
    compiler = compiler if compiler is not None else CompilerDriver()
    runtime = runtime if runtime is not None else RecmatchRuntime()

    result = compiler.compile(source, source_file)
    if not result.success:
        return ExecutionResult(
            success=False,
            errors=result.get_errors(),
            error_codes=result.error_codes(),
        )

    exec_result = runtime.execute(result)
    error_str = str(exec_result.error) if exec_result.error else None
    return ExecutionResult(
        value=exec_result.value,
        outputs=exec_result.outputs,
        printed=exec_result.printed,
        success=exec_result.error is None,
        error=error_str,
        errors=[error_str] if error_str else [],
        error_codes=[exec_result.error.error_code] if exec_result.error is not None else [],
    )


def analyze_records(*declarations: RecordDeclaration,
                    compiler: Optional[CompilerDriver] = None) -> CompilationResult:
    """Run the record passes over hand-built declarations."""
    compiler = compiler if compiler is not None else CompilerDriver()
    return compiler.analyze(Program.of_records(declarations))


def build_catalog(*declarations: RecordDeclaration,
                  compiler: Optional[CompilerDriver] = None) -> TyCtxt:
    """Like analyze_records, but fails the test on any compile error."""
    result = analyze_records(*declarations, compiler=compiler)
    assert result.success, f"Compilation failed: {result.get_errors()}"
    return result.tcx


def instance(tcx: TyCtxt, record_name: str, *values: Any):
    return tcx.lookup_record(record_name).instantiate(*values)


def match_overload(body, subject_type: Type, *out_types: Type) -> UserDeclaredMember:
    """A user-declared `Match(subject_type self, out T1 o1, ...)` operator."""
    return UserDeclaredMember(
        name="Match",
        kind=MemberKind.OPERATOR,
        body=body,
        param_types=(subject_type,) + tuple(out_types),
    )


def user_property(name: str, body=None) -> UserDeclaredMember:
    return UserDeclaredMember(name=name, kind=MemberKind.PROPERTY, body=body)


def user_method(name: str, body) -> UserDeclaredMember:
    return UserDeclaredMember(name=name, kind=MemberKind.METHOD, body=body)
