"""
Runtime

Executes the statements of a compiled program. Every `matches` expression
is evaluated through the MatchPlan resolved for it at compile time; the
runtime never resolves patterns itself.
"""

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .evaluator import MatchResult, evaluate
from .values import RecordInstance, display_value
from ..shared.errors import RecmatchError, RecmatchImplementationError, RecmatchRuntimeError
from ..shared.nodes import (
    Call, Comparison, Construction, Expression, ExpressionStatement, Identifier, LetStatement,
    Literal, MatchesExpression, MemberAccess, Statement,
)

if TYPE_CHECKING:
    from ..compiler.driver import CompilationResult
    from ..passes.base import TyCtxt

logger = logging.getLogger("recmatch.runtime.runtime")


class ExecutionResult:
    """Outcome of running a program: final bindings, printed lines, and the fault if any."""

    def __init__(self,
                 value: Optional[Any] = None,
                 outputs: Optional[Dict[str, Any]] = None,
                 printed: Optional[List[str]] = None,
                 error: Optional[Exception] = None):
        self.value = value
        self.outputs = outputs if outputs is not None else {}
        self.printed = printed if printed is not None else []
        self.error = error

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def errors(self) -> list:
        if self.error:
            return [str(self.error)]
        return []


class ExpressionEvaluator:
    """Tree-walking evaluator over the surface expressions."""

    def __init__(self, tcx: "TyCtxt", env: Optional[Dict[str, Any]] = None,
                 output: Optional[List[str]] = None):
        self.tcx = tcx
        self.env: Dict[str, Any] = env if env is not None else {}
        self.output: List[str] = output if output is not None else []

    def execute_statement(self, statement: Statement) -> Any:
        if isinstance(statement, LetStatement):
            value = self.evaluate(statement.value)
            self.env[statement.name] = value
            return value
        if isinstance(statement, ExpressionStatement):
            return self.evaluate(statement.expression)
        raise RecmatchImplementationError(f"unknown statement node {type(statement).__name__}")

    def evaluate(self, expr: Expression) -> Any:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Identifier):
            if expr.name not in self.env:
                raise RecmatchRuntimeError(f"`{expr.name}` is not bound", expr.location)
            return self.env[expr.name]
        if isinstance(expr, Construction):
            info = self.tcx.lookup_record(expr.type_name)
            if info is None:
                raise RecmatchRuntimeError(f"unknown record `{expr.type_name}`", expr.location)
            values = [self.evaluate(arg) for arg in expr.args]
            try:
                return info.instantiate(*values)
            except RecmatchRuntimeError as e:
                if e.location is None:
                    e.location = expr.location
                raise
        if isinstance(expr, MemberAccess):
            target = self.evaluate(expr.target)
            if not isinstance(target, RecordInstance):
                raise RecmatchRuntimeError(
                    f"cannot read `{expr.member}` of {display_value(target)}", expr.location,
                )
            return target.get(expr.member)
        if isinstance(expr, Comparison):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            return left == right if expr.operator == "==" else left != right
        if isinstance(expr, MatchesExpression):
            return self._matches(expr)
        if isinstance(expr, Call):
            return self._call(expr)
        raise RecmatchImplementationError(f"unknown expression node {type(expr).__name__}")

    def _matches(self, expr: MatchesExpression) -> bool:
        plan = self.tcx.match_plans.get(expr)
        if plan is None:
            raise RecmatchImplementationError("`matches` expression was not resolved before execution")
        result: MatchResult = evaluate(plan, self.evaluate(expr.subject))
        if result.is_success():
            self.env.update(result.bindings)
        logger.debug(f"{plan.target_type} pattern at {expr.location}: {result}")
        return result.is_success()

    def _call(self, expr: Call) -> Any:
        args = [self.evaluate(arg) for arg in expr.args]
        if expr.name == "print":
            self.output.append(" ".join(display_value(a) for a in args))
            return None
        if expr.name == "assert":
            if len(args) != 1 or args[0] is not True:
                raise RecmatchRuntimeError("assertion failed", expr.location)
            return None
        raise RecmatchRuntimeError(f"unknown function `{expr.name}`", expr.location)


class RecmatchRuntime:
    """Runs a successful CompilationResult statement by statement."""

    def execute(self, compilation_result: "CompilationResult",
                env: Optional[Dict[str, Any]] = None) -> ExecutionResult:
        if not compilation_result.success:
            return ExecutionResult(error=RecmatchRuntimeError("compilation failed"))

        evaluator = ExpressionEvaluator(compilation_result.tcx, dict(env or {}))
        value = None
        try:
            for statement in compilation_result.program.statements:
                value = evaluator.execute_statement(statement)
        except RecmatchError as e:
            logger.debug(f"runtime fault: {e.message}")
            return ExecutionResult(value=value, outputs=evaluator.env, printed=evaluator.output, error=e)
        return ExecutionResult(value=value, outputs=evaluator.env, printed=evaluator.output)
