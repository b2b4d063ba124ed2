"""
recmatch - record synthesis and structural match resolution.

Records declare primary members; the compiler synthesizes their accessors,
value equality, hashing, display and a Match operator, then resolves every
`subject matches T(...)` pattern into a MatchPlan evaluated at run time.
"""

__version__ = "0.1.0"

from .passes.member_synthesis import synthesize
from .passes.equality_synthesis import synthesize_equality
from .passes.deconstruction import synthesize_match
from .passes.match_resolution import MatchResolver
from .runtime.evaluator import MatchResult, evaluate
from .compiler.driver import CompilerDriver, CompilationResult
from .runtime.runtime import RecmatchRuntime, ExecutionResult
