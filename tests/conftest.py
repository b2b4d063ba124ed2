"""
Pytest configuration and shared fixtures for all recmatch tests.

The compiler is stateless between compilations (every compile gets a fresh
TyCtxt and fresh pass instances), so one driver is shared by the session;
the lark parser is built once and its grammar cache reused.
"""

import sys
import pytest
from typing import Optional
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from recmatch.compiler.driver import CompilerDriver
from recmatch.runtime.runtime import RecmatchRuntime


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_compiler():
    """Session-scoped stateless compiler instance shared across ALL tests."""
    return CompilerDriver()


@pytest.fixture(scope="session")
def session_runtime():
    return RecmatchRuntime()


# =============================================================================
# Per-class / per-test fixtures
# =============================================================================

@pytest.fixture(scope="class")
def compiler(session_compiler):
    """Class-scoped compiler - returns the session compiler (stateless, safe to share)."""
    return session_compiler


@pytest.fixture
def runtime():
    """Fresh runtime per test."""
    return RecmatchRuntime()


# =============================================================================
# Helper fixtures
# =============================================================================

@pytest.fixture(scope="session")
def compile_and_execute_factory(session_compiler, session_runtime):
    """Factory fixture providing compile_and_execute bound to the session instances."""
    from tests.test_utils import compile_and_execute

    def _compile_and_execute(source_code: str,
                             source_file: Optional[str] = None,
                             compiler: Optional[CompilerDriver] = None,
                             runtime: Optional[RecmatchRuntime] = None):
        return compile_and_execute(
            source_code,
            compiler if compiler is not None else session_compiler,
            runtime if runtime is not None else session_runtime,
            source_file=source_file or "<test>",
        )

    return _compile_and_execute


@pytest.fixture
def compile_and_execute(compile_and_execute_factory):
    return compile_and_execute_factory


# =============================================================================
# Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
