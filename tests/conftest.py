"""
Shared pytest fixtures for leaklab tests.
"""

import logging
import tracemalloc
from pathlib import Path

import pytest

from leaklab.patterns import default_engines, global_variable


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy access.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Returns a directory for the current test to write output files.
    Directory structure: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_name = request.node.name

    test_dir = test_output_root / module_name / test_name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture(autouse=True)
def reset_leaklab_logging():
    """Reset the leaklab logger before and after each test.

    Removes every handler except a NullHandler and resets the level to
    NOTSET so one test's logging setup cannot leak into the next.
    """
    logger = logging.getLogger("leaklab")

    def _reset():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()


@pytest.fixture(autouse=True)
def stop_tracing_started_by_test():
    """Stop tracemalloc if a test's snapshot write switched it on."""
    was_tracing = tracemalloc.is_tracing()
    yield
    if not was_tracing and tracemalloc.is_tracing():
        tracemalloc.stop()


@pytest.fixture(autouse=True)
def release_leaked_memory():
    """Stop the process-wide engines and empty the global container."""
    yield
    for engine in default_engines().values():
        engine.stop()
    global_variable.reset()
