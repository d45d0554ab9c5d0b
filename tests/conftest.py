import pytest

from quasi.interpreter import Interpreter
from quasi.types.macro_registry import MacroRegistry

# Every test runs with the expansion settings taken from code, not from the
# developer's shell: the QUASI_* variables are cleared before each test.


@pytest.fixture(autouse=True)
def _clear_quasi_env(monkeypatch):
    for var in (
        "QUASI_MAX_EXPANSION_DEPTH",
        "QUASI_STRICT_EXPANSION",
        "QUASI_LOGGING_LEVEL",
        "QUASI_USE_DEV_LOGGER",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def registry():
    """Fresh macro registry for each test."""
    return MacroRegistry()


@pytest.fixture
def interp():
    return Interpreter()
