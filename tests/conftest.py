import pytest

from editor_bridge.adapters.memory_engine import MemoryEngine
from editor_bridge.core.services.engine_provider import reset_engine_provider


@pytest.fixture(autouse=True)
def isolated_engine_state():
    """Each test starts without an installed provider or registered extensions."""
    reset_engine_provider()
    MemoryEngine.reset_registry()
    yield
    reset_engine_provider()
    MemoryEngine.reset_registry()
