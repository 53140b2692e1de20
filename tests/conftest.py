"""
pytest configuration for storage_transfer tests.

Adds src directory to Python path for imports and resets process-wide state
between tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the default resolver and log context around each test."""
    from storage_transfer.logging import clear_log_context
    from storage_transfer.resolver import set_default_resolver

    set_default_resolver(None)
    clear_log_context()
    yield
    set_default_resolver(None)
    clear_log_context()
