"""
Shared fixtures for ContextManager tests.
"""

import pytest as _pytest

import contexts.manager as manager


@_pytest.fixture
def colors() -> manager.ContextManager[str, int]:
    """Three layers, local first, with "red" defined at every depth."""
    return manager.ContextManager.from_layers(
        {"red": 192},  # layer 0 (local)
        {"red": 63, "green": 10},  # layer 1
        {"red": 255, "green": 0, "blue": 0},  # layer 2
    )


@_pytest.fixture
def empty() -> manager.ContextManager[str, int]:
    """Manager with no layers at all."""
    return manager.ContextManager()
