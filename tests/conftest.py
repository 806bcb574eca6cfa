"""
Shared pytest fixtures for contexts tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "CONTEXTS_OUTPUT_FORMAT",
    "CONTEXTS_ORDERED",
    "CONTEXTS_BASE_FIRST",
    "CONTEXTS_LOG_LEVEL",
]


@_pytest.fixture(autouse=True)
def _clean_env(monkeypatch: _pytest.MonkeyPatch) -> None:
    """Remove CONTEXTS_* settings so the host environment cannot leak in."""
    for key in ENV_KEYS_TO_CLEAR:
        monkeypatch.delenv(key, raising=False)


@_pytest.fixture
def write_yaml(tmp_path: _pathlib.Path) -> _typing.Callable[[str, str], _pathlib.Path]:
    """Factory writing YAML text to a file under tmp_path."""

    def _write(name: str, content: str) -> _pathlib.Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@_pytest.fixture
def layer_files(
    write_yaml: _typing.Callable[[str, str], _pathlib.Path],
) -> list[_pathlib.Path]:
    """Three layer files, local first: project, user, defaults."""
    return [
        write_yaml("project.yaml", "red: 192\nalpha: 0.5\n"),
        write_yaml("user.yaml", "red: 63\ngreen: 10\n"),
        write_yaml("defaults.yaml", "red: 255\ngreen: 0\nblue: 0\n"),
    ]
