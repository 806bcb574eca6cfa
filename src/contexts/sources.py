"""YAML layer sources for context managers.

This module provides:

- load_layer: Read one YAML file into a layer dict.
- load_layer_with_lines: Same, plus the line/column of each key.
- local_first: Put layer file paths in local-first order.
- load_manager: Build a ContextManager from several YAML files.

Files are given local-first by default, matching ContextManager.from_layers.
Pass ``base_first=True`` to list the least local (base) file first, the
usual order for configuration overrides:

    defaults.yaml  <- base, least local
    user.yaml
    project.yaml   <- most local, wins
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import yaml as _yaml

import contexts.manager as manager

_logger = _logging.getLogger(__name__)

# Type alias for line registry: maps key paths to (line, column) tuples
# Line numbers are 1-indexed to match editor conventions
LineRegistry = dict[tuple[_typing.Any, ...], tuple[int, int]]

PathLike = _typing.Union[str, _os.PathLike]


class _LineTrackingLoader(_yaml.SafeLoader):
    """YAML loader that records line/column numbers for mapping keys.

    Mapping construction is intercepted to record where each key sits,
    while value construction is delegated to SafeLoader so scalars keep
    their usual types.
    """

    def __init__(self, stream: _typing.Any) -> None:
        super().__init__(stream)
        self._line_registry: LineRegistry = {}
        self._path_stack: list[_typing.Any] = []

    def construct_mapping(
        self, node: _yaml.MappingNode, deep: bool = False
    ) -> dict[_typing.Any, _typing.Any]:
        """Override to track line numbers for each key."""
        # Expand << merge keys the same way SafeConstructor does
        self.flatten_mapping(node)

        result: dict[_typing.Any, _typing.Any] = {}
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=True)
            if not isinstance(key, _abc.Hashable):
                raise _yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    "found unhashable key",
                    key_node.start_mark,
                )

            self._path_stack.append(key)
            self._line_registry[tuple(self._path_stack)] = (
                key_node.start_mark.line + 1,
                key_node.start_mark.column + 1,
            )
            # deep=True so nested mappings are built while the path stack
            # still has this key on top
            value = self.construct_object(value_node, deep=True)
            self._path_stack.pop()

            result[key] = value

        return result


class LayerFileError(Exception):
    """Error loading or parsing a layer file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in layer file {path}: {message}")


def load_layer_with_lines(
    path: PathLike,
) -> tuple[dict[_typing.Any, _typing.Any], LineRegistry]:
    """
    Load a YAML file as a layer and track line numbers for all keys.

    Args:
        path: Path to the YAML file.

    Returns:
        Tuple of (layer, line_registry). An empty file gives an empty
        layer. line_registry maps key paths (tuples) to 1-indexed
        (line, column) tuples.

    Raises:
        LayerFileError: If the file cannot be read, is malformed YAML,
            or does not hold a mapping at the top level.
    """
    path = _pathlib.Path(path)

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise LayerFileError(path, f"not valid UTF-8: {e}") from e
    except PermissionError as e:
        raise LayerFileError(path, f"permission denied: {e}") from e
    except OSError as e:
        raise LayerFileError(path, f"cannot read file: {e}") from e

    loader = _LineTrackingLoader(content)
    try:
        parsed = loader.get_single_data()
    except _yaml.YAMLError as e:
        raise LayerFileError(path, f"invalid YAML: {e}") from e
    finally:
        loader.dispose()

    if parsed is None:
        _logger.info("Layer file %s is empty; using an empty layer", path)
        return {}, {}

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise LayerFileError(path, f"layer must be a YAML mapping, got {type_name}")

    _logger.debug("Loaded layer %s (%d keys)", path, len(parsed))
    return parsed, loader._line_registry


def load_layer(path: PathLike) -> dict[_typing.Any, _typing.Any]:
    """
    Load a YAML file as a layer.

    Raises:
        LayerFileError: See load_layer_with_lines().
    """
    layer, _ = load_layer_with_lines(path)
    return layer


def local_first(
    paths: _abc.Iterable[PathLike],
    *,
    base_first: bool = False,
) -> list[PathLike]:
    """
    Return layer file paths in local-first order.

    Args:
        paths: Layer files as given on the command line or in config.
        base_first: If True, the first path is the least local layer.
    """
    ordered = list(paths)
    if base_first:
        ordered.reverse()
    return ordered


def load_manager(
    paths: _abc.Iterable[PathLike],
    *,
    base_first: bool = False,
) -> manager.ContextManager[_typing.Any, _typing.Any]:
    """
    Build a context manager with one layer per YAML file.

    Args:
        paths: YAML files, local-first unless base_first is set.
        base_first: If True, the first path is the least local layer.

    Returns:
        A ContextManager whose layer order follows the files. No paths
        gives a manager with no layers.

    Raises:
        LayerFileError: If any file fails to load.
    """
    layers = [load_layer(path) for path in local_first(paths, base_first=base_first)]
    return manager.ContextManager.from_layers(*layers)
