"""
Type aliases for the context manager.

This module provides type aliases used throughout the manager package:
- K, V: Key and value type variables
- Layer: The mapping capability every layer must offer
- LayerFactory: Callable producing a fresh, empty layer
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

K = _typing.TypeVar("K", bound=_abc.Hashable)
V = _typing.TypeVar("V")

# Any mutable mapping qualifies as a layer: point lookup, point mutation,
# membership and cardinality are all the manager needs.
Layer: _typing.TypeAlias = _abc.MutableMapping

LayerFactory: _typing.TypeAlias = _typing.Callable[[], _abc.MutableMapping]
