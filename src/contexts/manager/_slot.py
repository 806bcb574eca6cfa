"""
Mutable handle into a single layer.

Python has no mutable references to immutable values, so the mutable
lookups of ContextManager return a LayerSlot instead: a small handle bound
to the layer that held the match. Writes through the handle land in that
same layer; the entry never migrates to the local layer.

Example:
    >>> manager = ContextManager.from_layers({"red": 63}, {"red": 255})
    >>> slot = manager.get_mut_from(1, "red")
    >>> slot.value = 128
    >>> manager.get_from(1, "red")
    128
"""

from __future__ import annotations

import typing as _typing

import contexts.manager._frozen as _frozen
import contexts.manager._types as _types


class LayerSlot(_typing.Generic[_types.K, _types.V]):
    """
    Read/write handle to one key in one layer.

    The handle stays valid as long as the key remains in its layer. Once
    the key is removed from the layer, reads raise KeyError and writes
    re-insert the key into the same layer.
    """

    __slots__ = ("_layer", "_key", "_depth")

    def __init__(
        self,
        layer: _types.Layer,
        key: _types.K,
        depth: int,
    ) -> None:
        """
        Bind a handle to a key in a layer.

        Args:
            layer: The layer holding the key.
            key: The key the handle refers to.
            depth: Index of the layer in its manager when the handle was made.
        """
        self._layer = layer
        self._key = key
        self._depth = depth

    @property
    def key(self) -> _types.K:
        return self._key

    @property
    def depth(self) -> int:
        """Layer index at lookup time (0 = local)."""
        return self._depth

    @property
    def layer(self) -> _frozen.FrozenMapping[_types.K, _types.V]:
        """Read-only view of the layer holding the key."""
        return _frozen.FrozenMapping(self._layer)

    @property
    def value(self) -> _types.V:
        return self._layer[self._key]

    @value.setter
    def value(self, new_value: _types.V) -> None:
        self._layer[self._key] = new_value

    def __repr__(self) -> str:
        return f"LayerSlot(key={self._key!r}, depth={self._depth})"
