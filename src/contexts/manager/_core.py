"""
ContextManager: an ordered stack of maps that behaves as one mapping.

Unlike collections.ChainMap, which treats its first map as the only
writable one but exposes merged iteration, ContextManager is a plain
scoped lookup structure:

- Layers: Ordered local-first. Index 0 is the local layer.
- Search: Walks layers from a start index toward the least-local end and
  returns the first match. Less-local layers never shadow more-local ones.
- Mutation: insert/remove only touch the local layer. With no layers,
  both are inert.
- Structure: push/pop at the local end, fork a suffix, collapse into a
  flat snapshot.

Read semantics:
- get/get_from/get_local: Return the value or a default (None)
- get_mut family: Return a LayerSlot bound to the holding layer
- manager[key]: Raises ContextKeyError when nothing resolves

Thread safety: NOT thread-safe. Wrap the whole manager in a lock if it is
shared between threads.
"""

from __future__ import annotations

import collections.abc as _abc
import contextlib as _contextlib
import copy as _copy
import logging as _logging
import typing as _typing

import contexts.manager._frozen as _frozen
import contexts.manager._slot as _slot
import contexts.manager._types as _types

_logger = _logging.getLogger(__name__)

# Distinguishes "no value" from a stored None inside the search helpers
_MISSING: _typing.Any = object()


class ContextKeyError(KeyError):
    """Raised when direct access (manager[key]) finds the key in no layer.

    This is a contract violation by the caller. Use get() when absence is
    an expected outcome.
    """

    def __init__(self, key: _typing.Any) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"key not found in any context: {self.key!r}"


class ContextManager(_typing.Generic[_types.K, _types.V]):
    """
    A collection of layers (contexts) treated as a single map.

    The first layer is the local context. Searching starts with the local
    context and proceeds until a value is found or there are no more layers
    to check. Insertions and removals go to and from the local context only.

    Example:
        >>> manager = ContextManager.with_empty()
        >>> manager.insert("red", 255)
        >>> manager.push({"red": 63})
        >>> manager["red"]
        63
        >>> manager.get_from(1, "red")
        255

    Args:
        layers: Initial layers in precedence order (first = local).
        layer_factory: Callable producing empty layers for push_empty(),
            with_empty() and friends. Defaults to dict.

    Note:
        **Ownership:** Layers passed in are stored by reference and the
        manager mutates them on insert/remove. Copies made by fork(),
        fork_from(), copy() and push_local() are deep copies, so a fork
        never shares storage with its origin.
    """

    def __init__(
        self,
        layers: _abc.Iterable[_types.Layer] = (),
        *,
        layer_factory: _types.LayerFactory = dict,
    ) -> None:
        self._layers: list[_types.Layer] = list(layers)
        self._layer_factory = layer_factory

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def with_capacity(
        cls,
        capacity: int,
        *,
        layer_factory: _types.LayerFactory = dict,
    ) -> ContextManager[_types.K, _types.V]:
        """
        Create a manager with no layers.

        Args:
            capacity: Expected number of layers. Accepted for parity with
                sized constructors; Python lists grow on demand.
            layer_factory: Callable producing empty layers.
        """
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")
        return cls(layer_factory=layer_factory)

    @classmethod
    def with_empty(
        cls,
        *,
        layer_factory: _types.LayerFactory = dict,
    ) -> ContextManager[_types.K, _types.V]:
        """Create a manager holding exactly one empty layer."""
        return cls([layer_factory()], layer_factory=layer_factory)

    @classmethod
    def from_layers(
        cls,
        *layers: _types.Layer,
        layer_factory: _types.LayerFactory = dict,
    ) -> ContextManager[_types.K, _types.V]:
        """
        Create a manager from pre-built layers.

        Precedence proceeds from the first layer toward the last.

        Args:
            *layers: Layers in local-first order.
            layer_factory: Callable producing empty layers.
        """
        return cls(layers, layer_factory=layer_factory)

    @classmethod
    def from_pairs(
        cls,
        pairs: _abc.Mapping[_types.K, _types.V] | _abc.Iterable[tuple[_types.K, _types.V]],
        *,
        layer_factory: _types.LayerFactory = dict,
    ) -> ContextManager[_types.K, _types.V]:
        """
        Create a manager with one layer built from key-value pairs.

        Repeated keys keep their last value.
        """
        layer = layer_factory()
        layer.update(pairs)
        return cls([layer], layer_factory=layer_factory)

    # =========================================================================
    # Introspection
    # =========================================================================

    def __len__(self) -> int:
        """Return the number of layers (not keys)."""
        return len(self._layers)

    def is_empty(self) -> bool:
        """Whether the manager has no layers at all."""
        return not self._layers

    @property
    def layers(self) -> list[_frozen.FrozenMapping[_types.K, _types.V]]:
        """Read-only views of every layer, local first.

        Returns:
            List of FrozenMappings wrapping the live layers.
            Mutations through these raise TypeError.
        """
        return [_frozen.FrozenMapping(layer) for layer in self._layers]

    @property
    def layer_factory(self) -> _types.LayerFactory:
        return self._layer_factory

    # =========================================================================
    # Structural operations
    # =========================================================================

    def push(self, layer: _types.Layer) -> None:
        """
        Add a new local layer.

        The previous local layer moves to index 1, and so on.
        """
        self._layers.insert(0, layer)
        _logger.debug("Pushed layer with %d keys (depth now %d)", len(layer), len(self._layers))

    def push_empty(self) -> None:
        """Add an empty local layer."""
        self.push(self._layer_factory())

    def push_local(self) -> None:
        """
        Add a new local layer that is a copy of the current local layer.

        On a manager with no layers this behaves like push_empty().
        """
        if not self._layers:
            self.push_empty()
            return
        self.push(_copy.deepcopy(self._layers[0]))

    def push_with_local(self, layer: _types.Layer) -> None:
        """
        Add a new local layer merged with the previous local layer.

        Entries from ``layer`` take precedence over the copied local ones.
        On a manager with no layers, ``layer`` is pushed as is.
        """
        if not self._layers:
            self.push(layer)
            return
        merged = _copy.deepcopy(self._layers[0])
        merged.update(layer)
        self.push(merged)

    def pop(self) -> _types.Layer | None:
        """
        Remove and return the local layer.

        Returns:
            The removed layer, or None if the manager has no layers.
        """
        if not self._layers:
            return None
        layer = self._layers.pop(0)
        _logger.debug("Popped layer with %d keys (depth now %d)", len(layer), len(self._layers))
        return layer

    @_contextlib.contextmanager
    def scope(
        self,
        layer: _types.Layer | None = None,
    ) -> _typing.Iterator[ContextManager[_types.K, _types.V]]:
        """
        Push a layer for the duration of a with block.

        On exit, even if the block raises, the manager is unwound to the
        depth it had on entry: the scope's layer and any layers the block
        left pushed are popped. Layers that were already there on entry are
        never popped, even if the block popped the scope's layer itself.

        Args:
            layer: Layer to push. None pushes an empty layer.

        Example:
            >>> with manager.scope({"red": 0}):
            ...     manager["red"]
            0
        """
        depth = len(self._layers)
        if layer is None:
            self.push_empty()
        else:
            self.push(layer)
        try:
            yield self
        finally:
            while len(self._layers) > depth:
                self.pop()

    def fork(self) -> ContextManager[_types.K, _types.V] | None:
        """
        Create an independent deep copy of the whole layer sequence.

        Returns:
            The new manager, or None if there is nothing to fork.
        """
        return self.fork_from(0)

    def fork_from(self, index: int) -> ContextManager[_types.K, _types.V] | None:
        """
        Create a manager from deep copies of layers ``[index, len)``.

        Layer ``index`` becomes the local layer of the fork, so
        ``len(fork) == len(self) - index``.

        Args:
            index: Depth to fork from (0 = local).

        Returns:
            The new manager, or None if index is out of range.
        """
        if not 0 <= index < len(self._layers):
            return None
        forked = type(self)(
            _copy.deepcopy(self._layers[index:]),
            layer_factory=self._layer_factory,
        )
        _logger.debug("Forked %d of %d layers from depth %d", len(forked), len(self._layers), index)
        return forked

    def copy(self) -> ContextManager[_types.K, _types.V]:
        """
        Return a deep copy of this manager.

        Unlike fork(), this also works on a manager with no layers.
        """
        return type(self)(_copy.deepcopy(self._layers), layer_factory=self._layer_factory)

    def __copy__(self) -> ContextManager[_types.K, _types.V]:
        # Layers are never shared between managers, so a shallow copy is deep
        return self.copy()

    def __deepcopy__(self, memo: dict[int, _typing.Any]) -> ContextManager[_types.K, _types.V]:
        return type(self)(_copy.deepcopy(self._layers, memo), layer_factory=self._layer_factory)

    # =========================================================================
    # Scoped search
    # =========================================================================

    def _scan(self, index: int) -> _abc.Iterator[tuple[int, _types.Layer]]:
        """Yield (depth, layer) pairs for layers ``[index, len)``.

        Out-of-range start indices yield nothing.
        """
        if index < 0:
            return
        for depth in range(index, len(self._layers)):
            yield depth, self._layers[depth]

    def _find(self, index: int, key: _types.K) -> tuple[int, _typing.Any]:
        """Return (depth, value) of the first match from index, or (-1, _MISSING)."""
        for depth, layer in self._scan(index):
            if key in layer:
                return depth, layer[key]
        return -1, _MISSING

    def get(self, key: _types.K, default: _typing.Any = None) -> _types.V | None:
        """
        Return the value for ``key`` from the most local layer holding it.

        Equivalent to ``get_from(0, key)``.
        """
        return self.get_from(0, key, default)

    def get_from(
        self,
        index: int,
        key: _types.K,
        default: _typing.Any = None,
    ) -> _types.V | None:
        """
        Return the value for ``key`` searching layers ``[index, len)``.

        Args:
            index: Depth to start searching from (0 = local).
            key: The key to look up.
            default: Returned when no scanned layer holds the key or
                index is out of range.
        """
        _, value = self._find(index, key)
        return default if value is _MISSING else value

    def get_local(self, key: _types.K, default: _typing.Any = None) -> _types.V | None:
        """Return the value for ``key`` in the local layer only."""
        if not self._layers or key not in self._layers[0]:
            return default
        return self._layers[0][key]

    def get_all(self, key: _types.K) -> list[_types.V]:
        """
        Return every value associated with ``key``, ordered by precedence.

        Example:
            >>> manager = ContextManager.from_layers({"w": 3}, {"w": 2}, {"w": 1})
            >>> manager.get_all("w")
            [3, 2, 1]
        """
        return [layer[key] for layer in self._layers if key in layer]

    def contains_key(self, key: _types.K) -> bool:
        """Whether any layer holds ``key``."""
        return self.contains_key_from(0, key)

    def contains_key_from(self, index: int, key: _types.K) -> bool:
        """Whether any layer in ``[index, len)`` holds ``key``."""
        return any(key in layer for _, layer in self._scan(index))

    def contains_key_local(self, key: _types.K) -> bool:
        """Whether the local layer holds ``key``."""
        return bool(self._layers) and key in self._layers[0]

    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)  # type: ignore[arg-type]

    def __getitem__(self, key: _types.K) -> _types.V:
        """
        Return the value for ``key``, which must resolve in some layer.

        Raises:
            ContextKeyError: If no layer holds ``key`` (including when the
                manager has no layers).
        """
        _, value = self._find(0, key)
        if value is _MISSING:
            raise ContextKeyError(key)
        return value

    # =========================================================================
    # Mutable handles
    # =========================================================================

    def get_mut(self, key: _types.K) -> _slot.LayerSlot[_types.K, _types.V] | None:
        """
        Return a handle to ``key`` in the most local layer holding it.

        Writing through the handle changes that layer in place. The value
        is not copied into the local layer.

        Example:
            >>> manager = ContextManager.from_pairs({"w": 1})
            >>> manager.get_mut("w").value = 2
            >>> manager["w"]
            2
        """
        return self.get_mut_from(0, key)

    def get_mut_from(
        self,
        index: int,
        key: _types.K,
    ) -> _slot.LayerSlot[_types.K, _types.V] | None:
        """Return a handle to ``key`` searching layers ``[index, len)``."""
        depth, value = self._find(index, key)
        if value is _MISSING:
            return None
        return _slot.LayerSlot(self._layers[depth], key, depth)

    def get_local_mut(self, key: _types.K) -> _slot.LayerSlot[_types.K, _types.V] | None:
        """Return a handle to ``key`` in the local layer only."""
        if not self.contains_key_local(key):
            return None
        return _slot.LayerSlot(self._layers[0], key, 0)

    # =========================================================================
    # Local mutation
    # =========================================================================

    def insert(self, key: _types.K, value: _types.V) -> _types.V | None:
        """
        Associate ``value`` with ``key`` in the local layer, if there is one.

        Returns:
            The previous local value for ``key``, or None. With no layers
            the insert is a no-op and returns None.
        """
        if not self._layers:
            return None
        local = self._layers[0]
        previous = local.get(key)
        local[key] = value
        return previous

    def update(
        self,
        pairs: _abc.Mapping[_types.K, _types.V] | _abc.Iterable[tuple[_types.K, _types.V]],
    ) -> None:
        """
        Add key-value pairs to the local layer.

        If the manager has no layers, a new layer is created from the pairs.
        """
        if not self._layers:
            layer = self._layer_factory()
            layer.update(pairs)
            self.push(layer)
            return
        self._layers[0].update(pairs)

    def remove(self, key: _types.K, default: _typing.Any = None) -> _types.V | None:
        """
        Remove ``key`` from the local layer.

        Returns:
            The removed value, or ``default`` if the manager has no layers
            or the local layer does not hold ``key``.
        """
        if not self._layers:
            return default
        return self._layers[0].pop(key, default)

    def remove_all(self, key: _types.K, default: _typing.Any = None) -> _types.V | None:
        """
        Remove ``key`` from every layer.

        Returns:
            The value get(key) would have returned before the call, or
            ``default`` if no layer held ``key``.

        Example:
            >>> manager = ContextManager.from_layers({"w": 3}, {"w": 2}, {"w": 1})
            >>> manager.remove_all("w")
            3
            >>> manager.contains_key("w")
            False
        """
        visible = _MISSING
        for layer in self._layers:
            removed = layer.pop(key, _MISSING)
            if visible is _MISSING:
                visible = removed
        return default if visible is _MISSING else visible

    # =========================================================================
    # Collapsed views
    # =========================================================================

    def collapse_into(self, target: _abc.MutableMapping[_types.K, _types.V]) -> None:
        """
        Fold every layer into ``target``, most local values winning.

        Layers are applied from least local to most local, so keys already
        in ``target`` are kept only if no layer defines them. Values are
        deep copied.
        """
        for layer in reversed(self._layers):
            target.update(_copy.deepcopy(dict(layer)))

    def collapse(self) -> _frozen.FrozenMapping[_types.K, _types.V]:
        """
        Aggregate all layers into a single read-only snapshot.

        Each key maps to the value an unscoped get() currently returns.
        The snapshot is detached: later changes to the manager do not
        show up in it, and its values are copies.

        Example:
            >>> manager = ContextManager.from_layers({"y": 4, "z": 3}, {"w": 1, "x": 2}, {"y": 3})
            >>> dict(manager.collapse())
            {'y': 4, 'w': 1, 'x': 2, 'z': 3}
        """
        merged: dict[_types.K, _types.V] = {}
        self.collapse_into(merged)
        _logger.debug("Collapsed %d layers into %d keys", len(self._layers), len(merged))
        return _frozen.FrozenMapping(merged)

    def collapse_ordered(self) -> _frozen.FrozenMapping[_types.K, _types.V]:
        """
        Aggregate all layers into a read-only snapshot with sorted keys.

        Raises:
            TypeError: If the keys cannot be ordered against each other.
        """
        merged: dict[_types.K, _types.V] = {}
        self.collapse_into(merged)
        ordered = {key: merged[key] for key in sorted(merged)}  # type: ignore[type-var]
        _logger.debug("Collapsed %d layers into %d ordered keys", len(self._layers), len(ordered))
        return _frozen.FrozenMapping(ordered)

    # =========================================================================
    # Comparison and display
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        """Managers are equal when their layer sequences are equal."""
        if isinstance(other, ContextManager):
            return self._layers == other._layers
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = ", ".join(repr(dict(layer)) for layer in self._layers)
        return f"{type(self).__name__}([{parts}])"
