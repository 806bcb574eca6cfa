"""
Read-only mapping wrapper.

FrozenMapping gives a read-only view of a layer or of a collapsed
result. It wraps the mapping it is given without copying it, so callers
that need a detached snapshot copy the data first.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import contexts.manager._types as _types


class FrozenMapping(_abc.Mapping, _typing.Generic[_types.K, _types.V]):
    """
    Read-only view of a mapping.

    Example:
        >>> data = {"red": 255}
        >>> frozen = FrozenMapping(data)
        >>> frozen["red"]
        255
        >>> frozen["red"] = 0  # TypeError: immutable
    """

    __slots__ = ("_data",)

    def __init__(self, data: _abc.Mapping[_types.K, _types.V]) -> None:
        """
        Wrap a mapping in a read-only view.

        Args:
            data: The mapping to wrap. Any Mapping is used directly
                  (not copied), other iterables of pairs are converted to dict.
        """
        self._data = data if isinstance(data, _abc.Mapping) else dict(data)

    def __getitem__(self, key: _types.K) -> _types.V:
        return self._data[key]

    def __iter__(self) -> _typing.Iterator[_types.K]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"FrozenMapping({dict(self._data)!r})"

    def __eq__(self, other: object) -> bool:
        """Compare equal to any Mapping with same content."""
        if isinstance(other, _abc.Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        """FrozenMapping is not hashable (values may be mutable)."""
        raise TypeError(f"unhashable type: '{type(self).__name__}'")
