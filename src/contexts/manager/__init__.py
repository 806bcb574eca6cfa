"""
ContextManager: an ordered stack of maps treated as one mapping.

Lookups fall through from the local layer (index 0) toward less local
layers until a value is found. Insertions and removals only touch the
local layer.

Example:
    >>> from contexts.manager import ContextManager
    >>> manager = ContextManager.with_empty()
    >>> manager.insert("red", 255)
    >>> manager.push({"red": 63})
    >>> manager["red"]
    63
    >>> manager.get_from(1, "red")
    255
"""

from contexts.manager._core import ContextKeyError, ContextManager
from contexts.manager._frozen import FrozenMapping
from contexts.manager._slot import LayerSlot

__all__ = ["ContextKeyError", "ContextManager", "FrozenMapping", "LayerSlot"]
