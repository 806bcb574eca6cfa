"""
contexts - layered key-value lookups

An ordered stack of maps treated as one mapping: lookups fall through
from the local layer to progressively less local layers, while writes
only ever touch the local layer.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("contexts")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from contexts.manager import (  # noqa: E402
    ContextKeyError,
    ContextManager,
    FrozenMapping,
    LayerSlot,
)

__all__ = [
    "__version__",
    "__version_info__",
    "ContextKeyError",
    "ContextManager",
    "FrozenMapping",
    "LayerSlot",
]
