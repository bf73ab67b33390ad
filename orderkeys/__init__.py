from .container import ReorderableContainer, from_keyed, reorderable_set_of
from .errors import (
    EmptyContainer,
    InvalidArgument,
    InvalidBounds,
    InvalidOrderKey,
    NotFound,
    OrderKeysError,
    PrecisionUnavailable,
)
from .generator import after, before, between, generate, initial
from .keys import OrderKey, common_prefix
from .storage import AccessorStorage, KeyStorage, MapStorage

__all__ = [
    "ReorderableContainer",
    "reorderable_set_of",
    "from_keyed",
    "OrderKey",
    "common_prefix",
    "generate",
    "initial",
    "between",
    "before",
    "after",
    "KeyStorage",
    "MapStorage",
    "AccessorStorage",
    "OrderKeysError",
    "InvalidArgument",
    "InvalidBounds",
    "InvalidOrderKey",
    "NotFound",
    "EmptyContainer",
    "PrecisionUnavailable",
]
